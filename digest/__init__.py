"""
Slither Digest: normalization, grouping and validated rendering of Slither findings.
"""

from .config_manager import DigestConfig
from .pipeline import AuditReportPipeline, PipelineResult

__all__ = ['AuditReportPipeline', 'DigestConfig', 'PipelineResult']
