"""
Slither digest pipeline.

Sequences normalization, grouping and rendering for one subject (a contract
address or name):

    raw records -> FindingNormalizer -> FindingGrouper -> ReportGenerator
                                                       \\-> generator + GeneratedReportValidator

The deterministic report is always built. A generated report replaces it only
when the generator answers in time and the validator accepts the answer.
Nothing is shared between runs, so runs for different subjects can proceed
concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .candidate_generators import CandidateTextSource, build_summary_prompt
from .config_manager import DigestConfig
from .finding_grouper import FindingGrouper
from .knowledge_enricher import KnowledgeEnricher
from .models import NormalizedFinding, RawFinding
from .normalizer import FindingNormalizer, parse_slither_report
from .report_generator import ReportGenerator
from .report_store import ReportStore
from .report_validator import GeneratedReportValidator, ValidationResult
from .swc_registry import SWCRegistry

logger = logging.getLogger(__name__)

SOURCE_DETERMINISTIC = "deterministic"
SOURCE_GENERATED = "generated"


@dataclass
class PipelineResult:
    """Final report of a pipeline run and how it was produced."""
    subject: str
    markdown: str
    source: str
    findings: List[NormalizedFinding] = field(default_factory=list)
    validation: Optional[ValidationResult] = None
    fallback_reason: str = ""
    report_path: Optional[str] = None
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def used_generator_output(self) -> bool:
        return self.source == SOURCE_GENERATED


class AuditReportPipeline:
    """Turns Slither detector records into a Markdown report."""

    def __init__(
        self,
        config: Optional[DigestConfig] = None,
        generator: Optional[CandidateTextSource] = None,
        enricher: Optional[KnowledgeEnricher] = None,
        store: Optional[ReportStore] = None,
    ):
        self.config = config or DigestConfig()
        self.generator = generator
        if enricher is None:
            registry = SWCRegistry.load(self.config.swc_registry_path or None)
            enricher = KnowledgeEnricher(registry)
        self.normalizer = FindingNormalizer(enricher)
        self.grouper = FindingGrouper()
        self.renderer = ReportGenerator()
        self.validator = GeneratedReportValidator()
        self.store = store

    def prepare_findings(self, raw_findings: List[RawFinding]) -> List[NormalizedFinding]:
        normalized = self.normalizer.normalize_all(raw_findings)
        return self.grouper.group(normalized)

    def run(self, subject: str, raw_findings: List[RawFinding]) -> PipelineResult:
        """Run the pipeline synchronously."""
        findings = self.prepare_findings(raw_findings)
        deterministic = self.renderer.generate_markdown_report(subject, findings)

        candidate: Optional[str] = None
        reason = self._skip_reason(findings)
        if not reason:
            candidate, reason = self._call_generator(subject, findings)

        return self._finish(subject, raw_findings, findings, deterministic, candidate, reason)

    async def run_async(self, subject: str, raw_findings: List[RawFinding]) -> PipelineResult:
        """Run the pipeline, awaiting the generator call in a worker thread."""
        findings = self.prepare_findings(raw_findings)
        deterministic = self.renderer.generate_markdown_report(subject, findings)

        candidate: Optional[str] = None
        reason = self._skip_reason(findings)
        if not reason:
            prompt = build_summary_prompt(subject, findings)
            try:
                candidate = await asyncio.wait_for(
                    asyncio.to_thread(self.generator.generate, prompt),
                    timeout=self.config.generator_timeout,
                )
            except asyncio.TimeoutError:
                reason = f"generator timed out after {self.config.generator_timeout}s"
                logger.warning(f"{self.generator.name} generation for {subject} failed: {reason}")
            except Exception as e:
                reason = f"generator failed: {e}"
                logger.warning(f"{self.generator.name} generation for {subject} failed: {e}")

        return self._finish(subject, raw_findings, findings, deterministic, candidate, reason)

    def run_report(self, subject: str, report: Dict[str, Any]) -> PipelineResult:
        """Run the pipeline on a decoded Slither JSON document."""
        return self.run(subject, parse_slither_report(report))

    def _skip_reason(self, findings: List[NormalizedFinding]) -> str:
        if self.config.deterministic_only:
            return "deterministic-only mode"
        if not findings:
            return "no findings"
        if self.generator is None:
            return "no generator configured"
        return ""

    def _call_generator(self, subject: str, findings: List[NormalizedFinding]):
        prompt = build_summary_prompt(subject, findings)
        try:
            return self.generator.generate(prompt), ""
        except Exception as e:
            logger.warning(f"{self.generator.name} generation for {subject} failed: {e}")
            return None, f"generator failed: {e}"

    def _finish(
        self,
        subject: str,
        raw_findings: List[RawFinding],
        findings: List[NormalizedFinding],
        deterministic: str,
        candidate: Optional[str],
        reason: str,
    ) -> PipelineResult:
        validation = None
        markdown = deterministic
        source = SOURCE_DETERMINISTIC

        if candidate is not None:
            validation = self.validator.validate(candidate, findings)
            if validation.accepted:
                markdown = candidate
                source = SOURCE_GENERATED
            else:
                reason = "generated report rejected"
                logger.warning(f"Generated report for {subject} rejected: {'; '.join(validation.issues)}")

        logger.info(
            f"{subject}: {len(raw_findings)} records, {len(findings)} findings, "
            f"{source} report" + (f" ({reason})" if reason else "")
        )

        result = PipelineResult(
            subject=subject,
            markdown=markdown,
            source=source,
            findings=findings,
            validation=validation,
            fallback_reason=reason,
            stats=self.grouper.generate_grouping_report(len(raw_findings), len(findings)),
        )
        if self.store is not None:
            result.report_path = str(self.store.save(subject, markdown))
        return result
