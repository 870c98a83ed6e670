"""
Persistence of final reports.
"""

import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def safe_subject_name(subject: str) -> str:
    name = re.sub(r'[^A-Za-z0-9._-]+', '_', (subject or '').strip()).strip('._')
    return name or 'unknown'


class ReportStore:
    """Writes reports to ``<reports_dir>/<subject>/<filename>``."""

    def __init__(self, reports_dir: Union[str, Path] = "./reports", filename: str = "audit-summary.md"):
        self.reports_dir = Path(reports_dir)
        self.filename = filename

    def path_for(self, subject: str) -> Path:
        return self.reports_dir / safe_subject_name(subject) / self.filename

    def save(self, subject: str, markdown: str) -> Path:
        output_path = self.path_for(subject)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(markdown)

        logger.info(f"Report for {subject} written to {output_path}")
        return output_path
