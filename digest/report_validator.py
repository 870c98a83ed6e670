"""
Validation of generated Markdown reports.

A generated report is accepted only when it is structurally faithful to the
findings it was generated from:

1. Each severity section holds exactly as many finding sub-headings as there
   are findings of that severity.
2. No inline link points at an in-document anchor (``](#...)``). Generators
   tend to invent tables of contents that do not match the content.
3. When any finding has a state write after an external call, the fixed
   sentence for that condition appears verbatim.

Anything else is rejected and the caller falls back to the deterministic
report.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .check_catalog import EXTERNAL_CALL_WRITE_SENTENCE
from .models import NormalizedFinding, Severity


HEADING_RE = re.compile(r'^(#{1,6})\s+(.*?)\s*#*\s*$')
FENCE_RE = re.compile(r'^\s*(```|~~~)')
ANCHOR_LINK_RE = re.compile(r'\]\(\s*#[^)]*\)')
SEVERITY_HEADING_RE = re.compile(
    r'^[^A-Za-z]*'
    r'(high|medium|low|info(?:rmational)?)'
    r'(?:\s+(?:severity|risk|impact))?'
    r'(?:\s+(?:findings?|issues?))?'
    r'\s*(?:\(\s*\d+\s*\))?\s*:?$',
    re.IGNORECASE,
)
SEVERITY_SECTION_MAX_DEPTH = 2
SUBHEADING_DEPTHS = (1, 2)


@dataclass
class ValidationResult:
    """Outcome of validating a generated report"""
    accepted: bool
    issues: List[str] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)


def parse_heading(line: str) -> Optional[Tuple[int, str]]:
    match = HEADING_RE.match(line.rstrip())
    if not match:
        return None
    return len(match.group(1)), match.group(2).strip()


def severity_from_heading(text: str) -> Optional[Severity]:
    match = SEVERITY_HEADING_RE.match(text.replace('*', '').replace('_', ' ').strip())
    if not match:
        return None
    return Severity.from_label(match.group(1))


def count_subheadings(markdown: str) -> Dict[Severity, int]:
    """Count finding sub-headings under each severity section."""
    counts = {severity: 0 for severity in Severity.ordered()}
    current: Optional[Severity] = None
    section_depth = 0
    fence: Optional[str] = None

    for line in markdown.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            if fence is None:
                fence = fence_match.group(1)
            elif fence == fence_match.group(1):
                fence = None
            continue
        if fence is not None:
            continue

        heading = parse_heading(line)
        if heading is None:
            continue
        depth, text = heading

        if depth <= SEVERITY_SECTION_MAX_DEPTH:
            severity = severity_from_heading(text)
            if severity is not None:
                current = severity
                section_depth = depth
                continue

        if current is None:
            continue
        if depth <= section_depth:
            current = None
            continue
        if depth - section_depth in SUBHEADING_DEPTHS:
            counts[current] += 1

    return counts


def expected_counts(findings: List[NormalizedFinding]) -> Dict[Severity, int]:
    counts = {severity: 0 for severity in Severity.ordered()}
    for finding in findings:
        level = finding.severity_level
        if level is not None:
            counts[level] += 1
    return counts


class GeneratedReportValidator:
    """Accept or reject a generated report against the findings it describes."""

    def validate(self, candidate: Optional[str], findings: List[NormalizedFinding]) -> ValidationResult:
        if not candidate or not candidate.strip():
            return ValidationResult(accepted=False, issues=["Generated report is empty"])

        issues: List[str] = []

        found = count_subheadings(candidate)
        wanted = expected_counts(findings)
        for severity in Severity.ordered():
            if found[severity] != wanted[severity]:
                issues.append(
                    f"{severity.value}: expected {wanted[severity]} finding headings, found {found[severity]}"
                )

        anchors = ANCHOR_LINK_RE.findall(candidate)
        if anchors:
            issues.append(f"Contains in-document anchor links: {anchors[:3]}")

        needs_sentence = any(f.facts.state_write_after_external_call for f in findings)
        if needs_sentence and EXTERNAL_CALL_WRITE_SENTENCE not in candidate:
            issues.append("Missing the mandatory external-call-then-write sentence")

        return ValidationResult(
            accepted=not issues,
            issues=issues,
            counts={severity.value: found[severity] for severity in Severity.ordered()},
        )
