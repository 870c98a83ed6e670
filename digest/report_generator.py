"""
Deterministic Markdown report generation for Slither findings.

The output depends only on the finding list: no timestamps, no dict-order or
set-order dependence. It is the reference that generated reports are checked
against and the fallback whenever they fail that check.
"""

from collections import OrderedDict
from typing import Dict, List

from .check_catalog import EXTERNAL_CALL_WRITE_SENTENCE, resolve_guidance
from .models import Location, NormalizedFinding, Severity


def no_issues_message(subject: str) -> str:
    return f"✅ No vulnerabilities found by Slither for contract {subject}."


def severity_heading(label: str) -> str:
    return f"# {label} Severity"


class ReportGenerator:
    """Render grouped findings as a Markdown report."""

    def generate_markdown_report(self, subject: str, findings: List[NormalizedFinding]) -> str:
        if not findings:
            return no_issues_message(subject)

        sections = []
        for label, section_findings in self.group_by_severity(findings).items():
            sections.append(self._render_section(label, section_findings))

        return "\n".join(sections).rstrip("\n") + "\n"

    def group_by_severity(self, findings: List[NormalizedFinding]) -> "OrderedDict[str, List[NormalizedFinding]]":
        """
        Bucket findings by severity in report order, preserving input order.

        Canonical severities come first in High, Medium, Low, Informational
        order. Labels outside that set follow, in order of first appearance.
        """
        canonical: Dict[Severity, List[NormalizedFinding]] = {s: [] for s in Severity.ordered()}
        other: "OrderedDict[str, List[NormalizedFinding]]" = OrderedDict()

        for finding in findings:
            level = finding.severity_level
            if level is not None:
                canonical[level].append(finding)
            else:
                label = finding.severity.strip() or 'Unknown'
                other.setdefault(label, []).append(finding)

        ordered: "OrderedDict[str, List[NormalizedFinding]]" = OrderedDict()
        for severity in Severity.ordered():
            if canonical[severity]:
                ordered[severity.value] = canonical[severity]
        for label, bucket in other.items():
            ordered[label] = bucket
        return ordered

    def _render_section(self, label: str, findings: List[NormalizedFinding]) -> str:
        content = f"{severity_heading(label)}\n\n"
        for finding in findings:
            content += self._render_finding(finding)
        return content

    def _render_finding(self, finding: NormalizedFinding) -> str:
        lines = [f"## {finding.title}", ""]

        primary_file = finding.primary_file
        lines.append(f"- **File:** `{primary_file}`" if primary_file else "- **File:** unknown")

        if len(finding.locations) == 1:
            lines.append(f"- **Location:** {self._format_location(finding.locations[0])}")
        elif len(finding.locations) > 1:
            lines.append(f"- **Locations ({len(finding.locations)}):**")
            for location in finding.locations:
                lines.append(f"  - {self._format_location(location, primary_file)}")

        lines.append(f"- **Confidence:** {finding.confidence or 'Unknown'}")
        lines.append("")

        risk, remediation = resolve_guidance(finding.check, finding.description)
        lines.append(f"**Risk:** {risk}")
        lines.append("")
        if finding.facts.state_write_after_external_call:
            lines.append(EXTERNAL_CALL_WRITE_SENTENCE)
            lines.append("")
        lines.append(f"**Remediation:** {remediation}")
        lines.append("")

        if finding.knowledge is not None:
            lines.extend(self._render_knowledge(finding))

        return "\n".join(lines) + "\n"

    def _render_knowledge(self, finding: NormalizedFinding) -> List[str]:
        entry = finding.knowledge
        lines = [f"**Reference ({entry.id}): {entry.title}**", ""]
        if entry.remediation:
            lines.append(f"> {entry.remediation}")
            lines.append("")
        if entry.references:
            for url in entry.references:
                lines.append(f"- <{url}>")
            lines.append("")
        return lines

    def _format_location(self, location: Location, primary_file: str = "") -> str:
        text = f"`{location.element}`" if location.element else "`<unnamed>`"
        if location.line is not None:
            text += f" (line {location.line})"
        if primary_file and location.file and location.file != primary_file:
            text += f" in `{location.file}`"
        return text
