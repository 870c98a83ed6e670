"""
Finding Grouper

Slither emits some checks once per call site even when every site points at
the same underlying issue. This module folds those repeats back into a single
finding. Only checks listed in GROUPABLE_CHECKS are touched; grouping other
checks would hide distinct issues.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Tuple

from .location_deduplicator import merge_locations
from .models import NormalizedFinding

logger = logging.getLogger(__name__)


# One record per call site touching the same parameter
GROUPABLE_CHECKS = frozenset({
    'missing-zero-check',
})


class FindingGrouper:
    """Merges repeated findings of groupable checks"""

    def __init__(self, groupable_checks=GROUPABLE_CHECKS):
        self.groupable_checks = frozenset(groupable_checks)

    def group_key(self, finding: NormalizedFinding) -> Tuple[str, str]:
        return finding.check, finding.primary_symbol

    def group(self, findings: List[NormalizedFinding]) -> List[NormalizedFinding]:
        """
        Merge findings sharing ``(check, primary symbol)`` for groupable checks.

        The merged finding sits at the position of the first-seen instance and
        keeps all of its fields except ``locations``, which becomes the ordered
        union of every instance's locations. Other findings pass through as-is.
        """
        grouped: List[NormalizedFinding] = []
        index_by_key: Dict[Tuple[str, str], int] = {}

        for finding in findings:
            if finding.check not in self.groupable_checks:
                grouped.append(finding)
                continue

            key = self.group_key(finding)
            if key not in index_by_key:
                index_by_key[key] = len(grouped)
                grouped.append(replace(finding, locations=merge_locations(finding.locations)))
                continue

            first = grouped[index_by_key[key]]
            grouped[index_by_key[key]] = replace(
                first,
                locations=merge_locations(first.locations, finding.locations),
            )

        if len(grouped) != len(findings):
            logger.info(f"Grouped {len(findings)} findings into {len(grouped)}")
        return grouped

    def generate_grouping_report(self, original_count: int, grouped_count: int) -> Dict[str, int]:
        """Summary of how many findings were merged"""
        return {
            'original_findings': original_count,
            'grouped_findings': grouped_count,
            'findings_merged': original_count - grouped_count,
        }
