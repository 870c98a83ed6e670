"""
Normalizer for Slither detector output.

Turns the Slither ``--json`` document into RawFinding records and each record
into a NormalizedFinding. Missing fields degrade to empty values; nothing here
drops a finding.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .check_catalog import resolve_title
from .fact_deriver import derive_facts
from .knowledge_enricher import KnowledgeEnricher
from .location_deduplicator import dedupe_locations
from .models import Location, NormalizedFinding, RawFinding, RawLocation

logger = logging.getLogger(__name__)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first_line(source_mapping: Dict[str, Any]) -> Optional[int]:
    lines = _as_list(source_mapping.get('lines'))
    if not lines:
        return None
    try:
        return int(lines[0])
    except (TypeError, ValueError):
        return None


def parse_element(element: Any) -> RawLocation:
    element = _as_dict(element)
    source_mapping = _as_dict(element.get('source_mapping'))
    name = element.get('name')
    filename = source_mapping.get('filename_relative')
    return RawLocation(
        file=str(filename) if filename is not None else None,
        line=_first_line(source_mapping),
        name=str(name) if name is not None else None,
    )


def parse_detector(detector: Any) -> RawFinding:
    detector = _as_dict(detector)
    return RawFinding(
        check=str(detector.get('check') or ''),
        impact=str(detector.get('impact') or ''),
        confidence=str(detector.get('confidence') or ''),
        description=str(detector.get('description') or ''),
        elements=tuple(parse_element(e) for e in _as_list(detector.get('elements'))),
    )


def parse_slither_report(report: Any) -> List[RawFinding]:
    """Extract detector records from a decoded Slither JSON report."""
    results = _as_dict(_as_dict(report).get('results'))
    detectors = _as_list(results.get('detectors'))
    return [parse_detector(d) for d in detectors]


def extract_report_json(text: str) -> Dict[str, Any]:
    """Decode a Slither report, tolerating log lines around the JSON object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return _scan_for_report(text)

    if not isinstance(data, dict):
        raise ValueError("Slither output is not a JSON object")
    return data


def _scan_for_report(text: str) -> Dict[str, Any]:
    # Detector log lines carry Solidity braces (call{value: ...}), so every '{' is a candidate
    decoder = json.JSONDecoder()
    fallback: Optional[Dict[str, Any]] = None
    last_error: Optional[json.JSONDecodeError] = None

    start_idx = text.find('{')
    if start_idx == -1:
        raise ValueError("No JSON object found in Slither output")

    while start_idx != -1:
        try:
            data, end_idx = decoder.raw_decode(text, start_idx)
        except json.JSONDecodeError as e:
            last_error = e
            start_idx = text.find('{', start_idx + 1)
            continue

        if isinstance(data, dict):
            if 'results' in data:
                return data
            if fallback is None:
                fallback = data
        start_idx = text.find('{', end_idx)

    if fallback is not None:
        return fallback
    raise ValueError(f"Could not parse Slither output: {last_error}")


def load_slither_report(path: Union[str, Path]) -> List[RawFinding]:
    """Read a Slither JSON report file and return its detector records."""
    text = Path(path).read_text(encoding='utf-8')
    return parse_slither_report(extract_report_json(text))


class FindingNormalizer:
    """Assemble raw records, derived facts and SWC enrichment into findings."""

    def __init__(self, enricher: Optional[KnowledgeEnricher] = None):
        self.enricher = enricher if enricher is not None else KnowledgeEnricher()

    def normalize(self, raw: RawFinding) -> NormalizedFinding:
        locations = dedupe_locations(
            Location(
                file=element.file or '',
                line=element.line,
                element=element.name or '',
            )
            for element in raw.elements
        )
        return NormalizedFinding(
            check=raw.check,
            title=resolve_title(raw.check),
            severity=raw.impact,
            confidence=raw.confidence,
            description=raw.description,
            locations=locations,
            facts=derive_facts(raw.description),
            knowledge=self.enricher.enrich(raw.check, raw.description),
        )

    def normalize_all(self, raw_findings: List[RawFinding]) -> List[NormalizedFinding]:
        normalized = [self.normalize(raw) for raw in raw_findings]
        logger.debug(f"Normalized {len(normalized)} detector records")
        return normalized
