"""
Data model for the Slither digest pipeline.

Raw detector records come in, normalized findings go out. Every object here is
created fresh for a single pipeline run and never shared between runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Severity(Enum):
    """Slither impact levels, in report order."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFORMATIONAL = "Informational"

    @classmethod
    def ordered(cls) -> List['Severity']:
        return [cls.HIGH, cls.MEDIUM, cls.LOW, cls.INFORMATIONAL]

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional['Severity']:
        """Map a free-form impact label onto a severity, or None if unknown."""
        if not label:
            return None
        normalized = str(label).strip().lower()
        if normalized == 'info':
            return cls.INFORMATIONAL
        for severity in cls:
            if severity.value.lower() == normalized:
                return severity
        return None


@dataclass(frozen=True)
class RawLocation:
    """One element of a detector record, as reported by Slither."""
    file: Optional[str] = None
    line: Optional[int] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class RawFinding:
    """One detector record from `results.detectors`."""
    check: str
    impact: str
    confidence: str
    description: str
    elements: Tuple[RawLocation, ...] = ()


@dataclass(frozen=True)
class Location:
    """A (file, line, element) triple. Equality covers all three fields."""
    file: str
    line: Optional[int]
    element: str

    def to_dict(self) -> Dict[str, Any]:
        return {'file': self.file, 'line': self.line, 'element': self.element}


@dataclass(frozen=True)
class DerivedFacts:
    """Boolean signals extracted from a detector description."""
    state_write_after_external_call: bool = False
    mentions_delegatecall: bool = False
    mentions_low_level_call: bool = False
    non_standard_naming: bool = False
    missing_zero_address_check: bool = False


@dataclass(frozen=True)
class KnowledgeEntry:
    """A canonical knowledge base entry (SWC registry)."""
    id: str
    title: str
    remediation: str
    references: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'remediation': self.remediation,
            'references': list(self.references),
        }


@dataclass
class NormalizedFinding:
    """Canonical finding shape used by the grouper, renderer and validator."""
    check: str
    title: str
    severity: str
    confidence: str
    description: str
    locations: List[Location] = field(default_factory=list)
    facts: DerivedFacts = field(default_factory=DerivedFacts)
    knowledge: Optional[KnowledgeEntry] = None

    @property
    def severity_level(self) -> Optional[Severity]:
        return Severity.from_label(self.severity)

    @property
    def primary_location(self) -> Optional[Location]:
        return self.locations[0] if self.locations else None

    @property
    def primary_file(self) -> str:
        primary = self.primary_location
        return primary.file if primary else ""

    @property
    def primary_symbol(self) -> str:
        primary = self.primary_location
        return primary.element if primary else ""

    def to_prompt_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view handed to the candidate text generator."""
        return {
            'check': self.check,
            'title': self.title,
            'impact': self.severity,
            'confidence': self.confidence,
            'description': self.description,
            'locations': [loc.to_dict() for loc in self.locations],
            'swc': self.knowledge.to_dict() if self.knowledge else None,
        }
