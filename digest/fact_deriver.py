"""
Fact derivation from Slither detector descriptions.

Each fact is a case-insensitive substring match against its own phrase list.
Facts are independent of each other, so adding a phrase for one fact can never
change another.
"""

from typing import Dict, Tuple

from .models import DerivedFacts


FACT_PATTERNS: Dict[str, Tuple[str, ...]] = {
    'state_write_after_external_call': (
        'state variables written after the call',
        'written after the call(s)',
        'state variable written after the call',
    ),
    'mentions_delegatecall': (
        'delegatecall',
    ),
    'mentions_low_level_call': (
        'low level call',
        'low-level call',
    ),
    'non_standard_naming': (
        'is not in mixedcase',
        'is not in capwords',
        'is not in uppercase_with_underscores',
        'naming convention',
    ),
    'missing_zero_address_check': (
        'lacks a zero-check',
        'missing zero address validation',
        'missing zero-address check',
    ),
}


def matches_any(text: str, phrases: Tuple[str, ...]) -> bool:
    lowered = (text or '').lower()
    return any(phrase in lowered for phrase in phrases)


def derive_facts(description: str) -> DerivedFacts:
    """Compute every fact for a description. Never raises."""
    values = {
        name: matches_any(description, phrases)
        for name, phrases in FACT_PATTERNS.items()
    }
    return DerivedFacts(**values)
