"""
Knowledge Enricher

Maps a Slither finding to an SWC registry entry. The mapping is deliberately
conservative: a missing citation is acceptable, a wrong one is not.

Lookup order:
1. Check identifier table. A check listed with ``None`` has no reliable SWC
   counterpart and resolves to no entry without further matching.
2. Only for check identifiers absent from the table, a short list of
   description phrases.
"""

import logging
from typing import Dict, Optional, Tuple

from .models import KnowledgeEntry
from .swc_registry import SWCRegistry

logger = logging.getLogger(__name__)


CHECK_KNOWLEDGE_MAP: Dict[str, Optional[str]] = {
    # Unambiguous mappings
    'controlled-delegatecall': 'SWC-112',
    'reentrancy-eth': 'SWC-107',
    'reentrancy-no-eth': 'SWC-107',
    'reentrancy-benign': 'SWC-107',
    'reentrancy-events': 'SWC-107',
    'reentrancy-unlimited-gas': 'SWC-107',
    'low-level-calls': 'SWC-104',
    'unchecked-lowlevel': 'SWC-104',
    'unchecked-send': 'SWC-104',
    'tx-origin': 'SWC-115',
    'suicidal': 'SWC-106',
    # Known checks without a reliable canonical entry
    'missing-zero-check': None,
    'naming-convention': None,
    'solc-version': None,
    'pragma': None,
    'events-access': None,
    'events-maths': None,
    'constable-states': None,
    'immutable-states': None,
    'assembly': None,
}

# Phrase heuristics for unrecognized checks, checked in order.
DESCRIPTION_HEURISTICS: Tuple[Tuple[str, str], ...] = (
    ('integer overflow', 'SWC-101'),
    ('underflow', 'SWC-101'),
    ('tx.origin', 'SWC-115'),
    ('reentrancy', 'SWC-107'),
    ('unchecked call', 'SWC-104'),
)


class KnowledgeEnricher:
    """Resolve ``(check, description)`` to a knowledge entry or ``None``."""

    def __init__(self, registry: Optional[SWCRegistry] = None):
        self.registry = registry if registry is not None else SWCRegistry.load()

    def resolve_id(self, check: str, description: str) -> Optional[str]:
        if check in CHECK_KNOWLEDGE_MAP:
            return CHECK_KNOWLEDGE_MAP[check]

        lowered = (description or '').lower()
        for phrase, swc_id in DESCRIPTION_HEURISTICS:
            if phrase in lowered:
                return swc_id
        return None

    def enrich(self, check: str, description: str) -> Optional[KnowledgeEntry]:
        swc_id = self.resolve_id(check, description)
        if swc_id is None:
            return None

        entry = self.registry.get(swc_id)
        if entry is None:
            logger.debug(f"{swc_id} resolved for '{check}' but missing from registry")
            return None

        logger.debug(f"Enriched '{check}' with {swc_id}")
        return entry
