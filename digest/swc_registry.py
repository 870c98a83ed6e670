"""
Read-only access to the SWC knowledge base.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .models import KnowledgeEntry

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent / 'data' / 'swc_registry.yaml'


class SWCRegistry:
    """SWC entries keyed by their stable identifier (e.g. ``SWC-107``)."""

    def __init__(self, entries: Optional[Dict[str, KnowledgeEntry]] = None):
        self._entries: Dict[str, KnowledgeEntry] = dict(entries or {})

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'SWCRegistry':
        """Load a registry from a YAML file (the bundled one by default)."""
        registry_path = Path(path) if path else DEFAULT_REGISTRY_PATH
        with open(registry_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"SWC registry {registry_path} is not a mapping of entries")

        entries = {}
        for swc_id, raw in data.items():
            if not isinstance(raw, dict):
                logger.debug(f"Skipping malformed registry entry {swc_id}")
                continue
            entries[str(swc_id)] = cls._build_entry(str(swc_id), raw)

        logger.debug(f"Loaded {len(entries)} SWC entries from {registry_path}")
        return cls(entries)

    @staticmethod
    def _build_entry(swc_id: str, raw: Dict[str, Any]) -> KnowledgeEntry:
        references = raw.get('references') or []
        if isinstance(references, str):
            references = [references]
        return KnowledgeEntry(
            id=swc_id,
            title=str(raw.get('title', swc_id)).strip(),
            remediation=' '.join(str(raw.get('remediation', '')).split()),
            references=tuple(str(ref) for ref in references),
        )

    def get(self, swc_id: str) -> Optional[KnowledgeEntry]:
        return self._entries.get(swc_id)

    def ids(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, swc_id: str) -> bool:
        return swc_id in self._entries
