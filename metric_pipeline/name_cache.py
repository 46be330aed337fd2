"""
Metric Pipeline - Entity Name Cache.

Process-lifetime mapping from entity guid to display name. Entries are added
on first successful resolution and never removed; names are assumed stable.
Written only by the name resolver and read only by the aggregator, both from
the single poll task, so no locking is needed.
"""

from typing import Dict, Optional


class EntityNameCache:
    """In-memory guid -> display name map."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    def lookup(self, guid: str) -> Optional[str]:
        """Return the cached name, or None when the guid is unknown."""
        return self._names.get(guid)

    def insert(self, guid: str, name: str) -> None:
        self._names[guid] = name

    def __contains__(self, guid: object) -> bool:
        return guid in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"<EntityNameCache(size={len(self._names)})>"
