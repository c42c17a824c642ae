"""
Provider credential registry.
Parses comma-separated keys from env and hands out one key per provider.
"""

from typing import Dict, Iterable, List, Optional


class APIKeyManager:
    """
    Holds the API keys configured for each data provider.

    A provider may be configured with several keys ("key1,key2"); the
    active key is picked by a per-provider index so that a deployment can
    pin a worker to a different key via `select()`.
    """

    def __init__(self):
        self._keys: Dict[str, List[str]] = {}
        self._selected: Dict[str, int] = {}

    def register(self, provider: str, raw_value: Optional[str]) -> None:
        """
        Register the key(s) for a provider.

        Args:
            provider: Internal identifier (e.g. 'FINNHUB')
            raw_value: Raw env value, possibly comma-separated
        """
        if not raw_value:
            self._keys[provider] = []
        else:
            self._keys[provider] = [k.strip() for k in raw_value.split(',') if k.strip()]
        self._selected.setdefault(provider, 0)

    def get(self, provider: str) -> Optional[str]:
        """Return the active key for a provider, or None if none configured."""
        candidates = self._keys.get(provider, [])
        if not candidates:
            return None
        return candidates[self._selected.get(provider, 0) % len(candidates)]

    def select(self, provider: str, index: int) -> None:
        """Pin the key index used for a provider."""
        self._selected[provider] = index

    def has_key(self, provider: str) -> bool:
        return bool(self._keys.get(provider))

    def missing(self, providers: Iterable[str]) -> List[str]:
        """Return the providers (in the given order) that have no key."""
        return [p for p in providers if not self.has_key(p)]

    def key_count(self, provider: str) -> int:
        return len(self._keys.get(provider, []))
