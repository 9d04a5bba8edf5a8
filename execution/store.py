"""
execution/store.py - Trader configuration store.

One TraderConfig per authority, each guarded by its own lock. Executions
against the same config are serialized by holding that lock for the whole
checks → effects → interaction sequence; different authorities never block
each other.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from core.exceptions import ErrorCode, StoreError
from core.logging import get_logger
from core.models import TraderConfig

logger = get_logger(__name__)


class TraderConfigStore:
    """In-memory TraderConfig registry with per-authority locks."""

    def __init__(self):
        self._configs: Dict[str, TraderConfig] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def create(self, config: TraderConfig) -> TraderConfig:
        """
        Register a new config.

        Raises:
            StoreError: ALREADY_INITIALIZED if the authority has one
        """
        with self._registry_lock:
            if config.authority in self._configs:
                raise StoreError(
                    f"Trader already initialized for {config.authority}",
                    ErrorCode.ALREADY_INITIALIZED,
                    {"authority": config.authority},
                )
            self._configs[config.authority] = config
            self._locks[config.authority] = threading.Lock()
        logger.debug(f"Trader config stored: {config.authority}")
        return config

    def get(self, authority: str) -> TraderConfig:
        """
        Live config for authority. Mutate only while holding locked().

        Raises:
            StoreError: TRADER_NOT_FOUND
        """
        with self._registry_lock:
            config = self._configs.get(authority)
        if config is None:
            raise StoreError(
                f"No trader config for {authority}",
                ErrorCode.TRADER_NOT_FOUND,
                {"authority": authority},
            )
        return config

    @contextmanager
    def locked(self, authority: str) -> Iterator[TraderConfig]:
        """Hold the authority's lock and yield its live config."""
        config = self.get(authority)
        with self._locks[authority]:
            yield config

    def snapshot(self, authority: str) -> Dict[str, Any]:
        """Consistent point-in-time view of a config."""
        with self.locked(authority) as config:
            return config.to_dict()

    def authorities(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._configs)

    def __contains__(self, authority: str) -> bool:
        with self._registry_lock:
            return authority in self._configs

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._configs)
