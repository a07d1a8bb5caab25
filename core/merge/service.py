"""Process-wide merge service and module-level convenience functions.

The default service is created on first use and lives for the whole process.
Tests replace it through :func:`reset_default_service`.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from core.classes.config_loader import default_merge_config
from core.classes.models import MergeConfig
from core.merge.engine import merge_class_list
from core.merge.lru_cache import LRUCache
from core.naming.registry import ClassNameRegistry, MappingSnapshot


class MergeService:
    """Bundle of immutable config, merge cache and short-name registry."""

    def __init__(self, config: MergeConfig, *, cache: LRUCache | None = None) -> None:
        self._config = config
        self._cache = cache if cache is not None else LRUCache(config.settings.max_cache_size)
        self._registry = ClassNameRegistry(
            self.merge,
            prefix=config.settings.short_name_prefix,
            length=config.settings.short_name_length,
        )

    @property
    def config(self) -> MergeConfig:
        return self._config

    @property
    def cache(self) -> LRUCache:
        return self._cache

    @property
    def registry(self) -> ClassNameRegistry:
        return self._registry

    def merge(self, classes: str) -> str:
        class_list = classes.strip()
        if not class_list:
            return ""

        cached = self._cache.get(class_list)
        if cached is not None:
            return cached

        merged = merge_class_list(class_list, self._config)
        self._cache.set(class_list, merged)
        return merged

    def classify(self, base_class: str) -> tuple[bool, str]:
        return self._config.trie.classify(base_class)

    def short_name(self, classes: str) -> str:
        return self._registry.short_name(classes)

    def register_known_mapping(self, classes: str, name: str) -> None:
        self._registry.register_known_mapping(classes, name)

    def register_known_mappings(
        self, mapping: Mapping[str, str], merged: Mapping[str, str] | None = None
    ) -> None:
        self._registry.register_known_mappings(mapping, merged)

    def snapshot(self) -> MappingSnapshot:
        return self._registry.snapshot()


_service_lock = threading.Lock()
_default_service: MergeService | None = None


def get_default_service() -> MergeService:
    global _default_service
    if _default_service is None:
        with _service_lock:
            if _default_service is None:
                _default_service = MergeService(default_merge_config())
    return _default_service


def reset_default_service(config: MergeConfig | None = None) -> MergeService:
    """Replace the default service with a fresh one (test support)."""

    global _default_service
    with _service_lock:
        _default_service = MergeService(config or default_merge_config())
        return _default_service


def merge(classes: str) -> str:
    return get_default_service().merge(classes)


def classify(base_class: str) -> tuple[bool, str]:
    return get_default_service().classify(base_class)


def short_name(classes: str) -> str:
    return get_default_service().short_name(classes)


def register_known_mapping(classes: str, name: str) -> None:
    get_default_service().register_known_mapping(classes, name)


def register_known_mappings(
    mapping: Mapping[str, str], merged: Mapping[str, str] | None = None
) -> None:
    get_default_service().register_known_mappings(mapping, merged)
