"""Config loading utilities for the class merge engine."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.classes.models import MergeConfig, MergeConfigDocument, MergeSettings
from core.classes.trie import build_class_trie
from core.utils.errors import ConfigError

logger = logging.getLogger("twmerge.config")

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default_config.yaml")

_default_lock = threading.Lock()
_default_config: MergeConfig | None = None


def load_merge_config(path: Path | None = None) -> MergeConfig:
    """Load, validate and compile a merge config from YAML."""

    config_path = path or DEFAULT_CONFIG_PATH

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {config_path}", path=config_path) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {config_path}", path=config_path) from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}", path=config_path)

    try:
        document = MergeConfigDocument.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config schema: {config_path}", path=config_path) from exc

    try:
        return build_merge_config(document)
    except ValueError as exc:
        raise ConfigError(f"Invalid class groups in {config_path}: {exc}", path=config_path) from exc


def build_merge_config(document: MergeConfigDocument) -> MergeConfig:
    """Compile a validated document into an immutable :class:`MergeConfig`."""

    settings = document.settings
    _check_separators(settings)

    trie = build_class_trie(document.class_groups, separator=settings.class_separator)
    known_groups = trie.group_ids()

    conflicts: dict[str, frozenset[str]] = {}
    for group_id, conflicting in document.conflicting_class_groups.items():
        unknown = sorted(
            name for name in {group_id, *conflicting} if name not in known_groups
        )
        if unknown:
            logger.warning("conflict table references unknown groups: %s", ", ".join(unknown))
        conflicts[group_id] = frozenset(conflicting)

    return MergeConfig(
        settings=settings,
        trie=trie,
        conflicting_class_groups=MappingProxyType(conflicts),
    )


def default_merge_config() -> MergeConfig:
    """Return the shipped config, built once on first use."""

    global _default_config
    if _default_config is None:
        with _default_lock:
            if _default_config is None:
                _default_config = load_merge_config()
    return _default_config


def _check_separators(settings: MergeSettings) -> None:
    markers = {
        "modifier_separator": settings.modifier_separator,
        "class_separator": settings.class_separator,
        "important_modifier": settings.important_modifier,
        "postfix_modifier": settings.postfix_modifier,
    }
    if len(set(markers.values())) != len(markers):
        raise ValueError(f"Separator characters must be distinct: {markers}")
    if "[" in markers.values() or "]" in markers.values():
        raise ValueError("Separator characters must not be brackets")
