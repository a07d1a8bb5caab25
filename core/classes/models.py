"""Data models for merge settings, the class trie and the loaded config document."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from core.classes.trie import ClassTrie


class MergeSettings(BaseModel):
    """Separator characters and limits shared by every merge operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    modifier_separator: str = Field(default=":", min_length=1, max_length=1)
    class_separator: str = Field(default="-", min_length=1, max_length=1)
    important_modifier: str = Field(default="!", min_length=1, max_length=1)
    postfix_modifier: str = Field(default="/", min_length=1, max_length=1)
    max_cache_size: int = Field(default=1000, gt=0)
    short_name_prefix: str = "tw-"
    short_name_length: int = Field(default=7, gt=0, le=27)


class MergeConfigDocument(BaseModel):
    """Raw YAML document before the class definitions are compiled.

    ``theme`` only exists to hold YAML anchors shared by class groups and is
    not interpreted.
    """

    model_config = ConfigDict(extra="forbid")

    settings: MergeSettings = Field(default_factory=MergeSettings)
    theme: dict[str, Any] = Field(default_factory=dict)
    class_groups: dict[str, list[Any]]
    conflicting_class_groups: dict[str, list[str]] = Field(default_factory=dict)


@dataclass(frozen=True)
class MergeConfig:
    """Immutable, process-wide configuration for the merge engine."""

    settings: MergeSettings
    trie: ClassTrie
    conflicting_class_groups: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def conflicts_for(self, group_id: str) -> frozenset[str]:
        return self.conflicting_class_groups.get(group_id, frozenset())
