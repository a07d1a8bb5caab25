"""Conflict-resolving merge of a whitespace-delimited utility class list."""

from __future__ import annotations

from dataclasses import dataclass

from core.classes.models import MergeConfig
from core.merge.splitter import sort_modifiers, split_modifiers

ModifierSignature = tuple[str, ...]
CandidateKey = tuple[str, ModifierSignature]


@dataclass(frozen=True)
class _Survivor:
    index: int
    token: str


def merge_class_list(class_list: str, config: MergeConfig) -> str:
    """Merge ``class_list`` so that later classes win over conflicting earlier ones.

    Rules:
    - unrecognized tokens pass through untouched;
    - a recognized token replaces an earlier token of the same group and
      modifier signature;
    - a recognized token erases earlier tokens of the groups it conflicts with,
      under the same modifier signature only;
    - survivors keep the input position of the token that survived.
    """

    settings = config.settings
    passthrough: list[_Survivor] = []
    candidates: dict[CandidateKey, _Survivor | None] = {}

    for index, token in enumerate(class_list.split()):
        parsed = split_modifiers(token, settings)
        is_recognized, group_id = config.trie.classify(parsed.classifiable)
        if not is_recognized:
            passthrough.append(_Survivor(index=index, token=token))
            continue

        signature = modifier_signature(parsed.modifiers, parsed.has_important, config)
        candidates[(group_id, signature)] = _Survivor(index=index, token=token)

        for conflicting_group in config.conflicts_for(group_id):
            conflict_key = (conflicting_group, signature)
            if conflict_key in candidates:
                candidates[conflict_key] = None

    survivors = passthrough + [item for item in candidates.values() if item is not None]
    survivors.sort(key=lambda item: item.index)
    return " ".join(item.token for item in survivors)


def modifier_signature(
    modifiers: tuple[str, ...], has_important: bool, config: MergeConfig
) -> ModifierSignature:
    """Canonical, order-independent modifier key; important gets its own slot."""

    canonical = sort_modifiers(modifiers)
    if has_important:
        canonical.append(config.settings.important_modifier)
    return tuple(canonical)
