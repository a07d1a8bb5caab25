"""Split a utility class into variant modifiers, important flag and base class."""

from __future__ import annotations

from dataclasses import dataclass

from core.classes.models import MergeSettings

_OPEN_BRACKET = "["
_CLOSE_BRACKET = "]"


@dataclass(frozen=True)
class ParsedClass:
    """One whitespace-free token taken apart.

    ``postfix_position`` indexes into ``base_class`` (for ``text-lg/8`` it
    points at ``/``) and is ``None`` when the token has no postfix value.
    """

    base_class: str
    modifiers: tuple[str, ...]
    has_important: bool
    postfix_position: int | None

    @property
    def classifiable(self) -> str:
        if self.postfix_position is None:
            return self.base_class
        return self.base_class[: self.postfix_position]


def split_modifiers(class_name: str, settings: MergeSettings) -> ParsedClass:
    """Scan ``class_name`` left to right, tracking bracket depth.

    Separators and postfix markers inside ``[...]`` are inert. Only the last
    postfix marker outside brackets counts.
    """

    modifiers: list[str] = []
    bracket_depth = 0
    modifier_start = 0
    postfix_position: int | None = None

    for index, char in enumerate(class_name):
        if char == _OPEN_BRACKET:
            bracket_depth += 1
            continue
        if char == _CLOSE_BRACKET:
            bracket_depth -= 1
            continue
        if bracket_depth != 0:
            continue

        if char == settings.modifier_separator:
            modifiers.append(class_name[modifier_start:index])
            modifier_start = index + 1
            continue
        if char == settings.postfix_modifier:
            postfix_position = index

    base_with_important = class_name[modifier_start:]
    has_important = base_with_important.startswith(settings.important_modifier)
    base_start = modifier_start + 1 if has_important else modifier_start
    base_class = class_name[base_start:]

    if postfix_position is not None and postfix_position > base_start:
        postfix_position -= base_start
    else:
        postfix_position = None

    return ParsedClass(
        base_class=base_class,
        modifiers=tuple(modifiers),
        has_important=has_important,
        postfix_position=postfix_position,
    )


def sort_modifiers(modifiers: tuple[str, ...] | list[str]) -> list[str]:
    """Sort modifiers alphabetically, keeping arbitrary variants as fixed pivots.

    ``hover:focus`` and ``focus:hover`` are equivalent, but the position of a
    ``[&>*]`` style variant relative to its neighbours is significant.
    """

    if len(modifiers) < 2:
        return list(modifiers)

    sorted_modifiers: list[str] = []
    pending: list[str] = []
    for modifier in modifiers:
        if modifier.startswith(_OPEN_BRACKET):
            sorted_modifiers.extend(sorted(pending))
            sorted_modifiers.append(modifier)
            pending = []
            continue
        pending.append(modifier)

    sorted_modifiers.extend(sorted(pending))
    return sorted_modifiers
