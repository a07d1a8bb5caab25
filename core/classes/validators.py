"""Value predicates used by class trie nodes for open-ended suffixes.

Every predicate is a total function over strings: parsing failures are
reported as ``False`` and never raised.
"""

from __future__ import annotations

import re
from collections.abc import Callable

Predicate = Callable[[str], bool]

_STRING_LENGTHS = frozenset({"px", "full", "screen"})
_SIZE_LABELS = frozenset({"length", "size", "percentage"})
_IMAGE_LABELS = frozenset({"image", "url"})

_ARBITRARY_RE = re.compile(r"\[(?:([a-z-]+):)?(.+)\]", re.IGNORECASE)
_LENGTH_UNIT_RE = re.compile(
    r"\d+(%|px|r?em|[sdl]?v([hwib]|min|max)|pt|pc|in|cm|mm|cap|ch|ex|r?lh|cq(w|h|i|b|min|max))"
    r"|\b(calc|min|max|clamp)\(.+\)|^0\Z",
    re.ASCII,
)
_COLOR_FN_RE = re.compile(r"(rgba?|hsla?|hwb|(ok)?(lab|lch))\(.+\)")
_TSHIRT_RE = re.compile(r"(\d+(\.\d+)?)?(xs|sm|md|lg|xl)", re.ASCII)
_SHADOW_RE = re.compile(
    r"^(inset_)?-?((\d+)?\.?(\d+)[a-z]+|0)_-?((\d+)?\.?(\d+)[a-z]+|0)", re.ASCII
)
_IMAGE_RE = re.compile(
    r"(url|image|image-set|cross-fade|element|(repeating-)?(linear|radial|conic)-gradient)\(.+\)"
)
_FRACTION_RE = re.compile(r"\d+/\d+", re.ASCII)
_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)", re.ASCII)


def is_any(_value: str) -> bool:
    return True


def is_never(_value: str) -> bool:
    return False


def is_integer(value: str) -> bool:
    return _INTEGER_RE.fullmatch(value) is not None


def is_number(value: str) -> bool:
    """Return True for plain ASCII decimals such as ``1``, ``1.5`` or ``.5``."""

    return _NUMBER_RE.fullmatch(value) is not None


def is_percent(value: str) -> bool:
    return value.endswith("%") and is_number(value[:-1])


def is_fraction(value: str) -> bool:
    return _FRACTION_RE.fullmatch(value) is not None


def is_length(value: str) -> bool:
    return is_number(value) or value in _STRING_LENGTHS or is_fraction(value)


def is_tshirt_size(value: str) -> bool:
    return _TSHIRT_RE.fullmatch(value) is not None


def is_shadow(value: str) -> bool:
    return _SHADOW_RE.match(value) is not None


def is_image(value: str) -> bool:
    return _IMAGE_RE.fullmatch(value) is not None


def is_length_only(value: str) -> bool:
    return _LENGTH_UNIT_RE.search(value) is not None and _COLOR_FN_RE.fullmatch(value) is None


def is_arbitrary_value(value: str) -> bool:
    return _ARBITRARY_RE.fullmatch(value) is not None


def matches_arbitrary_value(
    value: str,
    label: str | frozenset[str],
    test_value: Predicate,
) -> bool:
    """Check a ``[label:value]`` or ``[value]`` arbitrary value.

    A present label decides the result on its own; otherwise the bracket
    content is handed to ``test_value``.
    """

    match = _ARBITRARY_RE.fullmatch(value)
    if match is None:
        return False

    found_label = match.group(1)
    if found_label:
        if isinstance(label, str):
            return found_label == label
        return found_label in label
    return test_value(match.group(2))


def is_arbitrary_length(value: str) -> bool:
    return matches_arbitrary_value(value, "length", is_length_only)


def is_arbitrary_number(value: str) -> bool:
    return matches_arbitrary_value(value, "number", is_number)


def is_arbitrary_position(value: str) -> bool:
    return matches_arbitrary_value(value, "position", is_never)


def is_arbitrary_size(value: str) -> bool:
    return matches_arbitrary_value(value, _SIZE_LABELS, is_never)


def is_arbitrary_image(value: str) -> bool:
    return matches_arbitrary_value(value, _IMAGE_LABELS, is_image)


def is_arbitrary_shadow(value: str) -> bool:
    return matches_arbitrary_value(value, "", is_shadow)


VALIDATORS: dict[str, Predicate] = {
    "any": is_any,
    "never": is_never,
    "integer": is_integer,
    "number": is_number,
    "percent": is_percent,
    "length": is_length,
    "tshirt_size": is_tshirt_size,
    "arbitrary_value": is_arbitrary_value,
    "arbitrary_length": is_arbitrary_length,
    "arbitrary_number": is_arbitrary_number,
    "arbitrary_position": is_arbitrary_position,
    "arbitrary_size": is_arbitrary_size,
    "arbitrary_image": is_arbitrary_image,
    "arbitrary_shadow": is_arbitrary_shadow,
}


def resolve_validator(name: str) -> Predicate:
    """Look up a predicate by its registry name."""

    try:
        return VALIDATORS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown validator: {name}") from exc


def list_validator_names() -> list[str]:
    """Return registered validator names in stable order."""

    return sorted(VALIDATORS)
