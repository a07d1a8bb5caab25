"""Arena-backed classifier trie mapping utility class names to group ids.

Nodes live in one tuple and reference children by integer index, so a built
trie is an immutable value that every thread can share without locking.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from core.classes.validators import Predicate, resolve_validator

ARBITRARY_PROPERTY_PREFIX = "arbitrary.."
_VALIDATOR_PREFIX = "@"
_ARBITRARY_PROPERTY_RE = re.compile(r"\[(.+)\]")


@dataclass(frozen=True)
class ClassValidator:
    """Predicate over the remaining class segments plus the group it asserts."""

    name: str
    predicate: Predicate
    group_id: str


@dataclass(frozen=True)
class TrieNode:
    children: Mapping[str, int]
    validators: tuple[ClassValidator, ...]
    group_id: str


class ClassTrie:
    """Static classification trie.

    Lookup prefers literal continuation over validators: validators of a node
    are consulted only when descending into the literal child did not reach a
    terminal group.
    """

    ROOT = 0

    def __init__(self, nodes: Sequence[TrieNode], *, separator: str = "-") -> None:
        if not nodes:
            raise ValueError("Class trie requires at least a root node")
        self._nodes = tuple(nodes)
        self._separator = separator

    @property
    def separator(self) -> str:
        return self._separator

    def __len__(self) -> int:
        return len(self._nodes)

    def classify(self, base_class: str) -> tuple[bool, str]:
        """Return ``(is_recognized, group_id)`` for a base class name."""

        parts = base_class.split(self._separator)
        if parts and parts[0] == "":
            parts = parts[1:]

        group_id = self._lookup(parts, 0, self.ROOT)
        if group_id is not None:
            return True, group_id

        return _classify_arbitrary_property(base_class)

    def group_ids(self) -> set[str]:
        """Collect every group id reachable as a terminal or through a validator."""

        found: set[str] = set()
        for node in self._nodes:
            if node.group_id:
                found.add(node.group_id)
            found.update(validator.group_id for validator in node.validators)
        return found

    def _lookup(self, parts: list[str], index: int, node_index: int) -> str | None:
        node = self._nodes[node_index]
        if index >= len(parts):
            return node.group_id or None

        child_index = node.children.get(parts[index])
        if child_index is not None:
            found = self._lookup(parts, index + 1, child_index)
            if found is not None:
                return found

        if not node.validators:
            return None

        remaining = self._separator.join(parts[index:])
        for validator in node.validators:
            if validator.predicate(remaining):
                return validator.group_id
        return None


def _classify_arbitrary_property(base_class: str) -> tuple[bool, str]:
    match = _ARBITRARY_PROPERTY_RE.fullmatch(base_class)
    if match is None:
        return False, ""

    property_name, colon, _ = match.group(1).partition(":")
    if not colon or not property_name:
        return False, ""
    # Two dots never appear in real group ids, so synthetic groups cannot collide.
    return True, f"{ARBITRARY_PROPERTY_PREFIX}{property_name}"


class _NodeDraft:
    __slots__ = ("children", "validators", "group_id")

    def __init__(self) -> None:
        self.children: dict[str, int] = {}
        self.validators: list[ClassValidator] = []
        self.group_id = ""


class ClassTrieBuilder:
    """Compile class group definitions into a :class:`ClassTrie`.

    A definition is one of:

    - ``""``: the current node itself is a member of the group;
    - ``"a-b"``: a literal path below the current node, split on the separator;
    - ``"@name"``: a registered validator appended to the current node;
    - ``{"prefix": [definitions]}``: definitions scoped below a literal path;
    - a list of definitions, flattened recursively.
    """

    def __init__(self, *, separator: str = "-") -> None:
        self._separator = separator
        self._drafts: list[_NodeDraft] = [_NodeDraft()]

    def add_group(self, group_id: str, definitions: Sequence[Any]) -> None:
        if not group_id:
            raise ValueError("Class group id must not be empty")
        self._add_definitions(ClassTrie.ROOT, group_id, definitions)

    def build(self) -> ClassTrie:
        nodes = [
            TrieNode(
                children=MappingProxyType(dict(draft.children)),
                validators=tuple(draft.validators),
                group_id=draft.group_id,
            )
            for draft in self._drafts
        ]
        return ClassTrie(nodes, separator=self._separator)

    def _add_definitions(self, node_index: int, group_id: str, definitions: Any) -> None:
        if isinstance(definitions, (list, tuple)):
            for definition in definitions:
                self._add_definitions(node_index, group_id, definition)
            return

        if isinstance(definitions, dict):
            for prefix, nested in definitions.items():
                if not isinstance(prefix, str):
                    raise ValueError(
                        f"Class group '{group_id}' has a non-string prefix: {prefix!r}"
                    )
                child_index = self._walk(node_index, prefix)
                self._add_definitions(child_index, group_id, nested)
            return

        if not isinstance(definitions, str):
            raise ValueError(
                f"Class group '{group_id}' has an unsupported definition: {definitions!r}"
            )

        if definitions.startswith(_VALIDATOR_PREFIX):
            name = definitions[len(_VALIDATOR_PREFIX) :]
            validator = ClassValidator(
                name=name,
                predicate=resolve_validator(name),
                group_id=group_id,
            )
            self._drafts[node_index].validators.append(validator)
            return

        target_index = self._walk(node_index, definitions)
        self._drafts[target_index].group_id = group_id

    def _walk(self, node_index: int, path: str) -> int:
        if path == "":
            return node_index

        current = node_index
        for part in path.split(self._separator):
            draft = self._drafts[current]
            child_index = draft.children.get(part)
            if child_index is None:
                child_index = len(self._drafts)
                self._drafts.append(_NodeDraft())
                draft.children[part] = child_index
            current = child_index
        return current


def build_class_trie(
    class_groups: Mapping[str, Sequence[Any]], *, separator: str = "-"
) -> ClassTrie:
    """Build a trie from ``{group_id: [definitions]}`` in declaration order."""

    builder = ClassTrieBuilder(separator=separator)
    for group_id, definitions in class_groups.items():
        builder.add_group(group_id, definitions)
    return builder.build()
