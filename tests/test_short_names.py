from __future__ import annotations

import base64
import hashlib
from collections.abc import Iterator

import pytest

from core.merge import service
from core.naming.registry import ClassNameRegistry, derive_short_name


@pytest.fixture(autouse=True)
def fresh_service() -> Iterator[None]:
    service.reset_default_service()
    yield
    service.reset_default_service()


def test_derive_short_name_is_sha1_urlsafe_prefix() -> None:
    digest = hashlib.sha1(b"p-4").digest()
    expected = "tw-" + base64.urlsafe_b64encode(digest).decode("ascii")[:7]

    assert derive_short_name("p-4") == expected
    assert derive_short_name("p-4", prefix="x-", length=4) == "x-" + expected[3:7]


def test_short_name_depends_on_merged_value() -> None:
    first = service.short_name("px-2 p-4")
    second = service.short_name("p-4")

    assert first == second
    assert first.startswith("tw-")
    assert len(first) == len("tw-") + 7


def test_short_name_is_stable_across_calls_and_whitespace() -> None:
    assert service.short_name("p-4 m-2") == service.short_name("  p-4 m-2 ")
    assert service.short_name("p-4 m-2") != service.short_name("p-4 m-3")


def test_registry_records_both_tables() -> None:
    name = service.short_name("px-2 p-4")
    default = service.get_default_service()

    assert default.registry.lookup("px-2 p-4") == name
    assert default.registry.merged_for(name) == "p-4"
    snapshot = default.snapshot()
    assert snapshot.raw_to_name == {"px-2 p-4": name}
    assert snapshot.name_to_merged == {name: "p-4"}


def test_known_mapping_short_circuits_hashing() -> None:
    service.register_known_mapping("p-4 m-2", "btn")

    assert service.short_name("p-4 m-2") == "btn"
    assert service.get_default_service().registry.merged_for("btn") == "p-4 m-2"


def test_register_known_mappings_bulk() -> None:
    service.register_known_mappings({"p-2 p-4": "pad", " m-1 ": "gap"})
    registry = service.get_default_service().registry

    assert registry.lookup("m-1") == "gap"
    assert registry.merged_for("pad") == "p-4"
    assert len(registry) == 2


def test_register_known_mappings_keeps_given_merged_values() -> None:
    calls: list[str] = []
    registry = ClassNameRegistry(lambda raw: calls.append(raw) or raw.upper())

    registry.register_known_mappings(
        {"p-2 p-4": "pad", "m-1": "gap"}, merged={"pad": "px-9 custom"}
    )

    assert calls == ["m-1"]
    assert registry.merged_for("pad") == "px-9 custom"
    assert registry.merged_for("gap") == "M-1"


def test_snapshot_is_a_copy() -> None:
    registry = ClassNameRegistry(lambda raw: raw)
    registry.short_name("a b")
    snapshot = registry.snapshot()

    registry.short_name("c d")

    assert len(snapshot.raw_to_name) == 1
    assert len(registry) == 2


def test_clear_empties_both_tables() -> None:
    registry = ClassNameRegistry(lambda raw: raw, prefix="cls-", length=5)
    name = registry.short_name("a b")
    assert name.startswith("cls-")
    assert len(name) == len("cls-") + 5

    registry.clear()

    assert registry.lookup("a b") is None
    assert registry.merged_for(name) is None
    assert len(registry) == 0
