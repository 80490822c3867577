"""Tests for domain value objects and enums."""

import pytest

from notifyhub.domain.enums import PermissionLevel, ResourceType
from notifyhub.domain.value_objects import (
    ResourceRef,
    SystemTokenCredential,
    first_missing_scope,
    normalize_scopes,
)

TOKEN_ID = "ckv9x2m8p0000abcd1234"
SECRET = "0123456789abcdef" * 3


# ---- PermissionLevel ----


def test_permission_levels_are_totally_ordered() -> None:
    assert PermissionLevel.READ < PermissionLevel.WRITE < PermissionLevel.ADMIN
    assert PermissionLevel.ADMIN >= PermissionLevel.ADMIN
    assert not PermissionLevel.WRITE > PermissionLevel.ADMIN


def test_permission_level_highest() -> None:
    levels = [PermissionLevel.READ, PermissionLevel.ADMIN, PermissionLevel.WRITE]
    assert PermissionLevel.highest(levels) is PermissionLevel.ADMIN


def test_permission_level_values_lowest_first() -> None:
    assert PermissionLevel.values() == ["read", "write", "admin"]


# ---- ResourceRef ----


def test_resource_ref_of_wire_values() -> None:
    ref = ResourceRef.of("topic", "t1")
    assert ref.resource_type is ResourceType.TOPIC
    assert str(ref) == "topic:t1"
    assert ref == ResourceRef(ResourceType.TOPIC, "t1")


def test_resource_ref_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown resource type"):
        ResourceRef.of("folder", "x")


@pytest.mark.parametrize("resource_id", ["", "x" * 65])
def test_resource_ref_rejects_bad_ids(resource_id: str) -> None:
    with pytest.raises(ValueError):
        ResourceRef(ResourceType.TOPIC, resource_id)


# ---- SystemTokenCredential ----


def test_credential_render_and_parse() -> None:
    credential = SystemTokenCredential(token_id=TOKEN_ID, secret=SECRET)
    bearer = credential.render("sat_")
    assert bearer == f"sat_{TOKEN_ID}.{SECRET}"
    assert SystemTokenCredential.parse(bearer, "sat_") == credential


@pytest.mark.parametrize(
    "bearer",
    [
        None,
        "",
        f"{TOKEN_ID}.{SECRET}",
        f"sat_{TOKEN_ID}{SECRET}",
        f"sat_{TOKEN_ID}.",
        f"sat_.{SECRET}",
        f"sat_{TOKEN_ID}.{SECRET.upper()}",
        f"sat_{TOKEN_ID}.short",
        "eyJhbGciOiJIUzI1NiJ9.payload.sig",
    ],
)
def test_credential_parse_rejects_malformed(bearer: str | None) -> None:
    assert SystemTokenCredential.parse(bearer, "sat_") is None


# ---- scopes ----


def test_normalize_scopes_dedupes_and_keeps_order() -> None:
    assert normalize_scopes([" relay:notify", "system-tokens:read", "relay:notify"]) == [
        "relay:notify",
        "system-tokens:read",
    ]


def test_normalize_scopes_empty() -> None:
    assert normalize_scopes(None) == []
    assert normalize_scopes([]) == []


@pytest.mark.parametrize("scope", ["", "Relay:Notify", "relay notify", "relay::notify"])
def test_normalize_scopes_rejects_invalid(scope: str) -> None:
    with pytest.raises(ValueError, match="Invalid scope"):
        normalize_scopes([scope])


def test_first_missing_scope() -> None:
    assert first_missing_scope([], ["relay:notify"]) is None
    assert first_missing_scope(["relay:notify"], ["relay:notify"]) is None
    assert (
        first_missing_scope(["relay:notify"], ["relay:notify", "system-tokens:read"])
        == "system-tokens:read"
    )
