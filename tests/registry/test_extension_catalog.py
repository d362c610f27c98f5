"""Tests for the extension catalog and identifier detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from depsmith.exceptions import ConfigError
from depsmith.registry import ExtensionCatalog, ExtensionInfo, is_extension_id

REDIS_ID = "ECC268AA-4B25-4DBC-A57CA2E7A929A83E"
H2_ID = "465E1E35-2425-4F4E-8B3FAB638BD7280A"


@pytest.mark.parametrize(
    "value,expected",
    [
        (REDIS_ID, True),
        ("123e4567-e89b-12d3-a456-426614174000", True),
        ("0123456789abcdef0123456789ABCDEF", True),
        ("redis", False),
        ("ECC268AA-4B25", False),
        ("", False),
    ],
)
def test_is_extension_id(value: str, expected: bool) -> None:
    assert is_extension_id(value) is expected


class TestBundledCatalog:
    def test_resolves_slug_name_and_alias(self) -> None:
        catalog = ExtensionCatalog.load_default()
        assert catalog.resolve_id("redis") == REDIS_ID
        assert catalog.resolve_id("Redis Driver") == REDIS_ID
        assert catalog.resolve_id("REDIS-CACHE") == REDIS_ID
        assert catalog.resolve_id("h2database") == H2_ID

    def test_ids_pass_through(self) -> None:
        catalog = ExtensionCatalog.load_default()
        assert catalog.resolve_id(f"  {H2_ID} ") == H2_ID

    def test_unknown_and_blank(self) -> None:
        catalog = ExtensionCatalog.load_default()
        assert catalog.resolve_id("does-not-exist") is None
        assert catalog.resolve_id("") is None
        assert catalog.resolve_id(None) is None

    def test_entries_are_distinct(self) -> None:
        catalog = ExtensionCatalog.load_default()
        assert len(catalog) == len(catalog.all()) >= 2


class TestUserCatalog:
    def test_user_catalog_overrides_and_adds(self, tmp_path: Path) -> None:
        user = tmp_path / "catalog.yaml"
        user.write_text(
            "extensions:\n"
            "  - id: 11111111-2222-3333-4444444444444444\n"
            "    name: Private Thing\n"
            "    slug: private\n"
            "  - id: 99999999-2222-3333-4444444444444444\n"
            "    name: Redis Fork\n"
            "    slug: redis\n"
        )
        catalog = ExtensionCatalog.load_default(user)
        assert catalog.resolve_id("private") == "11111111-2222-3333-4444444444444444"
        assert catalog.resolve_id("redis") == "99999999-2222-3333-4444444444444444"

    @pytest.mark.parametrize(
        "body",
        ["- just a list\n", "extensions:\n  - name: no id\n", "extensions: {}\n"],
    )
    def test_bad_shape_raises(self, tmp_path: Path, body: str) -> None:
        user = tmp_path / "catalog.yaml"
        user.write_text(body)
        with pytest.raises(ConfigError):
            ExtensionCatalog.load_default(user)

    def test_unreadable_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Could not read"):
            ExtensionCatalog.load_default(tmp_path / "missing.yaml")


def test_info_keys_are_normalized() -> None:
    info = ExtensionInfo(id=REDIS_ID, name=" Redis Driver ", slug="Redis", aliases=("", "RC"))
    assert info.keys == ["redis driver", "redis", "rc"]
