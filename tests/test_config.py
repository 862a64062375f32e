"""Tests for local store configuration parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from filestore import ConfigurationError, LocalConfig, LocalFileStore
from filestore.config import parse_bool, parse_mode

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults() -> None:
    """Defaults match conventional file and directory modes."""
    config = LocalConfig()
    assert config.root is None
    assert config.file_perm == 0o644
    assert config.dir_perm == 0o755
    assert config.durable is True
    assert config.strict_paths is False


def test_from_params_parses_modes_and_flags() -> None:
    """String parameters are parsed into typed options."""
    config = LocalConfig.from_params(
        "/data",
        {
            "file_perm": "0640",
            "dir_perm": "0o750",
            "durable": "false",
            "strict_paths": "yes",
        },
    )
    assert config.root == "/data"
    assert config.file_perm == 0o640
    assert config.dir_perm == 0o750
    assert config.durable is False
    assert config.strict_paths is True


def test_from_params_empty_root_means_default() -> None:
    """An empty root string falls back to the working directory."""
    assert LocalConfig.from_params("", {}).root is None


def test_from_params_rejects_unknown_keys() -> None:
    """Unknown options are configuration errors."""
    with pytest.raises(ConfigurationError, match="Unknown local store option"):
        LocalConfig.from_params("/data", {"create_root": "true"})


@pytest.mark.parametrize("raw", ["rw-r--r--", "0999", "17777", ""])
def test_parse_mode_rejects_invalid(raw: str) -> None:
    """Non-octal or out-of-range modes are rejected."""
    with pytest.raises(ConfigurationError):
        parse_mode("file_perm", raw)


def test_parse_bool_rejects_invalid() -> None:
    """Only recognised boolean words are accepted."""
    assert parse_bool("durable", " ON ") is True
    assert parse_bool("durable", "0") is False
    with pytest.raises(ConfigurationError):
        parse_bool("durable", "maybe")


def test_mode_type_checked() -> None:
    """Booleans and strings are not permission bits."""
    with pytest.raises(ConfigurationError):
        LocalConfig(file_perm=True)
    with pytest.raises(ConfigurationError):
        LocalConfig(dir_perm="0755")  # type: ignore[arg-type]


def test_with_options_copies(tmp_path: Path) -> None:
    """with_options returns an updated copy usable by from_config."""
    base = LocalConfig(root=tmp_path)
    strict = base.with_options(strict_paths=True, file_perm=0o600)
    assert base.strict_paths is False
    assert strict.strict_paths is True

    store = LocalFileStore.from_config(strict)
    assert store.config.file_perm == 0o600
    assert store.config.strict_paths is True


def test_from_config_carries_durable(tmp_path: Path) -> None:
    """Stores built from a config keep its durability setting."""
    store = LocalFileStore.from_config(LocalConfig(root=tmp_path, durable=False))
    assert store.config.durable is False
    assert LocalFileStore(root=tmp_path).config.durable is True
