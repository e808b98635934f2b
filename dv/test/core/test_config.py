"""Tests for dv/core/config.py."""

from __future__ import annotations

from pathlib import Path

from dv.core.config import (
    DEFAULT_MANIFEST_FILE,
    DEFAULT_RELEASE_TAG_PREFIX,
    ProjectConfig,
    load_config,
    load_config_or_default,
)
from dv.core.result import Err, Ok


def test_load_config_reads_settings(tmp_path: Path) -> None:
    path = tmp_path / "dv.toml"
    path.write_text(
        """
name = "frobnicator"
authors = ["Jane Doe <jane@example.com>"]
release_tag_prefix = "release-"
quality_check_whitelist = "frobnicator/vendored.py"
sign_tags = true
test_command = ["pytest", "-x"]
""",
        encoding="utf-8",
    )

    result = load_config(path)

    assert isinstance(result, Ok)
    config = result.value
    assert config.name == "frobnicator"
    assert config.authors == ("Jane Doe <jane@example.com>",)
    assert config.release_tag_prefix == "release-"
    assert config.quality_check_whitelist == ("frobnicator/vendored.py",)
    assert config.sign_tags is True
    assert config.test_command == ("pytest", "-x")
    assert config.docs_command is None
    assert config.manifest_file == DEFAULT_MANIFEST_FILE


def test_empty_release_tag_prefix_allowed() -> None:
    config = ProjectConfig.from_dict({"release_tag_prefix": ""})
    assert config.release_tag_prefix == ""


def test_defaults() -> None:
    config = ProjectConfig()
    assert config.release_tag_prefix == DEFAULT_RELEASE_TAG_PREFIX
    assert config.sign_tags is False
    assert config.upload_command is None


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "dv.toml"
    path.write_text("name = ", encoding="utf-8")

    result = load_config(path)

    assert isinstance(result, Err)
    assert "Invalid TOML" in result.error.message
    assert result.error.path == path


def test_load_config_bad_list_type(tmp_path: Path) -> None:
    path = tmp_path / "dv.toml"
    path.write_text("authors = 3\n", encoding="utf-8")

    result = load_config(path)

    assert isinstance(result, Err)
    assert "authors" in result.error.message


def test_load_config_or_default_without_file(tmp_path: Path) -> None:
    assert load_config_or_default(tmp_path / "dv.toml") == Ok(ProjectConfig())


def test_load_config_or_default_with_broken_file(tmp_path: Path) -> None:
    path = tmp_path / "dv.toml"
    path.write_text("[[[", encoding="utf-8")

    assert isinstance(load_config_or_default(path), Err)
