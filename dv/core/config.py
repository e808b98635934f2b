"""Typed project configuration.

Settings live in an optional ``dv.toml`` at the project root:

    name = "frobnicator"
    title = "Frobnicator"
    authors = ["Jane Doe <jane@example.com>"]
    release_tag_prefix = "v"
    quality_check_whitelist = ["frobnicator/vendored.py"]

Keys that are not set stay ``None`` here; capability providers fill in
their own defaults when the task library is set up (see ``dv.tasks``).
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_MANIFEST_FILE",
    "DEFAULT_RELEASE_TAG_PREFIX",
    "ConfigError",
    "ProjectConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "dv.toml"
DEFAULT_MANIFEST_FILE = "Manifest.txt"
DEFAULT_RELEASE_TAG_PREFIX = "v"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """User settings for one project."""

    name: str | None = None
    title: str | None = None
    package: str | None = None
    version_file: str | None = None
    authors: tuple[str, ...] = ()
    summary: str | None = None
    description: str | None = None
    licenses: tuple[str, ...] = ()
    release_tag_prefix: str = DEFAULT_RELEASE_TAG_PREFIX
    manifest_file: str = DEFAULT_MANIFEST_FILE
    quality_check_whitelist: tuple[str, ...] = ()
    signing_key: str | None = None
    sign_tags: bool = False
    docs_command: tuple[str, ...] | None = None
    test_command: tuple[str, ...] | None = None
    upload_command: tuple[str, ...] | None = None
    upload_host: str | None = None
    python_version: str | None = None
    post_install_message: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectConfig:
        """Create a config from a parsed TOML mapping.

        Raises:
            TypeError: If a list-valued key holds something else.
        """
        prefix = data.get("release_tag_prefix")
        return cls(
            name=get_str(data, "name"),
            title=get_str(data, "title"),
            package=get_str(data, "package"),
            version_file=get_str(data, "version_file"),
            authors=get_str_list(data, "authors") or (),
            summary=get_str(data, "summary"),
            description=get_str(data, "description"),
            licenses=get_str_list(data, "licenses") or (),
            # An empty prefix is legal (tags like "1.2.0"), so no stripping here.
            release_tag_prefix=prefix if isinstance(prefix, str) else DEFAULT_RELEASE_TAG_PREFIX,
            manifest_file=get_str(data, "manifest_file") or DEFAULT_MANIFEST_FILE,
            quality_check_whitelist=get_str_list(data, "quality_check_whitelist") or (),
            signing_key=get_str(data, "signing_key"),
            sign_tags=bool(get_bool(data, "sign_tags")),
            docs_command=get_str_list(data, "docs_command"),
            test_command=get_str_list(data, "test_command"),
            upload_command=get_str_list(data, "upload_command"),
            upload_host=get_str(data, "upload_host"),
            python_version=get_str(data, "python_version"),
            post_install_message=get_str(data, "post_install_message"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        content = path.read_bytes()
        data = as_str_dict(tomllib.loads(content.decode("utf-8")))
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ProjectConfig, ConfigError]:
    """Load and parse ``dv.toml``.

    Args:
        path: Path to the config file

    Returns:
        Ok(ProjectConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ProjectConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ProjectConfig, ConfigError]:
    """Load config from file, or return the defaults if there is no file.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(ProjectConfig())
    return load_config(path)
