"""Typed configuration loading for release.toml.

Every endpoint, literal name and command the pipeline uses lives here so the
steps can be pointed at stub collaborators in tests.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "BuildConfig",
    "ConfigError",
    "FormulaConfig",
    "PipelineConfig",
    "ProductConfig",
    "ReleaseConfig",
    "TimeoutsConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_URL_TEMPLATE",
]

DEFAULT_CONFIG_NAME = "release.toml"

DEFAULT_URL_TEMPLATE = "https://github.com/{repo}/releases/download/{version}/{asset}"

DEFAULT_COMPILE = ("cargo", "build", "--release")
DEFAULT_TEST = ("make", "test")
DEFAULT_LINT = ("make", "clippy")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProductConfig:
    """What gets built and how the archive is named."""

    name: str = "product"
    platform: str = "mac"
    binary: str = "target/release/product"
    dist_dir: str = "dist"
    archive_name: str | None = None

    @property
    def resolved_archive_name(self) -> str:
        return self.archive_name or f"{self.name}-{self.platform}.tar.gz"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Commands for the compile, test and lint phases."""

    compile: tuple[str, ...] = DEFAULT_COMPILE
    test: tuple[str, ...] = DEFAULT_TEST
    lint: tuple[str, ...] = DEFAULT_LINT
    # None waits forever; builds are local and operators cancel them.
    phase_timeout: float | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Hosted release settings."""

    repo: str | None = None  # owner/name
    draft: bool = False
    prerelease: bool = True
    content_type: str = "application/gzip"
    token_env: str = "GITHUB_TOKEN"
    tag_pattern: str | None = None


@dataclass(frozen=True, slots=True)
class FormulaConfig:
    """Package-manager formula bump settings."""

    tap: str | None = None
    formula: str | None = None  # e.g. owner/tap/product
    url_template: str = DEFAULT_URL_TEMPLATE
    token_env: str = "HOMEBREW_GITHUB_API_TOKEN"


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Per-call timeouts, in seconds, for network-bound collaborators."""

    api: float = 60.0
    upload: float = 10 * 60.0
    brew: float = 10 * 60.0


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Main configuration container."""

    product: ProductConfig = field(default_factory=ProductConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    formula: FormulaConfig = field(default_factory=FormulaConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PipelineConfig:
        """Create PipelineConfig from parsed TOML.

        Missing keys take their defaults. A key that is present with the
        wrong type or an out-of-range value is rejected.

        Raises:
            ValueError: If a present value has the wrong shape.
        """
        product = _section(data, "product")
        build = _section(data, "build")
        release = _section(data, "release")
        formula = _section(data, "formula")
        timeouts = _section(data, "timeouts")

        defaults = cls()
        name = _text(product, "product.name") or defaults.product.name

        tag_pattern = _text(release, "release.tag_pattern")
        if tag_pattern is not None:
            try:
                re.compile(tag_pattern)
            except re.error as e:
                raise ValueError(f"release.tag_pattern is not a valid regex: {e}") from e

        url_template = _text(formula, "formula.url_template") or DEFAULT_URL_TEMPLATE
        if "{version}" not in url_template:
            raise ValueError("formula.url_template must contain {version}")

        return cls(
            product=ProductConfig(
                name=name,
                platform=_text(product, "product.platform") or defaults.product.platform,
                binary=_text(product, "product.binary") or f"target/release/{name}",
                dist_dir=_text(product, "product.dist_dir") or defaults.product.dist_dir,
                archive_name=_text(product, "product.archive_name"),
            ),
            build=BuildConfig(
                compile=_command(build, "compile", DEFAULT_COMPILE),
                test=_command(build, "test", DEFAULT_TEST),
                lint=_command(build, "lint", DEFAULT_LINT),
                phase_timeout=_seconds(build, "build.phase_timeout"),
            ),
            release=ReleaseConfig(
                repo=_text(release, "release.repo"),
                draft=_flag(release, "release.draft", defaults.release.draft),
                prerelease=_flag(release, "release.prerelease", defaults.release.prerelease),
                content_type=(
                    _text(release, "release.content_type") or defaults.release.content_type
                ),
                token_env=_text(release, "release.token_env") or defaults.release.token_env,
                tag_pattern=tag_pattern,
            ),
            formula=FormulaConfig(
                tap=_text(formula, "formula.tap"),
                formula=_text(formula, "formula.formula"),
                url_template=url_template,
                token_env=_text(formula, "formula.token_env") or defaults.formula.token_env,
            ),
            timeouts=TimeoutsConfig(
                api=_seconds_or(timeouts, "timeouts.api", defaults.timeouts.api),
                upload=_seconds_or(timeouts, "timeouts.upload", defaults.timeouts.upload),
                brew=_seconds_or(timeouts, "timeouts.brew", defaults.timeouts.brew),
            ),
        )


def _section(data: Mapping[str, object], key: str) -> StrDict:
    if key not in data:
        return {}
    table = get_table(data, key)
    if table is None:
        raise ValueError(f"[{key}] must be a table")
    return table


def _key(dotted: str) -> str:
    return dotted.rsplit(".", 1)[-1]


def _text(table: Mapping[str, object], dotted: str) -> str | None:
    key = _key(dotted)
    if key not in table:
        return None
    if not isinstance(table[key], str):
        raise ValueError(f"{dotted} must be a string")
    # Blank strings count as unset.
    return get_str(table, key)


def _command(table: Mapping[str, object], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if key not in table:
        return default
    cmd = get_str_list(table, key)
    if not cmd:
        raise ValueError(f"build.{key} must be a non-empty list of strings")
    return tuple(cmd)


def _flag(table: Mapping[str, object], dotted: str, default: bool) -> bool:
    key = _key(dotted)
    if key not in table:
        return default
    value = get_bool(table, key)
    if value is None:
        raise ValueError(f"{dotted} must be true or false")
    return value


def _seconds(table: Mapping[str, object], dotted: str) -> float | None:
    key = _key(dotted)
    if key not in table:
        return None
    value = get_float(table, key)
    if value is None or value <= 0:
        raise ValueError(f"{dotted} must be a positive number of seconds")
    return value


def _seconds_or(table: Mapping[str, object], dotted: str, default: float) -> float:
    value = _seconds(table, dotted)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
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


def load_config(path: Path) -> Result[PipelineConfig, ConfigError]:
    """Load and validate pipeline configuration from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(PipelineConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(PipelineConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[PipelineConfig, ConfigError]:
    """Like load_config, but a missing file yields the defaults."""
    if not path.exists():
        return Ok(PipelineConfig())
    return load_config(path)
