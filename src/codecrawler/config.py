"""Application and crawler configuration defaults."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from codecrawler.exceptions import ConfigError

DEFAULT_BATCH_SIZE = 100
MAX_CONTENT_BYTES = 10 * 1024 * 1024

DEFAULT_DIRECTORIES_TO_EXCLUDE = frozenset(
    {".svn", ".git", ".hg", ".idea", "target", "node_modules"}
)
DEFAULT_FILES_TO_EXCLUDE = frozenset({".project", ".classpath"})
DEFAULT_EXTENSIONS_TO_EXCLUDE = frozenset(
    {
        "class", "jar", "war", "ear", "zip", "gz", "tgz", "bz2", "7z", "rar",
        "png", "jpg", "jpeg", "gif", "bmp", "ico", "pdf", "exe", "dll", "so",
        "o", "a", "pyc", "bin",
    }
)
DEFAULT_EXTENSIONS_TO_READ = frozenset(
    {
        "java", "js", "ts", "py", "c", "h", "cpp", "hpp", "cs", "go", "rs",
        "rb", "php", "pl", "sh", "bat", "sql", "xml", "html", "htm", "css",
        "json", "yml", "yaml", "properties", "txt", "md", "csv", "gradle",
        "toml", "ini", "cfg",
    }
)


def _get_default_db_path() -> Path:
    """Get the default database path for the current working directory."""
    # Prefer a local data/ database when running from a checkout
    local_db = Path("data/codecrawler.db")
    if local_db.exists():
        return local_db
    return Path.home() / ".codecrawler" / "codecrawler.db"


def _string_set(name: str, values: Iterable[str]) -> frozenset[str]:
    if isinstance(values, str):
        raise ConfigError(f"{name} must be a list of strings, not a string")
    result = frozenset(values)
    bad = sorted(repr(value) for value in result if not isinstance(value, str))
    if bad:
        raise ConfigError(f"{name} must only contain strings, got {', '.join(bad)}")
    return result


def _normalize_extensions(values: frozenset[str]) -> frozenset[str]:
    return frozenset(value.lower().lstrip(".") for value in values)


@dataclass(frozen=True, slots=True)
class CrawlerConfig:
    """Immutable settings snapshot used for one crawl run."""

    directories_to_exclude: frozenset[str] = DEFAULT_DIRECTORIES_TO_EXCLUDE
    files_to_exclude: frozenset[str] = DEFAULT_FILES_TO_EXCLUDE
    files_to_include: frozenset[str] = frozenset()
    extensions_to_exclude: frozenset[str] = DEFAULT_EXTENSIONS_TO_EXCLUDE
    extensions_to_read: frozenset[str] = DEFAULT_EXTENSIONS_TO_READ
    batch_size: int = DEFAULT_BATCH_SIZE
    max_content_bytes: int = MAX_CONTENT_BYTES

    def __post_init__(self) -> None:
        for name in ("directories_to_exclude", "files_to_exclude", "files_to_include"):
            object.__setattr__(self, name, _string_set(name, getattr(self, name)))
        for name in ("extensions_to_exclude", "extensions_to_read"):
            values = _string_set(name, getattr(self, name))
            object.__setattr__(self, name, _normalize_extensions(values))
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.max_content_bytes < 0:
            raise ConfigError(
                f"max_content_bytes must not be negative, got {self.max_content_bytes}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CrawlerConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown crawler settings: {', '.join(unknown)}")
        try:
            return cls(**dict(data))
        except TypeError as exc:
            raise ConfigError(f"Invalid crawler settings: {exc}") from exc

    def with_overrides(self, **changes: Any) -> "CrawlerConfig":
        """Return a copy with the non-None ``changes`` applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def load_crawler_config(path: Path) -> CrawlerConfig:
    """Read the ``[crawler]`` table of a TOML settings file."""
    try:
        with Path(path).open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    section = data.get("crawler", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[crawler] in {path} must be a table")
    return CrawlerConfig.from_mapping(section)


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
