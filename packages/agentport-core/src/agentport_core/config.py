from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from agentport_core.errors import ConfigError

_INDEX_SOURCES = ("source", "target")


def _load_toml(path: Path) -> dict:
    """Load a TOML file, returning empty dict if missing."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (1 level deep for TOML sections)."""
    merged = dict(base)
    for key, val in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(val, dict)
        ):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


@dataclass(frozen=True, slots=True)
class PathsConfig:
    source_dir: str = "agents"
    target_dir: str = ".opencode/agent"
    index_path: str = "AGENT_INDEX.md"


@dataclass(frozen=True, slots=True)
class PolicyConfig:
    """Overrides for the conversion policy; ``None`` keeps the built-in value."""
    mode: str | None = None
    temperature: float | None = None
    disabled_capabilities: list[str] | None = None


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    max_description_length: int = 1024


@dataclass(frozen=True, slots=True)
class IndexConfig:
    title: str = "Agent Index"
    source: str = "source"  # source | target
    # category -> keywords; empty means the built-in rules
    categories: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass(frozen=True, slots=True)
class AgentportConfig:
    """Top-level configuration, parsed from agentport.toml."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(
        cls, path: Path | str = "agentport.toml"
    ) -> AgentportConfig:
        path = Path(path)
        raw = _load_toml(path)
        return cls._from_raw(raw)

    @classmethod
    def load(
        cls, project_dir: Path | str | None = None
    ) -> AgentportConfig:
        """Load config with global → project layering.

        Resolution order (later wins):
        1. Built-in defaults
        2. ~/.agentport/config.toml (global)
        3. .agentport/config.toml or agentport.toml (project)
        """
        global_path = Path.home() / ".agentport" / "config.toml"

        project_dir = (
            Path.cwd() if project_dir is None else Path(project_dir)
        )

        # Project config: .agentport/config.toml takes priority
        project_path = project_dir / ".agentport" / "config.toml"
        if not project_path.exists():
            project_path = project_dir / "agentport.toml"

        global_raw = _load_toml(global_path)
        project_raw = _load_toml(project_path)
        merged = _deep_merge(global_raw, project_raw)

        return cls._from_raw(merged)

    @classmethod
    def _from_raw(cls, raw: dict) -> AgentportConfig:
        """Build AgentportConfig from a raw TOML dict."""

        def _pick(section: dict, dc: type) -> dict:
            fields = dc.__dataclass_fields__
            return {
                k: v for k, v in section.items() if k in fields
            }

        index_raw = _pick(raw.get("index", {}), IndexConfig)
        if index_raw.get("source", "source") not in _INDEX_SOURCES:
            msg = (
                f"index.source must be one of {', '.join(_INDEX_SOURCES)}, "
                f"got {index_raw['source']!r}"
            )
            raise ConfigError(msg)
        categories = index_raw.get("categories", {})
        if not isinstance(categories, dict) or not all(
            isinstance(v, list) for v in categories.values()
        ):
            msg = "index.categories must map category names to keyword lists"
            raise ConfigError(msg)

        validation_raw = _pick(raw.get("validation", {}), ValidationConfig)
        max_len = validation_raw.get("max_description_length", 1)
        if isinstance(max_len, bool) or not isinstance(max_len, int) or max_len < 1:
            msg = (
                "validation.max_description_length must be a positive "
                f"integer, got {max_len!r}"
            )
            raise ConfigError(msg)

        return cls(
            paths=PathsConfig(**_pick(raw.get("paths", {}), PathsConfig)),
            policy=PolicyConfig(
                **_pick(raw.get("policy", {}), PolicyConfig)
            ),
            validation=ValidationConfig(**validation_raw),
            index=IndexConfig(**index_raw),
            logging=LoggingConfig(
                **_pick(raw.get("logging", {}), LoggingConfig)
            ),
        )
