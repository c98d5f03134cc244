"""Run settings for SmartBOM: research models, engine pacing and logging.

Settings come from ``.smartbom/config.toml`` and ``SMARTBOM_*`` environment
variables, validated by :class:`SmartBOMConfig`.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from smartbom.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = ".smartbom"
DEFAULT_CONFIG_FILE = "config.toml"
ENV_PREFIX = "SMARTBOM_"


class SmartBOMConfig(BaseModel):
    """Validated settings for one enrichment run.

    Every field can be set from the environment, e.g. ``SMARTBOM_BATCH_SIZE=5``.
    """

    project_dir: Path = Field(default_factory=lambda: Path.cwd())

    # Research service
    alternatives_model: str = "perplexity/sonar-reasoning-pro"
    suppliers_model: str = "perplexity/sonar-deep-research"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8000, gt=0)
    alternatives_timeout: float = Field(default=60.0, gt=0)
    suppliers_timeout: float = Field(default=120.0, gt=0)
    template_dir: Optional[Path] = None

    # Engine
    max_attempts: int = Field(default=3, ge=1, le=10)
    base_retry_delay: float = Field(default=1.0, ge=0)
    supplier_call_delay: float = Field(default=1.0, ge=0)
    batch_size: int = Field(default=3, ge=1)
    batch_delay: float = Field(default=2.0, ge=0)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = {"extra": "ignore"}

    def prompt_dir(self) -> Optional[Path]:
        """Return *template_dir* resolved against *project_dir*, if set."""
        if self.template_dir is None:
            return None
        return self.project_dir / self.template_dir


# TOML tables written by ``smartbom init``.  Loading accepts keys at the top
# level or inside any table.
SECTIONS: dict[str, tuple[str, ...]] = {
    "research": (
        "alternatives_model",
        "suppliers_model",
        "alternatives_timeout",
        "suppliers_timeout",
    ),
    "engine": (
        "max_attempts",
        "base_retry_delay",
        "supplier_call_delay",
        "batch_size",
        "batch_delay",
    ),
    "logging": ("log_level",),
}


def _read_toml(path: Path) -> dict:
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
    settings: dict = {}
    for key, value in raw.items():
        if isinstance(value, dict):
            settings.update(value)
        else:
            settings[key] = value
    return settings


def _env_settings() -> dict:
    known = SmartBOMConfig.model_fields
    return {
        name: value
        for name, value in (
            (key.removeprefix(ENV_PREFIX).lower(), value)
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        )
        if name in known
    }


def load_config(config_path: Path | None = None, project_dir: Path | None = None) -> SmartBOMConfig:
    """Build the configuration for a run.

    Settings are layered: model defaults, then the TOML file (an explicit
    *config_path*, else ``<project_dir>/.smartbom/config.toml`` if present),
    then ``SMARTBOM_*`` environment variables.

    Raises:
        ConfigurationError: If an explicit *config_path* is missing, the TOML
            is malformed, or a value fails validation.
    """
    project = project_dir or Path.cwd()
    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")
    path = config_path or project / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE

    settings: dict = {"project_dir": project}
    if path.exists():
        settings.update(_read_toml(path))
    settings.update(_env_settings())
    try:
        return SmartBOMConfig(**settings)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _toml_value(value: object) -> str:
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return repr(value)


def default_config_toml() -> str:
    """Render the starter ``config.toml`` from the model defaults."""
    defaults = SmartBOMConfig.model_fields
    lines = ["# SmartBOM configuration"]
    for section, names in SECTIONS.items():
        lines.append("")
        lines.append(f"[{section}]")
        lines.extend(f"{name} = {_toml_value(defaults[name].default)}" for name in names)
        if section == "research":
            lines.append('# template_dir = ".smartbom/templates"')
    return "\n".join(lines) + "\n"
