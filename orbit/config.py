"""
Typed configuration model with precedence-based loader.

Precedence (lowest to highest):
    defaults < config file (YAML) < env vars < CLI flags

Sections validate themselves on construction and raise
``ConfigurationError``.  The loader is lenient: a config file that cannot be
parsed, or a section that fails validation, falls back to that section's
defaults with a logged warning.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from orbit.errors import ConfigurationError
from orbit.llm.schemas import AGENT_CONFIG_SCHEMA, LLM_CONFIG_SCHEMA
from orbit.validation import validate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------

@dataclass
class LLMConfig:
    base_url: str = "https://api.minimax.io"
    chat_path: str = "/v1/text/chatcompletion_v2"
    model: str = "MiniMax-M2.1"
    api_key_env: str = "MINIMAX_API_KEY"

    def __post_init__(self) -> None:
        result = validate(LLM_CONFIG_SCHEMA, asdict(self))
        if not result:
            raise ConfigurationError(result.errors)


@dataclass
class AgentConfig:
    max_history_length: int = 50
    max_tool_iterations: int = 10
    temperature: float = 0.7
    max_tokens: int = 4096
    timeout_ms: int = 60_000
    system_message: str = ""

    def __post_init__(self) -> None:
        errors = validate(AGENT_CONFIG_SCHEMA, asdict(self)).errors
        # Range checks never fail for NaN.
        if isinstance(self.temperature, float) and not math.isfinite(self.temperature):
            errors.append(f"temperature: {self.temperature!r} is not a finite number")
        if errors:
            raise ConfigurationError(errors)

    def updated(self, **changes: Any) -> AgentConfig:
        """Return a validated copy with *changes* applied.  ``None`` means unchanged."""
        changes = {k: v for k, v in changes.items() if v is not None}
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError([f"unknown option: {k}" for k in sorted(unknown)])
        return dataclasses.replace(self, **changes)


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

@dataclass
class OrbitConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)

    def api_key(self) -> str:
        return os.environ.get(self.llm.api_key_env, "")

    def has_api_key(self) -> bool:
        return bool(self.api_key())

    def to_dict(self) -> dict:
        return asdict(self)


def validate_config(cfg: OrbitConfig) -> list[str]:
    """Return every problem with *cfg*, including a missing API key."""
    errors: list[str] = []
    for name, schema in (("llm", LLM_CONFIG_SCHEMA), ("agent", AGENT_CONFIG_SCHEMA)):
        result = validate(schema, asdict(getattr(cfg, name)))
        errors.extend(f"{name}.{e}" for e in result.errors)
    if not cfg.has_api_key():
        errors.append(f"API key is required (set {cfg.llm.api_key_env})")
    return errors


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _set_dotpath(raw: dict, dotpath: str, value: Any) -> None:
    """Walk raw via dotpath, creating sections, and set the final key."""
    parts = dotpath.split(".")
    for part in parts[:-1]:
        nxt = raw.get(part)
        if not isinstance(nxt, dict):
            nxt = raw[part] = {}
        raw = nxt
    raw[parts[-1]] = value


def _deep_merge(base: dict, overlay: dict) -> dict:
    """Recursively merge overlay into base, returning a new dict."""
    merged = dict(base)
    for k, v in overlay.items():
        if k in merged and isinstance(merged[k], dict) and isinstance(v, dict):
            merged[k] = _deep_merge(merged[k], v)
        else:
            merged[k] = v
    return merged


def _coerce(value: str, target_type: type) -> Any:
    """Coerce a string env value to the target type."""
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _build_section(cls: type, raw: Any) -> Any:
    """Build a section from a raw dict, ignoring unknown keys.

    Falls back to the section defaults when the values are invalid.
    """
    if not isinstance(raw, dict):
        raw = {}
    valid_fields = {f.name for f in fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    try:
        return cls(**filtered)
    except ConfigurationError as e:
        logger.warning("Invalid %s settings, using defaults: %s", cls.__name__, e)
        return cls()


def _read_file(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read config file %s, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    return data


# ---------------------------------------------------------------------------
# ENV var mapping
# ---------------------------------------------------------------------------

_ENV_MAP: dict[str, tuple[str, type]] = {
    "ORBIT_LLM_BASE_URL":               ("llm.base_url", str),
    "ORBIT_LLM_CHAT_PATH":              ("llm.chat_path", str),
    "ORBIT_LLM_MODEL":                  ("llm.model", str),
    "ORBIT_LLM_API_KEY_ENV":            ("llm.api_key_env", str),
    "ORBIT_AGENT_TEMPERATURE":          ("agent.temperature", float),
    "ORBIT_AGENT_MAX_TOKENS":           ("agent.max_tokens", int),
    "ORBIT_AGENT_TIMEOUT_MS":           ("agent.timeout_ms", int),
    "ORBIT_AGENT_MAX_HISTORY":          ("agent.max_history_length", int),
    "ORBIT_AGENT_MAX_TOOL_ITERATIONS":  ("agent.max_tool_iterations", int),
    "ORBIT_AGENT_SYSTEM_MESSAGE":       ("agent.system_message", str),
}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> OrbitConfig:
    """
    Build an OrbitConfig by layering sources in precedence order:

        defaults  <  config file  <  env vars  <  CLI flags

    Parameters
    ----------
    config_path : path to YAML config file (optional)
    cli_overrides : dict of dotpath -> value CLI flag overrides
    """
    raw: dict[str, Any] = {}

    # --- 1. Config file ---
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.is_file():
            raw = _deep_merge(raw, _read_file(p))

    # --- 2. Env var overrides ---
    for env_var, (dotpath, target_type) in _ENV_MAP.items():
        val = os.environ.get(env_var)
        if val is None:
            continue
        try:
            _set_dotpath(raw, dotpath, _coerce(val, target_type))
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid %s", env_var, val, target_type.__name__)

    # --- 3. CLI flag overrides ---
    if cli_overrides:
        for dotpath, value in cli_overrides.items():
            if value is not None:
                _set_dotpath(raw, dotpath, value)

    return OrbitConfig(
        llm=_build_section(LLMConfig, raw.get("llm")),
        agent=_build_section(AgentConfig, raw.get("agent")),
    )
