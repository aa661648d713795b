# ─────────────────────────────────────────────────────────────────────
# Petri Inherit — Configuration Schema
# © 1998–2026 Miroslav Šotek. All rights reserved.
# ─────────────────────────────────────────────────────────────────────
"""
Strict schema validation for inheritance-check settings using Pydantic.
Settings are immutable once validated and are passed explicitly to the
resolver on every call.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..analysis.result import MatchPolicy

ENV_PROTOCOL = "PETRI_INHERIT_PROTOCOL"
ENV_PROJECTION = "PETRI_INHERIT_PROJECTION"
ENV_MAX_MARKINGS = "PETRI_INHERIT_MAX_MARKINGS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class InheritanceSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    protocol_enabled: bool = True
    projection_enabled: bool = True
    max_markings: int = Field(default=100_000, gt=0)
    max_seconds: Optional[float] = Field(default=None, gt=0)
    protocol_match_policy: MatchPolicy = MatchPolicy.FIRST
    projection_match_policy: MatchPolicy = MatchPolicy.ANY

    @field_validator("protocol_match_policy", "projection_match_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v: Any):
        if isinstance(v, str):
            return v.strip().lower()
        return v


def validate_settings(config_dict: Mapping[str, Any]) -> InheritanceSettings:
    """Validate a raw settings dictionary and return InheritanceSettings."""
    return InheritanceSettings.model_validate(dict(config_dict))


def _env_flag(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of 1/0, true/false, yes/no, on/off; got '{value}'")


def load_settings(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> InheritanceSettings:
    """Build settings from an optional JSON file, environment, then overrides.

    Later sources win.  ``overrides`` with a value of None are ignored so
    unset CLI options fall through to the file and environment.
    """
    raw: Dict[str, Any] = {}
    if path is not None:
        raw.update(json.loads(Path(path).read_text(encoding="utf-8")))

    env = os.environ if environ is None else environ
    if ENV_PROTOCOL in env:
        raw["protocol_enabled"] = _env_flag(ENV_PROTOCOL, env[ENV_PROTOCOL])
    if ENV_PROJECTION in env:
        raw["projection_enabled"] = _env_flag(ENV_PROJECTION, env[ENV_PROJECTION])
    if ENV_MAX_MARKINGS in env:
        raw["max_markings"] = int(env[ENV_MAX_MARKINGS])

    raw.update({k: v for k, v in overrides.items() if v is not None})
    return validate_settings(raw)
