# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Settings Schema Tests
# CopyRight: (c) 1998-2026 Miroslav Sotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Tests for InheritanceSettings validation and loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from petri_inherit.analysis.result import MatchPolicy
from petri_inherit.core.config_schema import (
    ENV_MAX_MARKINGS,
    ENV_PROJECTION,
    ENV_PROTOCOL,
    InheritanceSettings,
    load_settings,
    validate_settings,
)


def test_defaults():
    settings = InheritanceSettings()
    assert settings.protocol_enabled is True
    assert settings.projection_enabled is True
    assert settings.max_markings == 100_000
    assert settings.max_seconds is None
    assert settings.protocol_match_policy is MatchPolicy.FIRST
    assert settings.projection_match_policy is MatchPolicy.ANY


def test_settings_are_frozen():
    settings = InheritanceSettings()
    with pytest.raises(ValidationError):
        settings.protocol_enabled = False


def test_unknown_key_rejected():
    with pytest.raises(ValidationError):
        validate_settings({"protocolEnabled": False})


@pytest.mark.parametrize("bad", [{"max_markings": 0}, {"max_seconds": -1.0}])
def test_budget_must_be_positive(bad):
    with pytest.raises(ValidationError):
        validate_settings(bad)


def test_policy_strings_normalized():
    settings = validate_settings({"protocol_match_policy": " ALL "})
    assert settings.protocol_match_policy is MatchPolicy.ALL


def test_unknown_policy_rejected():
    with pytest.raises(ValidationError):
        validate_settings({"projection_match_policy": "most"})


class TestLoadSettings:
    def test_empty_environment_gives_defaults(self):
        assert load_settings(environ={}) == InheritanceSettings()

    def test_file_then_env_then_overrides(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"protocol_enabled": False, "max_markings": 50}))
        env = {ENV_PROTOCOL: "yes", ENV_MAX_MARKINGS: "75"}

        from_file = load_settings(path, environ={})
        assert from_file.protocol_enabled is False
        assert from_file.max_markings == 50

        with_env = load_settings(path, environ=env)
        assert with_env.protocol_enabled is True
        assert with_env.max_markings == 75

        with_override = load_settings(path, environ=env, max_markings=10, projection_enabled=None)
        assert with_override.max_markings == 10
        assert with_override.projection_enabled is True

    @pytest.mark.parametrize("raw, expected", [("0", False), ("off", False), ("TRUE", True), ("on", True)])
    def test_env_flags(self, raw, expected):
        settings = load_settings(environ={ENV_PROJECTION: raw})
        assert settings.projection_enabled is expected

    def test_invalid_env_flag(self):
        with pytest.raises(ValueError, match=ENV_PROTOCOL):
            load_settings(environ={ENV_PROTOCOL: "maybe"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv(ENV_PROTOCOL, "0")
        assert load_settings().protocol_enabled is False
