"""Tests for tracker settings and environment overrides."""

from __future__ import annotations

import logging

import pytest

from authorlayer.editor.authorship import ClaimPolicy, RangeOwnershipTracker
from authorlayer.services.settings import AuthorshipSettings


def test_defaults():
    settings = AuthorshipSettings()

    assert settings.claim_policy is ClaimPolicy.REPLACE
    assert settings.check_invariants is False
    assert settings.log_level == logging.INFO


def test_policy_strings_are_coerced():
    assert AuthorshipSettings(claim_policy="compatible").claim_policy is ClaimPolicy.COMPATIBLE


def test_unknown_policy_raises():
    with pytest.raises(ValueError, match="expected one of"):
        AuthorshipSettings(claim_policy="last-writer")


def test_env_overrides_are_applied():
    env = {
        "AUTHORLAYER_CLAIM_POLICY": "compatible",
        "AUTHORLAYER_CHECK_INVARIANTS": "yes",
        "AUTHORLAYER_DEBUG_LOGGING": "debug",
    }

    settings = AuthorshipSettings.from_env(env)

    assert settings.claim_policy is ClaimPolicy.COMPATIBLE
    assert settings.check_invariants is True
    assert settings.debug_logging is True
    assert settings.log_level == logging.DEBUG


def test_env_false_values_disable_flags():
    base = AuthorshipSettings(check_invariants=True)

    settings = AuthorshipSettings.from_env({"AUTHORLAYER_CHECK_INVARIANTS": "0"}, base=base)

    assert settings.check_invariants is False
    assert base.check_invariants is True


def test_env_without_overrides_returns_defaults():
    assert AuthorshipSettings.from_env({}) == AuthorshipSettings()


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("AUTHORLAYER_CLAIM_POLICY", "compatible")

    assert AuthorshipSettings.from_env().claim_policy is ClaimPolicy.COMPATIBLE


def test_mapping_round_trip_ignores_unknown_keys():
    settings = AuthorshipSettings.from_mapping(
        {"claim_policy": "compatible", "debug_logging": True, "theme": "dark"}
    )

    assert settings.to_dict() == {
        "claim_policy": "compatible",
        "check_invariants": False,
        "debug_logging": True,
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("false", False), ("0", False), ("off", False), ("true", True), ("YES", True), (1, True), (0, False)],
)
def test_mapping_flags_are_coerced_to_booleans(raw, expected):
    settings = AuthorshipSettings.from_mapping({"check_invariants": raw, "debug_logging": raw})

    assert settings.check_invariants is expected
    assert settings.debug_logging is expected
    assert settings.to_dict()["check_invariants"] is expected


def test_string_false_flag_keeps_tracker_checks_off():
    settings = AuthorshipSettings.from_mapping({"check_invariants": "false", "claim_policy": "compatible"})
    tracker = RangeOwnershipTracker.from_settings(settings, [(0, 5, "alice"), (0, 5, "bob")])

    assert tracker.snapshot() == ((0, 5, "alice"), (0, 5, "bob"))
