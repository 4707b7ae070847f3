"""Settings dataclass and environment override helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from ..editor.authorship import ClaimPolicy

__all__ = ["AuthorshipSettings"]

LOGGER = logging.getLogger(__name__)
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_ENV_OVERRIDES: Mapping[str, str] = {
    "AUTHORLAYER_CLAIM_POLICY": "claim_policy",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "AUTHORLAYER_CHECK_INVARIANTS": "check_invariants",
    "AUTHORLAYER_DEBUG_LOGGING": "debug_logging",
}


@dataclass(slots=True)
class AuthorshipSettings:
    """Host-tunable behaviour of the authorship tracker."""

    claim_policy: ClaimPolicy = ClaimPolicy.REPLACE
    check_invariants: bool = False
    debug_logging: bool = False

    def __post_init__(self) -> None:
        self.claim_policy = ClaimPolicy.from_value(self.claim_policy)
        self.check_invariants = _coerce_flag(self.check_invariants)
        self.debug_logging = _coerce_flag(self.debug_logging)

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug_logging else logging.INFO

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> AuthorshipSettings:
        """Build settings from a plain mapping, ignoring unknown keys."""

        known = {key: payload[key] for key in ("claim_policy", "check_invariants", "debug_logging") if key in payload}
        return cls(**known)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        base: AuthorshipSettings | None = None,
    ) -> AuthorshipSettings:
        """Return ``base`` (or defaults) with ``AUTHORLAYER_*`` overrides applied."""

        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for env_key, attr in _ENV_OVERRIDES.items():
            value = env.get(env_key)
            if value:
                overrides[attr] = value
        for env_key, attr in _BOOL_ENV_OVERRIDES.items():
            value = env.get(env_key)
            if value is not None:
                overrides[attr] = _coerce_flag(value)
        if overrides:
            LOGGER.debug("Applying environment overrides: %s", sorted(overrides))
        settings = base if base is not None else cls()
        return replace(settings, **overrides)

    def to_dict(self) -> dict[str, Any]:
        return {
            "claim_policy": self.claim_policy.value,
            "check_invariants": self.check_invariants,
            "debug_logging": self.debug_logging,
        }


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)
