"""Decoding of authorship payloads delivered by the collaboration transport."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

import jsonschema

from ..core.intervals import AuthorshipClaim, AuthorshipInterval
from ..editor.changes import ChangeSet, TextChange

__all__ = [
    "CLAIM_SCHEMA",
    "CHANGE_SET_SCHEMA",
    "TRANSACTION_SCHEMA",
    "PayloadValidationError",
    "decode_change_set",
    "decode_claim",
    "decode_transaction",
    "encode_claim",
    "encode_partition",
]

MAX_SCHEMA_ERRORS = 25

_OFFSET = {"type": "integer", "minimum": 0}

CLAIM_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "from": _OFFSET,
        "to": _OFFSET,
        "userId": {"type": "string", "minLength": 1},
    },
    "required": ["from", "to", "userId"],
}

_CHANGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "from": _OFFSET,
        "to": _OFFSET,
        "insert": {"type": "string"},
    },
    "required": ["from", "to"],
}

CHANGE_SET_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"changes": {"type": "array", "items": _CHANGE_SCHEMA}},
    "required": ["changes"],
}

TRANSACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "changes": {"type": "array", "items": _CHANGE_SCHEMA},
        "claims": {"type": "array", "items": CLAIM_SCHEMA},
    },
}


class PayloadValidationError(ValueError):
    """Raised when an inbound payload does not match its schema."""

    def __init__(self, kind: str, messages: Sequence[str]) -> None:
        summary = "; ".join(messages) if messages else "invalid payload"
        super().__init__(f"Invalid {kind} payload: {summary}")
        self.kind = kind
        self.messages = tuple(messages)


def decode_claim(payload: Mapping[str, Any] | str | bytes) -> AuthorshipClaim:
    """Validate ``payload`` and return the claim it describes.

    Structural checks only: an empty or reversed span still decodes so the
    tracker can reject it with a precise reason.
    """

    data = _validate(payload, CLAIM_SCHEMA, "claim")
    return AuthorshipClaim(data["from"], data["to"], data["userId"])


def decode_change_set(payload: Mapping[str, Any] | str | bytes) -> ChangeSet:
    data = _validate(payload, CHANGE_SET_SCHEMA, "change")
    return _build_change_set(data["changes"])


def decode_transaction(
    payload: Mapping[str, Any] | str | bytes,
) -> tuple[ChangeSet | None, tuple[AuthorshipClaim, ...]]:
    """Return the ``(changes, claims)`` pair carried by a transaction payload."""

    data = _validate(payload, TRANSACTION_SCHEMA, "transaction")
    changes = _build_change_set(data["changes"]) if "changes" in data else None
    claims = tuple(AuthorshipClaim(item["from"], item["to"], item["userId"]) for item in data.get("claims", ()))
    return changes, claims


def encode_claim(claim: AuthorshipClaim) -> dict[str, Any]:
    return {"from": claim.start, "to": claim.end, "userId": claim.owner_id}


def encode_partition(intervals: Iterable[AuthorshipInterval]) -> list[dict[str, Any]]:
    """Serialize a partition in the same shape as inbound claims."""

    return [{"from": item.start, "to": item.end, "userId": item.owner_id} for item in intervals]


def _build_change_set(entries: Iterable[Mapping[str, Any]]) -> ChangeSet:
    return ChangeSet(TextChange(entry["from"], entry["to"], entry.get("insert", "")) for entry in entries)


def _validate(payload: Mapping[str, Any] | str | bytes, schema: dict[str, Any], kind: str) -> Any:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise PayloadValidationError(kind, [f"{exc.msg} (line {exc.lineno}, column {exc.colno})"]) from exc

    validator = jsonschema.Draft202012Validator(schema)
    errors: list[str] = []
    for issue in validator.iter_errors(payload):
        path = _format_schema_path(issue.absolute_path)
        errors.append(f"{path}: {issue.message}" if path else issue.message)
        if len(errors) >= MAX_SCHEMA_ERRORS:
            errors.append("Too many validation errors; stopping early.")
            break
    if errors:
        raise PayloadValidationError(kind, errors)
    return payload


def _format_schema_path(path: Sequence[Any]) -> str:
    if not path:
        return ""
    components: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            if components:
                components[-1] = f"{components[-1]}[{segment}]"
            else:
                components.append(f"[{segment}]")
        else:
            components.append(str(segment))
    return ".".join(filter(None, components))
