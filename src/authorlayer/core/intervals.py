"""Owner-tagged text spans used by the authorship partition."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator

if TYPE_CHECKING:  # pragma: no cover - import only used for annotations
    from ..editor.changes import PositionMapper

MARK_CLASS = "authorship-highlight"
OWNER_ATTRIBUTE = "data-user-id"


def _coerce_offset(value: Any, label: str, owner: str) -> int:
    if isinstance(value, (bool, float)):
        raise ValueError(f"{owner} {label} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{owner} {label} must be an integer") from exc


@dataclass(slots=True, frozen=True)
class AuthorshipInterval:
    """Half-open ``[start, end)`` span last written by ``owner_id``."""

    start: int
    end: int
    owner_id: str

    def __post_init__(self) -> None:
        start = _coerce_offset(self.start, "start", "AuthorshipInterval")
        end = _coerce_offset(self.end, "end", "AuthorshipInterval")
        if start < 0:
            raise ValueError("AuthorshipInterval start must not be negative")
        if end <= start:
            raise ValueError(f"AuthorshipInterval must not be empty (start={start}, end={end})")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)
        object.__setattr__(self, "owner_id", str(self.owner_id))

    def __iter__(self) -> Iterator[Any]:
        yield self.start
        yield self.end
        yield self.owner_id

    @property
    def length(self) -> int:
        """Return the number of characters covered by the interval."""

        return self.end - self.start

    def overlaps(self, start: int, end: int) -> bool:
        """Return ``True`` when the interval shares at least one character with ``[start, end)``."""

        return self.start < end and start < self.end

    def touches(self, start: int, end: int) -> bool:
        """Return ``True`` when the interval only meets ``[start, end)`` at a single boundary."""

        return self.start == end or self.end == start

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    def with_bounds(self, start: int, end: int) -> AuthorshipInterval:
        """Return a copy spanning ``[start, end)`` for the same owner."""

        return AuthorshipInterval(start, end, self.owner_id)

    def to_tuple(self) -> tuple[int, int, str]:
        """Return the interval as a ``(start, end, owner_id)`` tuple."""

        return (self.start, self.end, self.owner_id)

    def to_dict(self) -> dict[str, Any]:
        """Return the interval as a JSON-friendly mapping."""

        return {"start": self.start, "end": self.end, "owner_id": self.owner_id}

    def to_mark(self) -> dict[str, Any]:
        """Return the mark payload consumed by the highlight renderer."""

        return {
            "from": self.start,
            "to": self.end,
            "class": MARK_CLASS,
            "attributes": {OWNER_ATTRIBUTE: self.owner_id},
        }

    def sort_key(self) -> tuple[int, int, str]:
        return (self.start, self.end, self.owner_id)

    @classmethod
    def from_value(cls, value: Any) -> AuthorshipInterval:
        """Coerce ``value`` into an :class:`AuthorshipInterval`."""

        if isinstance(value, AuthorshipInterval):
            return value
        if isinstance(value, Mapping):
            owner = value.get("owner_id", value.get("userId"))
            start = value.get("start", value.get("from"))
            end = value.get("end", value.get("to"))
            if start is None or end is None or owner is None:
                raise ValueError("AuthorshipInterval mappings require start, end and owner_id keys")
            return cls(start, end, owner)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 3:
                raise ValueError("AuthorshipInterval sequences must have exactly three entries")
            return cls(seq[0], seq[1], seq[2])
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        owner = getattr(value, "owner_id", None)
        if start is not None and end is not None and owner is not None:
            return cls(start, end, owner)
        raise TypeError("Unsupported AuthorshipInterval input")


@dataclass(slots=True, frozen=True)
class AuthorshipClaim:
    """Assertion that ``owner_id`` most recently wrote ``[start, end)``.

    Claims arrive from the transport and may be malformed, so unlike
    :class:`AuthorshipInterval` an empty or reversed span is representable.
    The tracker rejects such claims at its boundary.
    """

    start: int
    end: int
    owner_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _coerce_offset(self.start, "start", "AuthorshipClaim"))
        object.__setattr__(self, "end", _coerce_offset(self.end, "end", "AuthorshipClaim"))

    @property
    def is_valid(self) -> bool:
        return 0 <= self.start < self.end and bool(self.owner_id)

    def map(self, mapper: PositionMapper | Callable[[int], int]) -> AuthorshipClaim | None:
        """Rebase the claim over a document change.

        Returns ``None`` when the change deletes the claimed span entirely.
        """

        from ..editor.changes import map_position

        start = map_position(mapper, self.start, -1)
        end = map_position(mapper, self.end, -1)
        if end <= start:
            return None
        return AuthorshipClaim(start, end, self.owner_id)

    def to_interval(self) -> AuthorshipInterval:
        return AuthorshipInterval(self.start, self.end, self.owner_id)

    def to_tuple(self) -> tuple[int, int, str]:
        return (self.start, self.end, self.owner_id)


__all__ = ["AuthorshipClaim", "AuthorshipInterval", "MARK_CLASS", "OWNER_ATTRIBUTE"]
