"""Authorship partition tracking for collaboratively edited documents.

The tracker keeps a sorted list of owner-tagged intervals. Two events move it
forward: document changes, which remap every stored boundary, and ownership
claims, which carve a newly authored span out of whatever was recorded there
before. Events must be applied in the order the host produced them; a claim
is always expressed in the coordinates of the document after every change
that preceded it.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Sequence

from ..core.intervals import AuthorshipClaim, AuthorshipInterval
from .changes import PositionMapper, map_position

if TYPE_CHECKING:  # pragma: no cover - import only used for annotations
    from ..services.settings import AuthorshipSettings

LOGGER = logging.getLogger(__name__)

DocumentDelta = PositionMapper | Callable[[int], int]


class ClaimPolicy(str, Enum):
    """How a claim treats a different-owner interval flush with its edges."""

    REPLACE = "replace"
    COMPATIBLE = "compatible"

    @classmethod
    def from_value(cls, value: Any) -> ClaimPolicy:
        if isinstance(value, ClaimPolicy):
            return value
        normalized = str(value or "").strip().lower()
        for policy in cls:
            if policy.value == normalized:
                return policy
        choices = ", ".join(policy.value for policy in cls)
        raise ValueError(f"Unknown claim policy {value!r}; expected one of: {choices}")


class InvalidClaimError(ValueError):
    """Raised when an ownership claim cannot be integrated into the partition."""

    def __init__(
        self,
        message: str,
        *,
        start: int,
        end: int,
        owner_id: str | None,
        reason: str = "empty_span",
    ) -> None:
        super().__init__(message)
        self.start = start
        self.end = end
        self.owner_id = owner_id
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "start": self.start,
            "end": self.end,
            "owner_id": self.owner_id,
        }


class PartitionInvariantError(AssertionError):
    """Raised when the stored partition contains overlapping or empty intervals."""

    def __init__(self, message: str, *, intervals: Sequence[AuthorshipInterval] = ()) -> None:
        super().__init__(message)
        self.intervals = tuple(intervals)


class RangeOwnershipTracker:
    """Keeps the authorship partition of one document."""

    def __init__(
        self,
        intervals: Iterable[Any] = (),
        *,
        policy: ClaimPolicy | str = ClaimPolicy.REPLACE,
        check_invariants: bool = False,
    ) -> None:
        self._policy = ClaimPolicy.from_value(policy)
        self._check = bool(check_invariants)
        self._intervals: list[AuthorshipInterval] = sorted(
            (AuthorshipInterval.from_value(item) for item in intervals),
            key=AuthorshipInterval.sort_key,
        )
        if self._check or self._policy is ClaimPolicy.REPLACE:
            # Claim lookup bisects on interval ends, which requires a disjoint seed.
            self.check_invariants()

    @classmethod
    def from_settings(
        cls,
        settings: AuthorshipSettings | None,
        intervals: Iterable[Any] = (),
    ) -> RangeOwnershipTracker:
        if settings is None:
            return cls(intervals)
        return cls(
            intervals,
            policy=settings.claim_policy,
            check_invariants=settings.check_invariants,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    @property
    def policy(self) -> ClaimPolicy:
        return self._policy

    def apply_document_change(self, delta: DocumentDelta) -> None:
        """Remap every stored boundary through ``delta``.

        Starts stick to text inserted after them and ends to text inserted
        before them, so typing at an interval edge never grows the interval.
        Intervals whose span was deleted are dropped.
        """

        remapped: list[AuthorshipInterval] = []
        for interval in self._intervals:
            start = map_position(delta, interval.start, 1)
            end = map_position(delta, interval.end, -1)
            if start >= end:
                LOGGER.debug(
                    "Dropping collapsed interval [%s, %s) owned by %s", interval.start, interval.end, interval.owner_id
                )
                continue
            if start == interval.start and end == interval.end:
                remapped.append(interval)
            else:
                remapped.append(interval.with_bounds(start, end))
        remapped.sort(key=AuthorshipInterval.sort_key)
        self._intervals = remapped
        if self._check:
            self.check_invariants()

    def apply_ownership_claim(self, start: int, end: int, owner_id: str) -> None:
        """Record ``owner_id`` as the most recent author of ``[start, end)``."""

        self.apply_claim(AuthorshipClaim(start, end, owner_id))

    def apply_claim(self, claim: AuthorshipClaim | Sequence[Any]) -> None:
        if not isinstance(claim, AuthorshipClaim):
            claim = AuthorshipClaim(*claim)
        self._validate_claim(claim)
        LOGGER.debug("claim from=%s to=%s owner=%s (#intervals=%s)", claim.start, claim.end, claim.owner_id, len(self))
        if self._policy is ClaimPolicy.COMPATIBLE:
            self._apply_compatible(claim)
        else:
            self._apply_replace(claim)
        if self._check:
            self.check_invariants()

    def apply_transaction(
        self,
        changes: DocumentDelta | None = None,
        claims: Iterable[AuthorshipClaim | Sequence[Any]] = (),
    ) -> None:
        """Apply one host transaction: remap through ``changes`` then integrate ``claims`` in order."""

        if changes is not None:
            self.apply_document_change(changes)
        for claim in claims:
            self.apply_claim(claim)

    def clear(self) -> None:
        self._intervals.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def intervals(self) -> tuple[AuthorshipInterval, ...]:
        return tuple(self._intervals)

    def snapshot(self) -> tuple[tuple[int, int, str], ...]:
        """Return the ordered ``(start, end, owner_id)`` partition."""

        return tuple(interval.to_tuple() for interval in self._intervals)

    def to_payload(self) -> list[dict[str, Any]]:
        return [interval.to_dict() for interval in self._intervals]

    def marks(self) -> list[dict[str, Any]]:
        """Return highlight mark payloads for the renderer."""

        return [interval.to_mark() for interval in self._intervals]

    def owner_at(self, position: int) -> str | None:
        """Return the owner of the character at ``position`` if one is recorded."""

        index = bisect_right(self._intervals, position, key=lambda item: item.start)
        for interval in reversed(self._intervals[:index]):
            if interval.contains(position):
                return interval.owner_id
            if self._policy is ClaimPolicy.REPLACE:
                break
        return None

    def intervals_in(self, start: int, end: int) -> tuple[AuthorshipInterval, ...]:
        """Return the stored intervals sharing at least one character with ``[start, end)``."""

        lo, hi = self._window(start, end)
        return tuple(item for item in self._intervals[lo:hi] if item.overlaps(start, end))

    def owners(self) -> tuple[str, ...]:
        return tuple(sorted({interval.owner_id for interval in self._intervals}))

    def coverage(self, owner_id: str | None = None) -> int:
        """Return the number of characters attributed to ``owner_id`` (or to anyone)."""

        return sum(
            interval.length
            for interval in self._intervals
            if owner_id is None or interval.owner_id == owner_id
        )

    def check_invariants(self) -> None:
        previous: AuthorshipInterval | None = None
        for interval in self._intervals:
            if interval.start >= interval.end:
                raise PartitionInvariantError(f"Empty interval stored: {interval!r}", intervals=(interval,))
            if previous is not None and interval.start < previous.end:
                raise PartitionInvariantError(
                    f"Overlapping intervals stored: {previous!r} and {interval!r}",
                    intervals=(previous, interval),
                )
            previous = interval

    def __iter__(self) -> Iterator[AuthorshipInterval]:
        return iter(tuple(self._intervals))

    def __len__(self) -> int:
        return len(self._intervals)

    def __repr__(self) -> str:
        return f"RangeOwnershipTracker(policy={self._policy.value!r}, intervals={self.snapshot()!r})"

    # ------------------------------------------------------------------
    # Claim integration
    # ------------------------------------------------------------------
    def _validate_claim(self, claim: AuthorshipClaim) -> None:
        if not claim.owner_id:
            raise InvalidClaimError(
                "Ownership claims require an owner id",
                start=claim.start,
                end=claim.end,
                owner_id=claim.owner_id,
                reason="missing_owner",
            )
        if claim.start < 0:
            raise InvalidClaimError(
                f"Claim offsets must not be negative (from={claim.start})",
                start=claim.start,
                end=claim.end,
                owner_id=claim.owner_id,
                reason="negative_offset",
            )
        if claim.start >= claim.end:
            raise InvalidClaimError(
                f"Claim span must not be empty (from={claim.start}, to={claim.end})",
                start=claim.start,
                end=claim.end,
                owner_id=claim.owner_id,
                reason="empty_span",
            )

    def _window(self, start: int, end: int) -> tuple[int, int]:
        """Return the slice of intervals overlapping or touching ``[start, end]``."""

        hi = bisect_right(self._intervals, end, key=lambda item: item.start)
        if self._policy is ClaimPolicy.COMPATIBLE:
            # Overlaps are possible here, so ends are not monotonic.
            return 0, hi
        lo = bisect_left(self._intervals, start, 0, hi, key=lambda item: item.end)
        return lo, hi

    def _apply_replace(self, claim: AuthorshipClaim) -> None:
        start, end, owner = claim.start, claim.end, claim.owner_id
        lo, hi = self._window(start, end)
        survivors: list[AuthorshipInterval] = []
        own: list[AuthorshipInterval] = []
        for interval in self._intervals[lo:hi]:
            if interval.touches(start, end):
                LOGGER.debug("At beginning or end of [%s, %s)", interval.start, interval.end)
                survivors.append(interval)
                continue
            if interval.owner_id == owner:
                LOGGER.debug("In own text [%s, %s)", interval.start, interval.end)
                survivors.append(interval)
                own.append(interval)
                continue
            LOGGER.debug("Cutting [%s, %s) owned by %s", interval.start, interval.end, interval.owner_id)
            if interval.start < start:
                survivors.append(interval.with_bounds(interval.start, start))
            if end < interval.end:
                survivors.append(interval.with_bounds(end, interval.end))
        survivors.extend(_uncovered(claim, own))
        survivors.sort(key=AuthorshipInterval.sort_key)
        self._intervals[lo:hi] = survivors

    def _apply_compatible(self, claim: AuthorshipClaim) -> None:
        start, end, owner = claim.start, claim.end, claim.owner_id
        lo, hi = self._window(start, end)
        removed: set[int] = set()
        added: list[AuthorshipInterval] = []
        middle = claim.to_interval()
        for index in range(lo, hi):
            interval = self._intervals[index]
            if interval.end < start:
                continue
            if interval.start == end or interval.end == start:
                LOGGER.debug("At beginning or end of [%s, %s)", interval.start, interval.end)
                continue
            if interval.owner_id == owner:
                LOGGER.debug("In own text [%s, %s)", interval.start, interval.end)
                continue
            if interval.start == start or interval.end == end:
                LOGGER.debug("Boundary flush with claim, keeping [%s, %s)", interval.start, interval.end)
                continue
            LOGGER.debug("In other text (splitting [%s, %s))", interval.start, interval.end)
            removed.add(index)
            if interval.start < start:
                added.append(interval.with_bounds(interval.start, start))
            if middle not in added:
                added.append(middle)
            if end < interval.end:
                added.append(interval.with_bounds(end, interval.end))
        if not removed:
            added.append(middle)
        kept = [interval for index, interval in enumerate(self._intervals) if index not in removed]
        kept.extend(added)
        kept.sort(key=AuthorshipInterval.sort_key)
        self._intervals = kept


def _uncovered(claim: AuthorshipClaim, own: Sequence[AuthorshipInterval]) -> list[AuthorshipInterval]:
    """Return the parts of ``claim`` not already held by the claimant."""

    pieces: list[AuthorshipInterval] = []
    cursor = claim.start
    for interval in own:
        if interval.start > cursor:
            pieces.append(AuthorshipInterval(cursor, min(interval.start, claim.end), claim.owner_id))
        cursor = max(cursor, interval.end)
        if cursor >= claim.end:
            break
    if cursor < claim.end:
        pieces.append(AuthorshipInterval(cursor, claim.end, claim.owner_id))
    return pieces


__all__ = [
    "ClaimPolicy",
    "DocumentDelta",
    "InvalidClaimError",
    "PartitionInvariantError",
    "RangeOwnershipTracker",
]
