"""Tests for the owner-tagged interval value types."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from authorlayer.core.intervals import AuthorshipClaim, AuthorshipInterval
from authorlayer.editor.changes import ChangeSet


class TestAuthorshipInterval:
    def test_basic_properties(self) -> None:
        interval = AuthorshipInterval(2, 7, "alice")

        assert interval.length == 5
        assert interval.to_tuple() == (2, 7, "alice")
        assert tuple(interval) == (2, 7, "alice")
        assert interval.contains(2)
        assert not interval.contains(7)

    @pytest.mark.parametrize(
        "start,end",
        [(3, 3), (5, 2), (-1, 4), (1.5, 4), (True, 4), ("a", 4)],
    )
    def test_rejects_invalid_bounds(self, start, end) -> None:
        with pytest.raises(ValueError):
            AuthorshipInterval(start, end, "alice")

    def test_overlap_and_touch_are_distinct(self) -> None:
        interval = AuthorshipInterval(5, 10, "alice")

        assert interval.overlaps(8, 12)
        assert interval.overlaps(0, 20)
        assert not interval.overlaps(10, 12)
        assert not interval.overlaps(0, 5)
        assert interval.touches(10, 12)
        assert interval.touches(0, 5)
        assert not interval.touches(6, 8)

    def test_to_mark_carries_owner_attribute(self) -> None:
        mark = AuthorshipInterval(0, 3, "bob").to_mark()

        assert mark == {
            "from": 0,
            "to": 3,
            "class": "authorship-highlight",
            "attributes": {"data-user-id": "bob"},
        }

    def test_from_value_accepts_common_shapes(self) -> None:
        expected = AuthorshipInterval(1, 4, "carol")

        assert AuthorshipInterval.from_value(expected) is expected
        assert AuthorshipInterval.from_value((1, 4, "carol")) == expected
        assert AuthorshipInterval.from_value({"start": 1, "end": 4, "owner_id": "carol"}) == expected
        assert AuthorshipInterval.from_value({"from": 1, "to": 4, "userId": "carol"}) == expected
        assert AuthorshipInterval.from_value(SimpleNamespace(start=1, end=4, owner_id="carol")) == expected

    def test_from_value_rejects_bad_input(self) -> None:
        with pytest.raises(ValueError, match="three entries"):
            AuthorshipInterval.from_value((1, 4))
        with pytest.raises(ValueError, match="require start"):
            AuthorshipInterval.from_value({"start": 1})
        with pytest.raises(TypeError):
            AuthorshipInterval.from_value(42)

    def test_intervals_are_immutable(self) -> None:
        interval = AuthorshipInterval(0, 1, "alice")

        with pytest.raises(AttributeError):
            interval.start = 5  # type: ignore[misc]


class TestAuthorshipClaim:
    def test_empty_claims_are_representable_but_invalid(self) -> None:
        claim = AuthorshipClaim(4, 4, "alice")

        assert not claim.is_valid
        assert AuthorshipClaim(0, 4, "alice").is_valid
        assert not AuthorshipClaim(0, 4, "").is_valid

    def test_map_shifts_claim_through_change(self) -> None:
        claim = AuthorshipClaim(0, 10, "alice")

        assert claim.map(ChangeSet.delete(2, 8)) == AuthorshipClaim(0, 4, "alice")

    def test_map_returns_none_when_span_is_deleted(self) -> None:
        claim = AuthorshipClaim(3, 6, "alice")

        assert claim.map(ChangeSet.delete(2, 8)) is None

    def test_map_accepts_callables(self) -> None:
        assert AuthorshipClaim(1, 2, "bob").map(lambda pos: pos + 10) == AuthorshipClaim(11, 12, "bob")

    def test_to_interval(self) -> None:
        assert AuthorshipClaim(1, 2, "bob").to_interval() == AuthorshipInterval(1, 2, "bob")
