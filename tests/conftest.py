"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from authorlayer.editor.authorship import ClaimPolicy, RangeOwnershipTracker


@pytest.fixture
def tracker() -> RangeOwnershipTracker:
    return RangeOwnershipTracker(check_invariants=True)


@pytest.fixture
def compatible_tracker() -> RangeOwnershipTracker:
    return RangeOwnershipTracker(policy=ClaimPolicy.COMPATIBLE)


@pytest.fixture
def alice_document_tracker() -> RangeOwnershipTracker:
    """Tracker holding a single ten character span written by alice."""

    return RangeOwnershipTracker([(0, 10, "alice")], check_invariants=True)
