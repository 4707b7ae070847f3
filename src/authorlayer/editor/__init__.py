"""Editor-side machinery: change sets, authorship tracking and documents."""

from .authorship import ClaimPolicy, InvalidClaimError, PartitionInvariantError, RangeOwnershipTracker
from .changes import ChangeSet, ChangeSetError, MappingChain, PositionMapper, TextChange

__all__ = [
    "ChangeSet",
    "ChangeSetError",
    "ClaimPolicy",
    "InvalidClaimError",
    "MappingChain",
    "PartitionInvariantError",
    "PositionMapper",
    "RangeOwnershipTracker",
    "TextChange",
]
