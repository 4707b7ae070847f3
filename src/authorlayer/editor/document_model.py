"""Document state paired with its live authorship partition."""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from ..core.intervals import AuthorshipClaim
from ..services.settings import AuthorshipSettings
from .authorship import RangeOwnershipTracker
from .changes import ChangeSet

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""

    return datetime.now(timezone.utc)


def _hash_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class AuthoredDocument:
    """One open document: its text, version counter and authorship tracker.

    The tracker is created with the document and discarded with it; nothing
    is shared between documents.
    """

    text: str = ""
    document_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    settings: AuthorshipSettings | None = None
    version_id: int = 1
    content_hash: str = field(default_factory=str)
    updated_at: datetime = field(default_factory=_utcnow)
    tracker: RangeOwnershipTracker = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.content_hash:
            self.content_hash = _hash_text(self.text)
        self.tracker = RangeOwnershipTracker.from_settings(self.settings)

    def apply_edit(self, changes: ChangeSet, *, author_id: str | None = None) -> tuple[tuple[int, int], ...]:
        """Apply ``changes`` and keep authorship aligned with the new text.

        When ``author_id`` is given, every inserted span is claimed for that
        author. Returns the new-document spans holding inserted text.
        """

        self.text = changes.apply(self.text)
        self.version_id += 1
        self.content_hash = _hash_text(self.text)
        self.updated_at = _utcnow()

        self.tracker.apply_document_change(changes)
        spans = changes.inserted_spans()
        if author_id is not None:
            for start, end in spans:
                self.tracker.apply_claim(AuthorshipClaim(start, end, author_id))
        LOGGER.debug(
            "Document %s now at version %s (%s authorship intervals)",
            self.document_id,
            self.version_id,
            len(self.tracker),
        )
        return spans

    def replace_text(self, new_text: str, *, author_id: str | None = None) -> tuple[tuple[int, int], ...]:
        """Replace the whole text, deriving the minimal change set by diffing."""

        return self.apply_edit(ChangeSet.from_diff(self.text, new_text), author_id=author_id)

    def claim(self, start: int, end: int, owner_id: str) -> None:
        self.tracker.apply_ownership_claim(start, end, owner_id)

    def authored_text(self, owner_id: str) -> list[str]:
        """Return the text of every interval attributed to ``owner_id``."""

        return [self.text[item.start : item.end] for item in self.tracker if item.owner_id == owner_id]

    def snapshot(self) -> Dict[str, Any]:
        """Return a serializable view consumed by the renderer and transport."""

        return {
            "document_id": self.document_id,
            "version_id": self.version_id,
            "content_hash": self.content_hash,
            "length": len(self.text),
            "authorship": self.tracker.to_payload(),
        }

    def version_signature(self) -> str:
        return f"{self.document_id}:{self.version_id}:{self.content_hash}"
