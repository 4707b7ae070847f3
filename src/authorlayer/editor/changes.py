"""Document change descriptors and position remapping helpers."""

from __future__ import annotations

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Callable, Iterable, Iterator, Protocol, Sequence, Tuple, runtime_checkable


class ChangeSetError(ValueError):
    """Raised when a set of text changes cannot describe a single edit."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "invalid_range",
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.start = start
        self.end = end

    def details(self) -> dict[str, int | str | None]:
        return {"reason": self.reason, "start": self.start, "end": self.end}


@runtime_checkable
class PositionMapper(Protocol):
    """Anything able to translate an old document offset into a new one."""

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        ...


@dataclass(slots=True, frozen=True)
class TextChange:
    """Replacement of ``[start, end)`` in the old document with ``text``."""

    start: int
    end: int
    text: str = ""

    @property
    def inserted(self) -> int:
        return len(self.text)

    @property
    def removed(self) -> int:
        return self.end - self.start

    @property
    def delta(self) -> int:
        return self.inserted - self.removed


class ChangeSet:
    """Non-overlapping changes expressed against one document version.

    Every change uses the coordinates of the document *before* the edit, so a
    batch of simultaneous edits (multi-cursor typing, a find/replace pass)
    can be described by a single set.
    """

    __slots__ = ("_changes",)

    def __init__(self, changes: Iterable[TextChange] = ()) -> None:
        normalized = tuple(sorted(changes, key=lambda item: (item.start, item.end)))
        _ensure_valid(normalized)
        self._changes: Tuple[TextChange, ...] = normalized

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def insert(cls, pos: int, text: str) -> ChangeSet:
        return cls((TextChange(pos, pos, text),))

    @classmethod
    def delete(cls, start: int, end: int) -> ChangeSet:
        return cls((TextChange(start, end, ""),))

    @classmethod
    def replace(cls, start: int, end: int, text: str) -> ChangeSet:
        return cls((TextChange(start, end, text),))

    @classmethod
    def from_diff(cls, before: str, after: str) -> ChangeSet:
        """Build the change set turning ``before`` into ``after``."""

        matcher = SequenceMatcher(a=before, b=after, autojunk=False)
        changes: list[TextChange] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue
            changes.append(TextChange(i1, i2, after[j1:j2]))
        return cls(changes)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def changes(self) -> Tuple[TextChange, ...]:
        return self._changes

    @property
    def is_empty(self) -> bool:
        return not any(change.inserted or change.removed for change in self._changes)

    @property
    def length_delta(self) -> int:
        return sum(change.delta for change in self._changes)

    def __iter__(self) -> Iterator[TextChange]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChangeSet):
            return NotImplemented
        return self._changes == other._changes

    def __repr__(self) -> str:
        return f"ChangeSet({list(self._changes)!r})"

    def inserted_spans(self) -> Tuple[Tuple[int, int], ...]:
        """Return the new-document ranges occupied by inserted text."""

        spans: list[tuple[int, int]] = []
        shift = 0
        for change in self._changes:
            if change.inserted:
                start = change.start + shift
                spans.append((start, start + change.inserted))
            shift += change.delta
        return tuple(spans)

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------
    def apply(self, text: str) -> str:
        """Return ``text`` with every change applied."""

        if self._changes and self._changes[-1].end > len(text):
            last = self._changes[-1]
            raise ChangeSetError(
                "Change range exceeds document length",
                reason="range_overflow",
                start=last.start,
                end=last.end,
            )
        updated = text
        for change in reversed(self._changes):
            updated = updated[: change.start] + change.text + updated[change.end :]
        return updated

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        """Translate ``pos`` from the old document into the new one.

        ``assoc`` picks the side a position sticks to when text is inserted
        exactly at it or when it sits inside a replaced range: negative keeps
        it before the inserted text, positive moves it after.
        """

        shift = 0
        for change in self._changes:
            if pos < change.start:
                break
            if change.start == change.end:
                if pos == change.start and assoc < 0:
                    break
                shift += change.inserted
                continue
            if pos < change.end:
                if pos == change.start or assoc < 0:
                    return change.start + shift
                return change.start + shift + change.inserted
            shift += change.delta
        return pos + shift


class MappingChain:
    """Maps positions through several sequential document changes."""

    __slots__ = ("_mappers",)

    def __init__(self, *mappers: PositionMapper | Callable[[int], int]) -> None:
        self._mappers = tuple(mappers)

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        for mapper in self._mappers:
            pos = map_position(mapper, pos, assoc)
        return pos

    def __len__(self) -> int:
        return len(self._mappers)


def map_position(mapper: PositionMapper | Callable[[int], int], pos: int, assoc: int = -1) -> int:
    """Map ``pos`` through either a :class:`PositionMapper` or a bare callable."""

    if isinstance(mapper, PositionMapper):
        return int(mapper.map_pos(pos, assoc))
    return int(mapper(pos))


def _ensure_valid(changes: Sequence[TextChange]) -> None:
    previous_end = -1
    for change in changes:
        if change.start < 0 or change.end < change.start:
            raise ChangeSetError(
                f"Invalid change range [{change.start}, {change.end})",
                reason="invalid_range",
                start=change.start,
                end=change.end,
            )
        if change.start < previous_end:
            raise ChangeSetError(
                "Changes in one set may not overlap",
                reason="range_overlap",
                start=change.start,
                end=change.end,
            )
        previous_end = change.end


__all__ = [
    "ChangeSet",
    "ChangeSetError",
    "MappingChain",
    "PositionMapper",
    "TextChange",
    "map_position",
]
