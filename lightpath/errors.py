"""Error taxonomy and action results shared by the puzzle core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .level import ValidationIssue
    from .session import SessionSnapshot


class ErrorCode(Enum):
    """Reason codes reported to the UI when a player action is rejected."""

    OUT_OF_BOUNDS = "out_of_bounds"
    CELL_OCCUPIED = "cell_occupied"
    BUDGET_EXCEEDED = "budget_exceeded"
    NO_MIRROR_HERE = "no_mirror_here"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REDO = "nothing_to_redo"
    SESSION_FINISHED = "session_finished"
    SESSION_BUSY = "session_busy"
    SESSION_NOT_STARTED = "session_not_started"


class MalformedLevel(Exception):
    """Raised when level text cannot be turned into a valid :class:`Level`."""

    def __init__(self, issues: Sequence["ValidationIssue"], source: str = "") -> None:
        self.issues: Tuple["ValidationIssue", ...] = tuple(issues)
        self.source = source
        summary = "; ".join(issue.message for issue in self.issues) or "unknown problem"
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}malformed level ({summary})")


class PuzzleError(Exception):
    """Base class for recoverable, rejected player actions."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OutOfBounds(PuzzleError):
    code = ErrorCode.OUT_OF_BOUNDS


class CellOccupied(PuzzleError):
    code = ErrorCode.CELL_OCCUPIED


class BudgetExceeded(PuzzleError):
    code = ErrorCode.BUDGET_EXCEEDED


class NoMirrorHere(PuzzleError):
    code = ErrorCode.NO_MIRROR_HERE


class NothingToUndo(PuzzleError):
    code = ErrorCode.NOTHING_TO_UNDO


class NothingToRedo(PuzzleError):
    code = ErrorCode.NOTHING_TO_REDO


class SessionFinished(PuzzleError):
    code = ErrorCode.SESSION_FINISHED


class SessionBusy(PuzzleError):
    code = ErrorCode.SESSION_BUSY


class SessionNotStarted(PuzzleError):
    code = ErrorCode.SESSION_NOT_STARTED


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a player action.

    ``ok`` is *False* whenever the action was rejected; ``error`` and
    ``message`` then say why and the session state is unchanged.  Sessions
    attach the snapshot taken after the action.
    """

    ok: bool
    error: Optional[ErrorCode] = None
    message: str = ""
    snapshot: Optional["SessionSnapshot"] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str = "") -> "ActionResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: PuzzleError) -> "ActionResult":
        return cls(ok=False, error=error.code, message=error.message)
