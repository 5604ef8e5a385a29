"""Light beam mirror puzzle package."""

from .catalog import LevelCatalog, SolutionValidator
from .errors import ActionResult, ErrorCode, MalformedLevel, PuzzleError
from .grid import Grid, Mirror
from .history import MoveHistory, PlaceMirror, RemoveMirror, RotateMirror
from .level import CellKind, Difficulty, Direction, Lamp, Level, ValidationResult, validate
from .level_format import dumps, load_level, parse
from .session import GameSession, LossPolicy, SessionSnapshot, SessionState
from .simulator import BeamPath, BeamStep, Outcome, trace

__all__ = [
    "ActionResult",
    "BeamPath",
    "BeamStep",
    "CellKind",
    "Difficulty",
    "Direction",
    "ErrorCode",
    "GameSession",
    "Grid",
    "Lamp",
    "Level",
    "LevelCatalog",
    "LossPolicy",
    "MalformedLevel",
    "Mirror",
    "MoveHistory",
    "Outcome",
    "PlaceMirror",
    "PuzzleError",
    "RemoveMirror",
    "RotateMirror",
    "SessionSnapshot",
    "SessionState",
    "SolutionValidator",
    "ValidationResult",
    "dumps",
    "load_level",
    "parse",
    "trace",
    "validate",
]
