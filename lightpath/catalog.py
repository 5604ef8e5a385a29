"""Level catalog and solution replay."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import ActionResult, MalformedLevel
from .grid import Mirror
from .level import Difficulty, Level, as_position
from .level_format import parse
from .session import GameSession, LossPolicy

logger = logging.getLogger(__name__)

LEVEL_ENV_VAR = "LIGHTPATH_LEVEL_ROOT"
SOLUTION_ENV_VAR = "LIGHTPATH_SOLUTION_ROOT"
LEVEL_SUFFIX = ".txt"


@dataclass(frozen=True)
class CatalogDirectories:
    """Resolved directories holding level and solution files."""

    level_root: Path
    solution_root: Path


def _default_level_root() -> Path:
    return Path(__file__).resolve().parent / "levels"


def _default_solution_root() -> Path:
    return Path(__file__).resolve().parent / "solutions"


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> CatalogDirectories:
    """Resolve level and solution directories using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if a resolved directory does
        not exist on disk.
    """

    level_root = _read_directory(LEVEL_ENV_VAR, _default_level_root())
    solution_root = _read_directory(SOLUTION_ENV_VAR, _default_solution_root())

    if check_exists:
        missing = [path for path in (level_root, solution_root) if not path.exists()]
        if missing:
            missing_str = ", ".join(str(path) for path in missing)
            raise FileNotFoundError(f"Required level directories do not exist: {missing_str}")

    return CatalogDirectories(level_root=level_root, solution_root=solution_root)


class LevelCatalog:
    """Levels stored as ``<name>.txt`` files in one directory, ordered by name."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def names(self) -> List[str]:
        return sorted(path.stem for path in self.root.glob(f"*{LEVEL_SUFFIX}"))

    def path_for(self, name: str) -> Path:
        return self.root / f"{name}{LEVEL_SUFFIX}"

    def read_text(self, name: str) -> str:
        path = self.path_for(name)
        if not path.exists():
            raise FileNotFoundError(path)
        return path.read_text(encoding="utf-8")

    def load(self, name: str) -> Level:
        return parse(self.read_text(name), source=name)

    def load_all(self) -> Tuple[Dict[str, Level], Dict[str, MalformedLevel]]:
        """Load every level; a malformed file is reported and skipped."""

        levels: Dict[str, Level] = {}
        failures: Dict[str, MalformedLevel] = {}
        for name in self.names():
            try:
                levels[name] = self.load(name)
            except MalformedLevel as exc:
                logger.error("Skipping level %s: %s", name, exc)
                failures[name] = exc
        return levels, failures

    def by_difficulty(self, difficulty: Union[str, Difficulty]) -> List[Tuple[str, Level]]:
        if not isinstance(difficulty, Difficulty):
            difficulty = Difficulty.from_name(difficulty)
        levels, _ = self.load_all()
        return [(name, level) for name, level in levels.items() if level.difficulty is difficulty]

    def is_unlocked(self, name: str, completed: Iterable[str] = ()) -> bool:
        """The first level is always open; every other one needs its predecessor."""

        names = self.names()
        if name not in names:
            raise KeyError(name)
        index = names.index(name)
        if index == 0:
            return True
        return names[index - 1] in set(completed)


class SolutionValidator:
    """Replay a stored solution and check the resulting session."""

    def __init__(self, catalog: LevelCatalog, solutions_root: Union[str, Path]):
        self.catalog = catalog
        self.solutions_root = Path(solutions_root)

    def load_solution(self, name: str) -> Dict:
        path = self.solutions_root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        return json.loads(path.read_text(encoding="utf-8"))

    def replay(
        self,
        level: Level,
        solution: Dict,
        *,
        loss_policy: LossPolicy = LossPolicy.NEVER,
    ) -> Tuple[GameSession, List[ActionResult]]:
        session = GameSession(level, loss_policy=loss_policy)
        results: List[ActionResult] = []
        for placement in solution.get("placements", []):
            position = as_position(placement["position"])
            orientation = Mirror.from_symbol(str(placement.get("orientation", "/")))
            results.append(session.place_mirror(position, orientation))
        return session, results

    def validate(
        self,
        level_name: str,
        solution_name: Optional[str] = None,
        *,
        loss_policy: LossPolicy = LossPolicy.NEVER,
    ) -> bool:
        level = self.catalog.load(level_name)
        solution = self.load_solution(solution_name or level_name)
        session, results = self.replay(level, solution, loss_policy=loss_policy)
        return self.evaluate(session, results, solution)

    def evaluate(self, session: GameSession, results: List[ActionResult], solution: Dict) -> bool:
        """Check a replayed session against the expectations stored in *solution*."""

        rejected = [result for result in results if not result.ok]
        if rejected:
            logger.warning(
                "Solution for %s has rejected placements: %s",
                session.level.name,
                ", ".join(result.message for result in rejected),
            )
            return False

        assert session.beam is not None
        expected_outcome = solution.get("expected_outcome", "hit_target")
        if session.beam.outcome.value != expected_outcome:
            return False
        expected_state = solution.get("expected_state")
        if expected_state is not None and session.state.value != expected_state:
            return False
        expected_mirrors = solution.get("expected_mirrors")
        if expected_mirrors is not None and session.grid.mirrors_placed != int(expected_mirrors):
            return False
        return True
