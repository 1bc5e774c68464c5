from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class GameType(str, Enum):
    # Declaration order is the favorite-game tie-break order.
    SPACE_ATTACK = "space_attack"
    MIND_ORBIT = "mind_orbit"
    STELLAR_REFLEX = "stellar_reflex"
    COSMIC_BALANCE = "cosmic_balance"

    @property
    def title(self) -> str:
        return {
            GameType.SPACE_ATTACK: "Space Attack",
            GameType.MIND_ORBIT: "Mind Orbit",
            GameType.STELLAR_REFLEX: "Stellar Reflex",
            GameType.COSMIC_BALANCE: "Cosmic Balance",
        }[self]


class DifficultyLevel(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


INPUT_PRESS = "press"
INPUT_RELEASE = "release"
INPUT_TAP = "tap"


@dataclass(frozen=True)
class InputEvent:
    """
    Player input coming from the presentation layer.

    A tap carries whichever payload the game understands: a play-area
    coordinate, a grid cell index or a falling object's id.
    """
    kind: str
    pos: Optional[Tuple[float, float]] = None
    cell: Optional[int] = None
    object_id: Optional[int] = None


@dataclass(frozen=True)
class SessionMetrics:
    focus_time_sec: int = 0
    accuracy_pct: int = 0
    avg_reaction_ms: int = 0
    best_reaction_ms: int = 0
    perfect_rounds: int = 0
    level: int = 1


@dataclass(frozen=True)
class SessionResult:
    game_type: GameType
    difficulty: DifficultyLevel
    score: int
    energy_earned: int
    metrics: SessionMetrics = field(default_factory=SessionMetrics)
    duration_sec: float = 0.0

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValueError(f"score must be >= 0, got {self.score}")
        if self.energy_earned < 0:
            raise ValueError(f"energy_earned must be >= 0, got {self.energy_earned}")

    def to_record(self) -> Dict[str, Any]:
        return {
            "game_type": self.game_type.value,
            "difficulty": self.difficulty.value,
            "score": self.score,
            "energy_earned": self.energy_earned,
            "duration_sec": round(self.duration_sec, 3),
            "focus_time_sec": self.metrics.focus_time_sec,
            "accuracy_pct": self.metrics.accuracy_pct,
            "avg_reaction_ms": self.metrics.avg_reaction_ms,
            "best_reaction_ms": self.metrics.best_reaction_ms,
            "perfect_rounds": self.metrics.perfect_rounds,
            "level": self.metrics.level,
        }


@dataclass(frozen=True)
class GameStats:
    games_played: int
    total_score: int
    high_score: int

    @property
    def average_score(self) -> int:
        if self.games_played <= 0:
            return 0
        return self.total_score // self.games_played


@dataclass(frozen=True)
class ProgressSummary:
    total_games_played: int
    days_active: int
    current_streak: int
    best_streak: int
    focus_level: int
    energy_fragments: int
    total_energy_earned: int
    favorite_game: str
    best_reaction_ms: Optional[int]
    avg_reaction_ms: Optional[int]
    best_accuracy_pct: Optional[int]
    total_focus_time_sec: int
    top_score: int
    perfect_rounds: int
    total_play_time_sec: float
    first_played: Optional[datetime]
    last_played: Optional[datetime]
    games: Dict[GameType, GameStats]
