import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from data.models import DifficultyLevel, GameType


@dataclass(frozen=True)
class WindowConfig:
    width: int = 390
    height: int = 700
    fps: int = 60
    title: str = "Nebula Flow"


@dataclass(frozen=True)
class EngineConfig:
    # Cosmic Balance
    balance_step_sec: float = 0.016
    round_duration_sec: float = 10.0
    balance_max_rounds: int = 5
    round_pause_sec: float = 0.5
    perfect_round_ratio: float = 0.9
    damping: float = 0.95
    restitution: float = 0.3

    # Space Attack
    move_step_sec: float = 0.05
    hit_score: int = 10
    level_up_every: int = 100
    meteor_min_size: float = 30.0
    meteor_max_size: float = 60.0
    spawn_margin: float = 50.0

    # Mind Orbit / Stellar Reflex are event driven, the driver just polls them
    poll_step_sec: float = 0.016
    grid_size: int = 4
    show_lead_in_sec: float = 0.5
    highlight_share: float = 0.6
    pause_share: float = 0.4

    reflex_max_rounds: int = 10
    countdown_from: int = 3
    countdown_step_sec: float = 1.0
    next_target_pause_sec: float = 0.3
    rounds_per_level: int = 3
    target_padding: float = 20.0
    target_vertical_margin: float = 100.0

    # shared play area, in points
    area_width: float = 390.0
    area_height: float = 700.0


@dataclass(frozen=True)
class CosmicBalanceDifficulty:
    zone_size: float
    drift_speed: float
    control_strength: float


@dataclass(frozen=True)
class SpaceAttackDifficulty:
    spawn_interval_sec: float
    base_speed: float


@dataclass(frozen=True)
class MindOrbitDifficulty:
    pattern_base: int
    show_speed_sec: float


@dataclass(frozen=True)
class StellarReflexDifficulty:
    target_size: float
    delay_range_sec: Tuple[float, float]


EASY = DifficultyLevel.EASY
NORMAL = DifficultyLevel.NORMAL
HARD = DifficultyLevel.HARD

DIFFICULTY_TABLE: Dict[Tuple[GameType, DifficultyLevel], object] = {
    (GameType.COSMIC_BALANCE, EASY): CosmicBalanceDifficulty(0.15, 0.0008, 0.003),
    (GameType.COSMIC_BALANCE, NORMAL): CosmicBalanceDifficulty(0.10, 0.0015, 0.002),
    (GameType.COSMIC_BALANCE, HARD): CosmicBalanceDifficulty(0.06, 0.0025, 0.0015),
    (GameType.SPACE_ATTACK, EASY): SpaceAttackDifficulty(2.0, 1.5),
    (GameType.SPACE_ATTACK, NORMAL): SpaceAttackDifficulty(1.5, 2.5),
    (GameType.SPACE_ATTACK, HARD): SpaceAttackDifficulty(1.0, 4.0),
    (GameType.MIND_ORBIT, EASY): MindOrbitDifficulty(2, 1.0),
    (GameType.MIND_ORBIT, NORMAL): MindOrbitDifficulty(3, 0.8),
    (GameType.MIND_ORBIT, HARD): MindOrbitDifficulty(4, 0.6),
    (GameType.STELLAR_REFLEX, EASY): StellarReflexDifficulty(90.0, (1.5, 3.0)),
    (GameType.STELLAR_REFLEX, NORMAL): StellarReflexDifficulty(70.0, (1.0, 2.5)),
    (GameType.STELLAR_REFLEX, HARD): StellarReflexDifficulty(50.0, (0.6, 2.0)),
}


def difficulty_profile(game_type: GameType, level: DifficultyLevel):
    return DIFFICULTY_TABLE[(game_type, level)]


@dataclass(frozen=True)
class AppSettings:
    data_dir: Path
    seed: Optional[int]

    @property
    def store_path(self) -> Path:
        return self.data_dir / "progress.json"

    @property
    def sessions_log_path(self) -> Path:
        return self.data_dir / "sessions.jsonl"


APP_NAME = "NebulaFlow"


def default_data_dir() -> Path:
    # created lazily by the store and the session log on first write
    if sys.platform.startswith("win"):
        root = os.getenv("APPDATA") or Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(root) / APP_NAME


def load_settings() -> AppSettings:
    raw_dir = os.getenv("NEBULA_FLOW_DATA_DIR", "").strip()
    data_dir = Path(raw_dir).expanduser() if raw_dir else default_data_dir()
    raw_seed = os.getenv("NEBULA_FLOW_SEED", "").strip()
    seed = int(raw_seed) if raw_seed else None
    return AppSettings(data_dir=data_dir, seed=seed)
