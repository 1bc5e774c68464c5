import random

from config.settings import EngineConfig
from data.models import DifficultyLevel, GameType
from game.sessions.base import SessionBase
from game.sessions.cosmic_balance import CosmicBalanceSession
from game.sessions.mind_orbit import MindOrbitSession
from game.sessions.space_attack import SpaceAttackSession
from game.sessions.stellar_reflex import StellarReflexSession

SESSION_CLASSES = {
    GameType.COSMIC_BALANCE: CosmicBalanceSession,
    GameType.SPACE_ATTACK: SpaceAttackSession,
    GameType.MIND_ORBIT: MindOrbitSession,
    GameType.STELLAR_REFLEX: StellarReflexSession,
}


def create_session(
    game_type: GameType,
    difficulty: DifficultyLevel,
    rng: random.Random,
    config: EngineConfig = EngineConfig(),
) -> SessionBase:
    return SESSION_CLASSES[game_type](difficulty, rng, config)


__all__ = [
    "CosmicBalanceSession",
    "MindOrbitSession",
    "SpaceAttackSession",
    "StellarReflexSession",
    "create_session",
]
