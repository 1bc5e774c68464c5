from __future__ import annotations

from data.models import DifficultyLevel, GameType, SessionMetrics


ENERGY_MULTIPLIERS = {
    DifficultyLevel.EASY: 1,
    DifficultyLevel.NORMAL: 2,
    DifficultyLevel.HARD: 3,
}


def energy_multiplier(difficulty: DifficultyLevel) -> int:
    return ENERGY_MULTIPLIERS[difficulty]


def reaction_points(reaction_sec: float) -> int:
    # 100 for an instant hit, falling linearly to the floor of 1 at one second.
    clipped = min(max(reaction_sec, 0.0), 1.0)
    return max(1, round((1.0 - clipped) * 100))


def cosmic_balance_energy(score: int, perfect_rounds: int, difficulty: DifficultyLevel) -> int:
    return (score // 20 + perfect_rounds * 10) * energy_multiplier(difficulty)


def stellar_reflex_energy(score: int, level: int, difficulty: DifficultyLevel) -> int:
    return (score // 10 + level * 5) * energy_multiplier(difficulty)


def space_attack_level_award(level: int, difficulty: DifficultyLevel) -> int:
    return level * 5 * energy_multiplier(difficulty)


def mind_orbit_round_award(level: int, difficulty: DifficultyLevel) -> int:
    return level * 3 * energy_multiplier(difficulty)


def space_attack_energy(level: int, difficulty: DifficultyLevel) -> int:
    # One award per level-up, each paid at the level just reached.
    return sum(space_attack_level_award(lv, difficulty) for lv in range(2, level + 1))


def mind_orbit_energy(level: int, difficulty: DifficultyLevel) -> int:
    return sum(mind_orbit_round_award(lv, difficulty) for lv in range(2, level + 1))


def compute_energy(
    game_type: GameType,
    difficulty: DifficultyLevel,
    score: int,
    metrics: SessionMetrics,
) -> int:
    if game_type == GameType.COSMIC_BALANCE:
        return cosmic_balance_energy(score, metrics.perfect_rounds, difficulty)
    if game_type == GameType.STELLAR_REFLEX:
        return stellar_reflex_energy(score, metrics.level, difficulty)
    if game_type == GameType.SPACE_ATTACK:
        return space_attack_energy(metrics.level, difficulty)
    if game_type == GameType.MIND_ORBIT:
        return mind_orbit_energy(metrics.level, difficulty)
    raise ValueError(f"Unsupported game_type: {game_type}")
