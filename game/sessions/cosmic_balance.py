from __future__ import annotations

from typing import Any, Dict

from data.models import GameType, SessionMetrics
from game.sessions.base import PHASE_READY, SessionBase


PHASE_PLAYING = "PLAYING"
PHASE_ROUND_BREAK = "ROUND_BREAK"  # short pause between rounds, physics frozen
PHASE_RESULTS = "RESULTS"

CENTER = 0.5


class CosmicBalanceSession(SessionBase):
    """
    Keep an orb inside a target zone on a [0, 1] bar.

    Each tick is one fixed physics step regardless of how late the driver
    calls it. Holding the control pushes the orb toward the centre with a
    constant force, random drift pushes it around, damping bleeds velocity,
    and the walls bounce it back with restitution.
    """

    game_type = GameType.COSMIC_BALANCE

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        cfg = self.config
        self.step_ms = int(round(cfg.balance_step_sec * 1000))
        self.round_ticks = int(round(cfg.round_duration_sec * 1000 / self.step_ms))
        self.pause_ticks = int(round(cfg.round_pause_sec * 1000 / self.step_ms))
        self.max_rounds = cfg.balance_max_rounds
        half = self.profile.zone_size / 2
        self.zone_low = CENTER - half
        self.zone_high = CENTER + half
        self._reset_state()

    def _reset_state(self) -> None:
        self.phase = PHASE_READY
        self.score = 0
        self.position = CENTER
        self.velocity = 0.0
        self.control_held = False
        self.in_zone = False
        self.current_round = 1
        self.rounds_completed = 0
        self.ticks_left = self.round_ticks
        self.pause_left = 0
        self.round_ticks_in_zone = 0
        self.total_ticks_in_zone = 0
        self.perfect_rounds = 0

    @property
    def tick_interval(self) -> float:
        return self.config.balance_step_sec

    @property
    def time_in_zone_sec(self) -> float:
        return self.round_ticks_in_zone * self.step_ms / 1000

    @property
    def total_time_in_zone_sec(self) -> float:
        return self.total_ticks_in_zone * self.step_ms / 1000

    @property
    def round_time_remaining_sec(self) -> float:
        return self.ticks_left * self.step_ms / 1000

    @property
    def accuracy_pct(self) -> int:
        return self.total_ticks_in_zone * 100 // (self.round_ticks * self.max_rounds)

    def start(self, now: float) -> bool:
        if self.phase != PHASE_READY:
            return False
        self._begin(now)
        self.position = CENTER
        self.velocity = 0.0
        self.current_round = 1
        self.ticks_left = self.round_ticks
        self.phase = PHASE_PLAYING
        return True

    def reset(self) -> bool:
        if self.phase != PHASE_RESULTS:
            return False
        self._reset_state()
        self.started_at = None
        self.finished_at = None
        self._result = None
        return True

    def press(self, now: float) -> bool:
        if self.phase not in (PHASE_PLAYING, PHASE_ROUND_BREAK):
            return False
        self.control_held = True
        return True

    def release(self, now: float) -> bool:
        if self.phase not in (PHASE_PLAYING, PHASE_ROUND_BREAK):
            return False
        self.control_held = False
        return True

    def tick(self, now: float) -> None:
        self.now = max(self.now, now)
        if self.phase == PHASE_ROUND_BREAK:
            self.pause_left -= 1
            if self.pause_left <= 0:
                self.position = CENTER
                self.velocity = 0.0
                self.ticks_left = self.round_ticks
                self.phase = PHASE_PLAYING
            return
        if self.phase != PHASE_PLAYING:
            return

        self.ticks_left -= 1
        self.step_physics()
        if self.ticks_left <= 0:
            self._finish_round(now)

    def step_physics(self) -> None:
        diff = self.profile
        cfg = self.config
        if self.control_held:
            if self.position < CENTER:
                self.velocity += diff.control_strength
            elif self.position > CENTER:
                self.velocity -= diff.control_strength

        self.velocity += self.rng.uniform(-diff.drift_speed, diff.drift_speed)
        self.velocity *= cfg.damping
        self.position += self.velocity

        if self.position < 0.0:
            self.position = 0.0
            self.velocity = abs(self.velocity) * cfg.restitution
        elif self.position > 1.0:
            self.position = 1.0
            self.velocity = -abs(self.velocity) * cfg.restitution

        self.in_zone = self.zone_low <= self.position <= self.zone_high
        if self.in_zone:
            self.round_ticks_in_zone += 1
            self.total_ticks_in_zone += 1
            self.score += 1

    def _finish_round(self, now: float) -> None:
        if self.round_ticks_in_zone >= self.config.perfect_round_ratio * self.round_ticks:
            self.perfect_rounds += 1
        self.round_ticks_in_zone = 0
        self.rounds_completed += 1

        if self.rounds_completed >= self.max_rounds:
            self.phase = PHASE_RESULTS
            self._finish(now, self._build_result(now, self.metrics()))
            return

        self.current_round += 1
        self.pause_left = self.pause_ticks
        self.phase = PHASE_ROUND_BREAK

    def metrics(self) -> SessionMetrics:
        return SessionMetrics(
            focus_time_sec=self.total_ticks_in_zone * self.step_ms // 1000,
            accuracy_pct=self.accuracy_pct,
            perfect_rounds=self.perfect_rounds,
        )

    def snapshot(self) -> Dict[str, Any]:
        data = super().snapshot()
        data.update(
            {
                "position": self.position,
                "velocity": self.velocity,
                "target_zone": (self.zone_low, self.zone_high),
                "in_zone": self.in_zone,
                "holding": self.control_held,
                "round": self.current_round,
                "max_rounds": self.max_rounds,
                "round_time_remaining": self.round_time_remaining_sec,
                "round_progress": 1.0 - self.ticks_left / self.round_ticks,
                "time_in_zone": self.time_in_zone_sec,
                "total_time_in_zone": self.total_time_in_zone_sec,
                "perfect_rounds": self.perfect_rounds,
            }
        )
        return data
