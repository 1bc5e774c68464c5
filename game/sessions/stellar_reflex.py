from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

from data.models import GameType, InputEvent, SessionMetrics
from game.rewards import reaction_points
from game.sessions.base import PHASE_READY, SessionBase


PHASE_COUNTDOWN = "COUNTDOWN"
PHASE_WAITING = "WAITING"  # playing, target not shown yet
PHASE_TARGET = "TARGET"    # playing, target visible
PHASE_RESULTS = "RESULTS"


class StellarReflexSession(SessionBase):
    game_type = GameType.STELLAR_REFLEX
    # reaction time is measured from when the target is actually shown
    live_timers = ("tick",)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.max_rounds = self.config.reflex_max_rounds
        self._reset_state()

    def _reset_state(self) -> None:
        self.phase = PHASE_READY
        self.score = 0
        self.level = 1
        self.countdown = self.config.countdown_from
        self.next_count_at: float = 0.0
        self.target_due_at: float = 0.0
        self.target_pos: Optional[Tuple[float, float]] = None
        self.appear_time: Optional[float] = None
        self.reaction_times: List[float] = []
        self.rounds_played = 0
        self.last_points = 0

    @property
    def avg_reaction_ms(self) -> int:
        if not self.reaction_times:
            return 0
        return round(sum(self.reaction_times) / len(self.reaction_times) * 1000)

    @property
    def best_reaction_ms(self) -> int:
        if not self.reaction_times:
            return 0
        return round(min(self.reaction_times) * 1000)

    def start(self, now: float) -> bool:
        if self.phase != PHASE_READY:
            return False
        self._begin(now)
        self.countdown = self.config.countdown_from
        self.next_count_at = now + self.config.countdown_step_sec
        self.phase = PHASE_COUNTDOWN
        return True

    def reset(self) -> bool:
        if self.phase != PHASE_RESULTS:
            return False
        self._reset_state()
        self.started_at = None
        self.finished_at = None
        self._result = None
        return True

    def tick(self, now: float) -> None:
        self.now = max(self.now, now)
        if self.phase == PHASE_COUNTDOWN:
            while self.countdown > 0 and now >= self.next_count_at:
                self.countdown -= 1
                self.next_count_at += self.config.countdown_step_sec
            if self.countdown == 0:
                self.phase = PHASE_WAITING
                self._schedule_target(now)
            return

        if self.phase == PHASE_WAITING and now >= self.target_due_at:
            self._show_target(now)

    def _schedule_target(self, after: float) -> None:
        low, high = self.profile.delay_range_sec
        self.target_due_at = after + self.rng.uniform(low, high)

    def _show_target(self, now: float) -> None:
        cfg = self.config
        padding = self.profile.target_size + cfg.target_padding
        x = self.rng.uniform(padding, cfg.area_width - padding)
        y = self.rng.uniform(
            padding + cfg.target_vertical_margin,
            cfg.area_height - padding - cfg.target_vertical_margin,
        )
        self.target_pos = (x, y)
        self.appear_time = now
        self.phase = PHASE_TARGET

    def tap(self, event: InputEvent, now: float) -> bool:
        if self.phase != PHASE_TARGET or self.appear_time is None:
            return False
        # only a tap on the target counts, grid keys carry no position
        if event.pos is None:
            return False
        if self.target_pos is not None:
            dist = math.hypot(event.pos[0] - self.target_pos[0], event.pos[1] - self.target_pos[1])
            if dist > self.profile.target_size / 2:
                return False

        reaction = max(0.0, now - self.appear_time)
        self.reaction_times.append(reaction)
        self.last_points = reaction_points(reaction)
        self.score += self.last_points
        self.rounds_played += 1
        self.target_pos = None
        self.appear_time = None

        if self.rounds_played % self.config.rounds_per_level == 0:
            self.level += 1

        if self.rounds_played >= self.max_rounds:
            self.phase = PHASE_RESULTS
            self._finish(now, self._build_result(now, self.metrics()))
            return True

        self.phase = PHASE_WAITING
        self._schedule_target(now + self.config.next_target_pause_sec)
        return True

    def metrics(self) -> SessionMetrics:
        return SessionMetrics(
            avg_reaction_ms=self.avg_reaction_ms,
            best_reaction_ms=self.best_reaction_ms,
            level=self.level,
        )

    def snapshot(self) -> Dict[str, Any]:
        data = super().snapshot()
        data.update(
            {
                "level": self.level,
                "countdown": self.countdown,
                "round": min(self.rounds_played + 1, self.max_rounds),
                "max_rounds": self.max_rounds,
                "target_visible": self.phase == PHASE_TARGET,
                "target_pos": self.target_pos,
                "target_size": self.profile.target_size,
                "last_points": self.last_points,
                "avg_reaction_ms": self.avg_reaction_ms,
                "best_reaction_ms": self.best_reaction_ms,
            }
        )
        return data
