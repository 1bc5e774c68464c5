from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from data.models import GameType, InputEvent, SessionMetrics, SessionResult
from game.rewards import mind_orbit_round_award
from game.sessions.base import PHASE_READY, SessionBase


PHASE_SHOWING = "SHOWING"
PHASE_INPUT = "INPUT"
PHASE_CORRECT = "CORRECT"
PHASE_WRONG = "WRONG"


class MindOrbitSession(SessionBase):
    """
    Watch a sequence of highlighted cells, then repeat it.

    Every round replays with a fresh pattern of patternBase + level cells.
    A mistake keeps the level, a full match moves one level up. Rounds go on
    until the host exits.
    """

    game_type = GameType.MIND_ORBIT

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.cell_count = self.config.grid_size * self.config.grid_size
        self.level = 1
        self.pattern: List[int] = []
        self.user_pattern: List[int] = []
        # (start, end, cell) per highlight pulse, absolute times
        self.schedule: List[Tuple[float, float, int]] = []
        self.input_opens_at: float = 0.0
        self.rounds_played = 0
        self.rounds_cleared = 0
        self.last_award = 0
        self.energy_earned = 0

    @property
    def pattern_length(self) -> int:
        return self.profile.pattern_base + self.level

    def start(self, now: float) -> bool:
        # also "Next Level" after a correct round and "Retry" after a wrong one
        if self.phase not in (PHASE_READY, PHASE_CORRECT, PHASE_WRONG):
            return False
        if self.phase == PHASE_READY:
            self._begin(now)
        self.now = max(self.now, now)
        self.user_pattern = []
        self.pattern = [self.rng.randrange(self.cell_count) for _ in range(self.pattern_length)]
        self.schedule = self._build_schedule(now)
        self.rounds_played += 1
        self.phase = PHASE_SHOWING
        return True

    def _build_schedule(self, now: float) -> List[Tuple[float, float, int]]:
        cfg = self.config
        highlight = self.profile.show_speed_sec * cfg.highlight_share
        pause = self.profile.show_speed_sec * cfg.pause_share
        at = now + cfg.show_lead_in_sec
        schedule = []
        for cell in self.pattern:
            schedule.append((at, at + highlight, cell))
            at += highlight + pause
        self.input_opens_at = at
        return schedule

    def highlighted_cell(self, now: Optional[float] = None) -> Optional[int]:
        if self.phase != PHASE_SHOWING:
            return None
        t = self.now if now is None else now
        for start, end, cell in self.schedule:
            if start <= t < end:
                return cell
        return None

    @property
    def grid_rect(self) -> Tuple[float, float, float]:
        # (left, top, side): a square as wide as the play area, centred vertically
        side = self.config.area_width
        return 0.0, (self.config.area_height - side) / 2, side

    def cell_at(self, pos) -> Optional[int]:
        left, top, side = self.grid_rect
        size = self.config.grid_size
        step = side / size
        col = int((pos[0] - left) // step)
        row = int((pos[1] - top) // step)
        if not (0 <= col < size and 0 <= row < size):
            return None
        return row * size + col

    def tick(self, now: float) -> None:
        self.now = max(self.now, now)
        if self.phase == PHASE_SHOWING and now >= self.input_opens_at:
            self.phase = PHASE_INPUT

    def tap(self, event: InputEvent, now: float) -> bool:
        if self.phase != PHASE_INPUT:
            return False
        cell = event.cell
        if cell is None and event.pos is not None:
            cell = self.cell_at(event.pos)
        if cell is None or not 0 <= cell < self.cell_count:
            return False

        self.user_pattern.append(cell)
        idx = len(self.user_pattern) - 1
        if self.user_pattern[idx] != self.pattern[idx]:
            self.phase = PHASE_WRONG
            return True
        if len(self.user_pattern) == len(self.pattern):
            self._complete_round()
        return True

    def _complete_round(self) -> None:
        self.phase = PHASE_CORRECT
        self.score += 10 * self.level * self.multiplier
        self.level += 1
        self.rounds_cleared += 1
        self.last_award = mind_orbit_round_award(self.level, self.difficulty)
        self.energy_earned += self.last_award

    def metrics(self) -> SessionMetrics:
        accuracy = 0
        if self.rounds_played > 0:
            accuracy = self.rounds_cleared * 100 // self.rounds_played
        return SessionMetrics(accuracy_pct=accuracy, level=self.level)

    def _exit_result(self, now: float) -> Optional[SessionResult]:
        if self.phase == PHASE_READY:
            return None
        return self._build_result(now, self.metrics())

    def snapshot(self) -> Dict[str, Any]:
        data = super().snapshot()
        data.update(
            {
                "level": self.level,
                "grid_size": self.config.grid_size,
                "grid_rect": self.grid_rect,
                "pattern_length": len(self.pattern),
                "highlighted_cell": self.highlighted_cell(),
                "input_enabled": self.phase == PHASE_INPUT,
                "entered": len(self.user_pattern),
                "last_award": self.last_award,
                "energy_earned": self.energy_earned,
            }
        )
        return data
