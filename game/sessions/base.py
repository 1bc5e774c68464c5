from __future__ import annotations

import random
from typing import Any, Callable, Dict, Optional, Tuple

from config.settings import EngineConfig, difficulty_profile
from data.models import (
    INPUT_PRESS,
    INPUT_RELEASE,
    INPUT_TAP,
    DifficultyLevel,
    GameType,
    InputEvent,
    SessionMetrics,
    SessionResult,
)
from game.rewards import compute_energy, energy_multiplier


PHASE_READY = "READY"
PHASE_EXITED = "EXITED"

TimerSpec = Tuple[Callable[[], float], Callable[[float], None]]


class SessionBase:
    """
    One play-through of a mini-game.

    The session never owns a timer: a driver calls the callbacks returned by
    timers() at their intervals and forwards player input with a timestamp.
    All mutation happens inside those calls, so a session run with a fixed
    rng and explicit timestamps is fully reproducible.
    """

    game_type: GameType
    # timers that put something on screen get the clock reading, not their due time
    live_timers: Tuple[str, ...] = ()

    def __init__(
        self,
        difficulty: DifficultyLevel,
        rng: random.Random,
        config: EngineConfig = EngineConfig(),
    ) -> None:
        self.difficulty = difficulty
        self.profile = difficulty_profile(self.game_type, difficulty)
        self.multiplier = energy_multiplier(difficulty)
        self.rng = rng
        self.config = config
        self.phase: str = PHASE_READY
        self.score: int = 0
        self.now: float = 0.0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self._result: Optional[SessionResult] = None

    @property
    def tick_interval(self) -> float:
        return self.config.poll_step_sec

    def timers(self) -> Dict[str, TimerSpec]:
        return {"tick": (lambda: self.tick_interval, self.tick)}

    def start(self, now: float) -> bool:
        raise NotImplementedError

    def tick(self, now: float) -> None:
        raise NotImplementedError

    def handle_input(self, event: InputEvent, now: float) -> bool:
        if self.is_complete():
            return False
        self.now = max(self.now, now)
        if event.kind == INPUT_PRESS:
            return self.press(now)
        if event.kind == INPUT_RELEASE:
            return self.release(now)
        if event.kind == INPUT_TAP:
            return self.tap(event, now)
        raise ValueError(f"Unknown input kind: {event.kind}")

    def press(self, now: float) -> bool:
        return False

    def release(self, now: float) -> bool:
        return False

    def tap(self, event: InputEvent, now: float) -> bool:
        return False

    def exit(self, now: float) -> None:
        if self.is_complete():
            return
        result = self._exit_result(now)
        self.phase = PHASE_EXITED
        self._finish(now, result)

    def is_complete(self) -> bool:
        return self.finished_at is not None

    def take_result(self) -> Optional[SessionResult]:
        result = self._result
        self._result = None
        return result

    def snapshot(self) -> Dict[str, Any]:
        return {
            "game_type": self.game_type.value,
            "difficulty": self.difficulty.value,
            "phase": self.phase,
            "score": self.score,
        }

    def _begin(self, now: float) -> None:
        self.now = now
        self.started_at = now
        self.finished_at = None
        self._result = None

    def _exit_result(self, now: float) -> Optional[SessionResult]:
        # Bounded games only report a result when they run to the end.
        return None

    def _finish(self, now: float, result: Optional[SessionResult]) -> None:
        self.finished_at = now
        self._result = result

    def _build_result(self, now: float, metrics: SessionMetrics) -> SessionResult:
        started = self.started_at if self.started_at is not None else now
        return SessionResult(
            game_type=self.game_type,
            difficulty=self.difficulty,
            score=self.score,
            energy_earned=compute_energy(self.game_type, self.difficulty, self.score, metrics),
            metrics=metrics,
            duration_sec=max(0.0, now - started),
        )
