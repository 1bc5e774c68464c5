from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from data.models import GameType, InputEvent, SessionMetrics, SessionResult
from game.rewards import space_attack_level_award
from game.sessions.base import PHASE_READY, SessionBase, TimerSpec


PHASE_PLAYING = "PLAYING"


@dataclass
class Meteor:
    object_id: int
    x: float
    y: float
    size: float
    speed: float

    def contains(self, pos) -> bool:
        return math.hypot(pos[0] - self.x, pos[1] - self.y) <= self.size / 2


class SpaceAttackSession(SessionBase):
    """
    Meteors fall from the top edge; tapping one destroys it for points.

    Two generators run side by side: spawn() every spawn_interval / level
    seconds and move() every fixed movement step. There is no natural end,
    the host exits the session and the score at that moment is the result.
    """

    game_type = GameType.SPACE_ATTACK

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.level = 1
        self.meteors: List[Meteor] = []
        self.escaped = 0
        self.destroyed = 0
        self.last_award = 0
        self.energy_earned = 0
        self._ids = itertools.count(1)

    @property
    def spawn_interval(self) -> float:
        return self.profile.spawn_interval_sec / self.level

    def timers(self) -> Dict[str, TimerSpec]:
        return {
            "spawn": (lambda: self.spawn_interval, self.spawn),
            "move": (lambda: self.config.move_step_sec, self.move),
        }

    def start(self, now: float) -> bool:
        if self.phase != PHASE_READY:
            return False
        self._begin(now)
        self.phase = PHASE_PLAYING
        return True

    def tick(self, now: float) -> None:
        self.move(now)

    def spawn(self, now: float) -> Optional[Meteor]:
        if self.phase != PHASE_PLAYING:
            return None
        self.now = max(self.now, now)
        cfg = self.config
        meteor = Meteor(
            object_id=next(self._ids),
            x=self.rng.uniform(cfg.spawn_margin, cfg.area_width - cfg.spawn_margin),
            y=-cfg.spawn_margin,
            size=self.rng.uniform(cfg.meteor_min_size, cfg.meteor_max_size),
            speed=self.profile.base_speed + self.rng.uniform(0.0, 1.0) * self.level * 0.3,
        )
        self.meteors.append(meteor)
        return meteor

    def move(self, now: float) -> None:
        if self.phase != PHASE_PLAYING:
            return
        self.now = max(self.now, now)
        bottom = self.config.area_height + self.config.spawn_margin
        for meteor in self.meteors:
            meteor.y += meteor.speed
        alive = [m for m in self.meteors if m.y <= bottom]
        self.escaped += len(self.meteors) - len(alive)
        self.meteors = alive

    def find_meteor(self, event: InputEvent) -> Optional[Meteor]:
        if event.object_id is not None:
            for meteor in self.meteors:
                if meteor.object_id == event.object_id:
                    return meteor
            return None
        if event.pos is None:
            return None
        hits = [m for m in self.meteors if m.contains(event.pos)]
        if not hits:
            return None
        return min(hits, key=lambda m: math.hypot(event.pos[0] - m.x, event.pos[1] - m.y))

    def tap(self, event: InputEvent, now: float) -> bool:
        if self.phase != PHASE_PLAYING:
            return False
        meteor = self.find_meteor(event)
        if meteor is None:
            return False
        self.meteors.remove(meteor)
        self.destroyed += 1
        self.score += self.config.hit_score

        reached = self.score // self.config.level_up_every + 1
        while self.level < reached:
            self.level += 1
            self.last_award = space_attack_level_award(self.level, self.difficulty)
            self.energy_earned += self.last_award
        return True

    def metrics(self) -> SessionMetrics:
        return SessionMetrics(level=self.level)

    def _exit_result(self, now: float) -> Optional[SessionResult]:
        if self.phase != PHASE_PLAYING:
            return None
        return self._build_result(now, self.metrics())

    def snapshot(self) -> Dict[str, Any]:
        data = super().snapshot()
        data.update(
            {
                "level": self.level,
                "meteors": [
                    {"id": m.object_id, "x": m.x, "y": m.y, "size": m.size}
                    for m in self.meteors
                ],
                "destroyed": self.destroyed,
                "escaped": self.escaped,
                "last_award": self.last_award,
                "energy_earned": self.energy_earned,
            }
        )
        return data
