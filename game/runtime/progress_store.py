from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Optional

from data.logger import JsonlLogger
from data.models import GameStats, GameType, ProgressSummary, SessionResult


UNSET_REACTION_MS = 9999
NO_FAVORITE = "None"

ENERGY_FRAGMENTS = "energy_fragments"
TOTAL_ENERGY_EARNED = "total_energy_earned"
CURRENT_STREAK = "current_streak"
BEST_STREAK = "best_streak"
TOTAL_GAMES_PLAYED = "total_games_played"
TOTAL_PLAY_TIME = "total_play_time"
PERFECT_ROUNDS = "perfect_rounds"
FAVORITE_GAME = "favorite_game"
FIRST_PLAYED_DATE = "first_played_date"
LAST_PLAYED_DATE = "last_played_date"

GAMES_PLAYED = "games_played"
TOTAL_SCORE = "total_score"
HIGH_SCORE = "high_score"
BEST_REACTION = "best_reaction"
AVG_REACTION = "avg_reaction"
BEST_ACCURACY = "best_accuracy"
TOTAL_FOCUS_TIME = "total_focus_time"


def game_key(game_type: GameType, name: str) -> str:
    return f"{game_type.value}.{name}"


def _build_defaults() -> dict[str, Any]:
    defaults: dict[str, Any] = {
        ENERGY_FRAGMENTS: 0,
        TOTAL_ENERGY_EARNED: 0,
        CURRENT_STREAK: 0,
        BEST_STREAK: 0,
        TOTAL_GAMES_PLAYED: 0,
        TOTAL_PLAY_TIME: 0.0,
        PERFECT_ROUNDS: 0,
        FAVORITE_GAME: NO_FAVORITE,
        FIRST_PLAYED_DATE: None,
        LAST_PLAYED_DATE: None,
    }
    for game_type in GameType:
        for name in (GAMES_PLAYED, TOTAL_SCORE, HIGH_SCORE):
            defaults[game_key(game_type, name)] = 0
    defaults[game_key(GameType.STELLAR_REFLEX, BEST_REACTION)] = UNSET_REACTION_MS
    defaults[game_key(GameType.STELLAR_REFLEX, AVG_REACTION)] = 0
    defaults[game_key(GameType.COSMIC_BALANCE, BEST_ACCURACY)] = 0
    defaults[game_key(GameType.COSMIC_BALANCE, TOTAL_FOCUS_TIME)] = 0
    return defaults


FIELD_DEFAULTS = _build_defaults()
DATE_FIELDS = (FIRST_PLAYED_DATE, LAST_PLAYED_DATE)


class ProgressStore:
    """
    Lifetime statistics, streaks and energy shared by all games.

    Every field lives under its own key in the backing key-value store
    (anything with get(key) and set(key, value)); dates are ISO-8601 strings.
    The instance is the only writer of those keys. Each public mutation is a
    load -> change -> persist sequence under one lock.
    """

    def __init__(
        self,
        kv,
        today: Callable[[], datetime] = datetime.now,
        session_log: Optional[JsonlLogger] = None,
    ) -> None:
        self.kv = kv
        self.today = today
        self.session_log = session_log
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # reads

    def get(self, key: str) -> Any:
        if key not in FIELD_DEFAULTS:
            raise KeyError(f"Unknown progress field: {key}")
        value = self.kv.get(key)
        if value is None:
            return FIELD_DEFAULTS[key]
        if key in DATE_FIELDS:
            return datetime.fromisoformat(value)
        return value

    def game_stat(self, game_type: GameType, name: str) -> Any:
        return self.get(game_key(game_type, name))

    def game_stats(self, game_type: GameType) -> GameStats:
        return GameStats(
            games_played=self.game_stat(game_type, GAMES_PLAYED),
            total_score=self.game_stat(game_type, TOTAL_SCORE),
            high_score=self.game_stat(game_type, HIGH_SCORE),
        )

    @property
    def energy_fragments(self) -> int:
        return self.get(ENERGY_FRAGMENTS)

    @property
    def total_games_played(self) -> int:
        return self.get(TOTAL_GAMES_PLAYED)

    @property
    def current_streak(self) -> int:
        return self.get(CURRENT_STREAK)

    @property
    def best_streak(self) -> int:
        return self.get(BEST_STREAK)

    @property
    def favorite_game(self) -> str:
        return self.get(FAVORITE_GAME)

    def average_focus_level(self) -> int:
        total_games = self.get(TOTAL_GAMES_PLAYED)
        if total_games <= 0:
            return 0
        total_score = sum(self.game_stat(g, TOTAL_SCORE) for g in GameType)
        avg_score = total_score // total_games
        return min(100, max(0, avg_score // 10))

    def days_active(self, now: Optional[datetime] = None) -> int:
        first = self.get(FIRST_PLAYED_DATE)
        if first is None:
            return 0
        now = now or self.today()
        return max(1, (now.date() - first.date()).days + 1)

    def top_score(self) -> int:
        return max(self.game_stat(g, HIGH_SCORE) for g in GameType)

    def summary(self, now: Optional[datetime] = None) -> ProgressSummary:
        best_reaction = self.game_stat(GameType.STELLAR_REFLEX, BEST_REACTION)
        avg_reaction = self.game_stat(GameType.STELLAR_REFLEX, AVG_REACTION)
        best_accuracy = self.game_stat(GameType.COSMIC_BALANCE, BEST_ACCURACY)
        return ProgressSummary(
            total_games_played=self.get(TOTAL_GAMES_PLAYED),
            days_active=self.days_active(now),
            current_streak=self.get(CURRENT_STREAK),
            best_streak=self.get(BEST_STREAK),
            focus_level=self.average_focus_level(),
            energy_fragments=self.get(ENERGY_FRAGMENTS),
            total_energy_earned=self.get(TOTAL_ENERGY_EARNED),
            favorite_game=self.get(FAVORITE_GAME),
            best_reaction_ms=None if best_reaction == UNSET_REACTION_MS else best_reaction,
            avg_reaction_ms=avg_reaction or None,
            best_accuracy_pct=best_accuracy or None,
            total_focus_time_sec=self.game_stat(GameType.COSMIC_BALANCE, TOTAL_FOCUS_TIME),
            top_score=self.top_score(),
            perfect_rounds=self.get(PERFECT_ROUNDS),
            total_play_time_sec=self.get(TOTAL_PLAY_TIME),
            first_played=self.get(FIRST_PLAYED_DATE),
            last_played=self.get(LAST_PLAYED_DATE),
            games={g: self.game_stats(g) for g in GameType},
        )

    # ------------------------------------------------------------------
    # writes

    def record_session(self, result: SessionResult, now: Optional[datetime] = None) -> None:
        now = now or self.today()
        with self._lock:
            game = result.game_type
            self._add(game_key(game, GAMES_PLAYED), 1)
            self._add(game_key(game, TOTAL_SCORE), result.score)
            if result.score > self.game_stat(game, HIGH_SCORE):
                self.kv.set(game_key(game, HIGH_SCORE), result.score)

            if game == GameType.STELLAR_REFLEX:
                self._update_reaction(result.metrics.avg_reaction_ms)
            elif game == GameType.COSMIC_BALANCE:
                self._add(game_key(game, TOTAL_FOCUS_TIME), result.metrics.focus_time_sec)
                if result.metrics.accuracy_pct > self.game_stat(game, BEST_ACCURACY):
                    self.kv.set(game_key(game, BEST_ACCURACY), result.metrics.accuracy_pct)

            self._add(PERFECT_ROUNDS, result.metrics.perfect_rounds)
            self._add(ENERGY_FRAGMENTS, result.energy_earned)
            self._add(TOTAL_ENERGY_EARNED, result.energy_earned)
            self._add(TOTAL_GAMES_PLAYED, 1)
            self._add(TOTAL_PLAY_TIME, float(result.duration_sec))
            self._update_favorite()
            self._check_streak(now)

            if self.session_log is not None:
                record = {"event": "session_recorded", "timestamp": now.isoformat()}
                record.update(result.to_record())
                record["energy_fragments"] = self.get(ENERGY_FRAGMENTS)
                record["current_streak"] = self.get(CURRENT_STREAK)
                self.session_log.write(record)

    def check_streak(self, now: Optional[datetime] = None) -> None:
        with self._lock:
            self._check_streak(now or self.today())

    def reset_progress(self) -> None:
        with self._lock:
            for key, default in FIELD_DEFAULTS.items():
                self.kv.set(key, default)
            if self.session_log is not None:
                self.session_log.write(
                    {"event": "progress_reset", "timestamp": self.today().isoformat()}
                )

    def _add(self, key: str, delta) -> None:
        self.kv.set(key, self.get(key) + delta)

    def _update_reaction(self, avg_reaction_ms: int) -> None:
        if avg_reaction_ms <= 0:
            # a run without a single hit has no reaction time to compare
            return
        best_key = game_key(GameType.STELLAR_REFLEX, BEST_REACTION)
        if avg_reaction_ms < self.get(best_key):
            self.kv.set(best_key, avg_reaction_ms)

        avg_key = game_key(GameType.STELLAR_REFLEX, AVG_REACTION)
        previous = self.get(avg_key)
        if previous == 0:
            self.kv.set(avg_key, avg_reaction_ms)
        else:
            # pairwise smoothing, kept for compatibility with stored values
            self.kv.set(avg_key, (previous + avg_reaction_ms) // 2)

    def _update_favorite(self) -> None:
        favorite, most = None, 0
        for game_type in GameType:
            played = self.game_stat(game_type, GAMES_PLAYED)
            if played > most:
                favorite, most = game_type, played
        if favorite is not None:
            self.kv.set(FAVORITE_GAME, favorite.title)

    def _check_streak(self, now: datetime) -> None:
        today = now.date()
        last = self.get(LAST_PLAYED_DATE)
        current = self.get(CURRENT_STREAK)
        if last is not None:
            days = (today - last.date()).days
            if days <= 0:
                # same day, or the clock went backwards
                return
            current = current + 1 if days == 1 else 1
        else:
            current = 1

        self.kv.set(CURRENT_STREAK, current)
        if current > self.get(BEST_STREAK):
            self.kv.set(BEST_STREAK, current)
        self.kv.set(LAST_PLAYED_DATE, now.isoformat())
        if self.get(FIRST_PLAYED_DATE) is None:
            self.kv.set(FIRST_PLAYED_DATE, now.isoformat())
