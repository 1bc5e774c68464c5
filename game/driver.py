from __future__ import annotations

from typing import Callable, Dict, Optional

from data.models import InputEvent, SessionResult
from game.sessions.base import SessionBase


class SessionDriver:
    """
    Runs a session's periodic generators against a clock.

    pump() is meant to be called from the host loop every frame. It fires
    each due generator once per elapsed interval (fixed steps, never one big
    step for a long gap), up to max_catchup steps per generator; a larger
    backlog is dropped. Once the session is complete or stop() is called the
    generators are cancelled and the SessionResult, if any, is handed to
    on_result exactly once. Generators named in the session's live_timers
    are called with the clock reading instead of their due time.
    """

    def __init__(
        self,
        session: SessionBase,
        clock,
        on_result: Optional[Callable[[SessionResult], None]] = None,
        max_catchup: int = 5,
    ) -> None:
        self.session = session
        self.clock = clock
        self.on_result = on_result
        self.max_catchup = max(1, max_catchup)
        self.running: bool = False
        self.results_emitted: int = 0
        self._due: Dict[str, float] = {}

    def start(self) -> bool:
        now = self.clock.now()
        if self.running:
            # e.g. Mind Orbit's next round: generators keep their cadence
            return self.session.start(now)
        if not self.session.start(now):
            return False
        self.running = True
        self._due = {
            name: now + interval()
            for name, (interval, _) in self.session.timers().items()
        }
        return True

    def pump(self) -> int:
        if not self.running:
            return 0
        now = self.clock.now()
        timers = self.session.timers()
        budget = self.max_catchup * len(timers)
        fired = 0
        while self.running and self._due:
            name = min(self._due, key=self._due.get)
            due_at = self._due[name]
            if due_at > now:
                break
            if fired >= budget:
                for key, (interval, _) in timers.items():
                    self._due[key] = now + interval()
                break
            interval, callback = timers[name]
            callback(now if name in self.session.live_timers else due_at)
            fired += 1
            self._due[name] = due_at + interval()
            self._check_complete()
        return fired

    def handle_input(self, event: InputEvent) -> bool:
        if not self.running:
            return False
        handled = self.session.handle_input(event, self.clock.now())
        self._check_complete()
        return handled

    def stop(self) -> None:
        if not self.running:
            return
        self.session.exit(self.clock.now())
        self._check_complete()
        self._cancel()

    def _cancel(self) -> None:
        self.running = False
        self._due.clear()

    def _check_complete(self) -> None:
        if not self.session.is_complete():
            return
        self._cancel()
        result = self.session.take_result()
        if result is None:
            return
        self.results_emitted += 1
        if self.on_result is not None:
            self.on_result(result)
