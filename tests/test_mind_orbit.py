import pytest

from data.models import INPUT_TAP, DifficultyLevel, GameType, InputEvent
from game.sessions.base import PHASE_EXITED, PHASE_READY
from game.sessions.mind_orbit import (
    PHASE_CORRECT,
    PHASE_INPUT,
    PHASE_SHOWING,
    PHASE_WRONG,
    MindOrbitSession,
)


def cell(index):
    return InputEvent(INPUT_TAP, cell=index)


def open_input(session):
    session.tick(session.input_opens_at)
    assert session.phase == PHASE_INPUT


def enter(session, cells, now=10.0):
    for index in cells:
        session.handle_input(cell(index), now)


@pytest.fixture
def session(seeded_rng):
    s = MindOrbitSession(DifficultyLevel.NORMAL, seeded_rng)
    s.start(0.0)
    return s


class TestShowing:
    def test_pattern_length_follows_level(self, session):
        assert len(session.pattern) == 3 + 1
        assert all(0 <= c < 16 for c in session.pattern)

    def test_schedule_timing(self, session):
        assert session.phase == PHASE_SHOWING
        assert session.input_opens_at == pytest.approx(0.5 + 4 * 0.8)
        assert session.highlighted_cell(0.2) is None
        assert session.highlighted_cell(0.6) == session.pattern[0]
        assert session.highlighted_cell(1.0) is None
        assert session.highlighted_cell(1.4) == session.pattern[1]

    def test_input_opens_after_last_highlight(self, session):
        session.tick(3.6)
        assert session.phase == PHASE_SHOWING
        session.tick(3.8)
        assert session.phase == PHASE_INPUT
        assert session.highlighted_cell() is None

    def test_taps_while_showing_are_ignored(self, session):
        assert session.handle_input(cell(session.pattern[0]), 0.6) is False
        assert session.user_pattern == []


class TestRounds:
    def test_correct_sequence_levels_up(self, session):
        open_input(session)
        enter(session, session.pattern)

        assert session.phase == PHASE_CORRECT
        assert session.level == 2
        assert session.score == 10 * 1 * 2
        assert session.last_award == 2 * 3 * 2
        assert session.rounds_cleared == 1

    def test_next_round_uses_longer_pattern(self, session):
        open_input(session)
        enter(session, session.pattern)
        assert session.start(20.0) is True
        assert session.phase == PHASE_SHOWING
        assert len(session.pattern) == 3 + 2
        assert session.user_pattern == []

    @pytest.mark.parametrize("wrong_at", [0, 1, 3])
    def test_wrong_cell_at_any_position(self, session, wrong_at):
        open_input(session)
        entered = list(session.pattern[:wrong_at])
        entered.append((session.pattern[wrong_at] + 1) % 16)
        enter(session, entered)

        assert session.phase == PHASE_WRONG
        assert session.level == 1
        assert session.score == 0
        # no more taps once the round is decided
        assert session.handle_input(cell(0), 11.0) is False

    def test_retry_keeps_level(self, session):
        open_input(session)
        enter(session, [(session.pattern[0] + 1) % 16])
        assert session.start(12.0) is True
        assert len(session.pattern) == 4
        assert session.rounds_played == 2

    def test_out_of_range_cell_ignored(self, session):
        open_input(session)
        assert session.handle_input(cell(16), 5.0) is False
        assert session.handle_input(InputEvent(INPUT_TAP), 5.0) is False
        assert session.user_pattern == []

    @pytest.mark.parametrize(
        "pos, expected",
        [
            ((10.0, 160.0), 0),
            ((100.0, 300.0), 5),
            ((380.0, 540.0), 15),
            ((200.0, 100.0), None),
            ((200.0, 600.0), None),
        ],
    )
    def test_cell_at_maps_play_area_to_grid(self, session, pos, expected):
        # grid spans the full width, 390x390 starting at y=155
        assert session.cell_at(pos) == expected

    def test_clicks_on_grid_enter_cells(self, session):
        left, top, side = session.grid_rect
        step = side / 4
        open_input(session)
        for index in session.pattern:
            row, col = divmod(index, 4)
            click = InputEvent(INPUT_TAP, pos=(left + (col + 0.5) * step, top + (row + 0.5) * step))
            assert session.handle_input(click, 10.0) is True
        assert session.phase == PHASE_CORRECT

    def test_click_outside_grid_ignored(self, session):
        open_input(session)
        assert session.handle_input(InputEvent(INPUT_TAP, pos=(195.0, 20.0)), 5.0) is False
        assert session.user_pattern == []

    def test_start_refused_mid_round(self, session):
        assert session.start(1.0) is False
        open_input(session)
        assert session.start(5.0) is False


class TestExit:
    def test_exit_reports_progress(self, session):
        open_input(session)
        enter(session, session.pattern)
        session.start(20.0)
        open_input(session)
        enter(session, [(session.pattern[0] + 1) % 16], now=30.0)
        session.exit(31.0)

        assert session.phase == PHASE_EXITED
        result = session.take_result()
        assert result.game_type == GameType.MIND_ORBIT
        assert result.score == 20
        assert result.metrics.level == 2
        assert result.metrics.accuracy_pct == 50
        assert result.energy_earned == session.energy_earned == 12
        assert result.duration_sec == pytest.approx(31.0)

    def test_exit_before_start_reports_nothing(self, seeded_rng):
        s = MindOrbitSession(DifficultyLevel.EASY, seeded_rng)
        assert s.phase == PHASE_READY
        s.exit(0.0)
        assert s.take_result() is None

    def test_easy_pattern_is_shorter(self, seeded_rng):
        s = MindOrbitSession(DifficultyLevel.EASY, seeded_rng)
        s.start(0.0)
        assert len(s.pattern) == 3
        assert s.input_opens_at == pytest.approx(0.5 + 3 * 1.0)
