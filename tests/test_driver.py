from config.settings import EngineConfig
from data.models import INPUT_TAP, DifficultyLevel, GameType, InputEvent
from game.driver import SessionDriver
from game.sessions import create_session
from game.sessions.mind_orbit import PHASE_CORRECT, PHASE_SHOWING
from game.sessions.stellar_reflex import PHASE_TARGET


FRAME = 0.016


def run_frames(driver, clock, frames):
    for _ in range(frames):
        clock.advance(FRAME)
        driver.pump()


class Collector:
    def __init__(self):
        self.results = []

    def __call__(self, result):
        self.results.append(result)


def test_pump_before_start_does_nothing(clock, pinned_rng):
    session = create_session(GameType.COSMIC_BALANCE, DifficultyLevel.NORMAL, pinned_rng)
    driver = SessionDriver(session, clock)
    clock.advance(1.0)
    assert driver.pump() == 0
    assert session.score == 0


def test_start_twice_is_refused_for_bounded_game(clock, pinned_rng):
    session = create_session(GameType.COSMIC_BALANCE, DifficultyLevel.NORMAL, pinned_rng)
    driver = SessionDriver(session, clock)
    assert driver.start() is True
    assert driver.start() is False


def test_space_attack_generators_cadence(clock, seeded_rng):
    session = create_session(GameType.SPACE_ATTACK, DifficultyLevel.NORMAL, seeded_rng)
    driver = SessionDriver(session, clock)
    driver.start()

    run_frames(driver, clock, 90)  # ~1.44s
    assert session.meteors == []
    run_frames(driver, clock, 10)  # ~1.6s
    assert len(session.meteors) == 1
    assert session.meteors[0].y > -50


def test_backlog_beyond_catchup_is_dropped(clock, pinned_rng):
    session = create_session(GameType.COSMIC_BALANCE, DifficultyLevel.NORMAL, pinned_rng)
    driver = SessionDriver(session, clock, max_catchup=5)
    driver.start()

    clock.advance(10.0)
    assert driver.pump() == 5
    assert driver.pump() == 0
    clock.advance(FRAME)
    assert driver.pump() == 1


def test_result_emitted_once(clock, pinned_rng):
    config = EngineConfig(round_duration_sec=0.16, balance_max_rounds=1)
    session = create_session(GameType.COSMIC_BALANCE, DifficultyLevel.NORMAL, pinned_rng, config)
    collector = Collector()
    driver = SessionDriver(session, clock, on_result=collector)
    driver.start()

    run_frames(driver, clock, 30)
    assert session.is_complete()
    assert driver.running is False
    assert len(collector.results) == 1
    assert collector.results[0].game_type == GameType.COSMIC_BALANCE

    clock.advance(1.0)
    assert driver.pump() == 0
    driver.stop()
    assert driver.results_emitted == 1


def test_stop_reports_open_ended_game(clock, seeded_rng):
    session = create_session(GameType.SPACE_ATTACK, DifficultyLevel.EASY, seeded_rng)
    collector = Collector()
    driver = SessionDriver(session, clock, on_result=collector)
    driver.start()
    run_frames(driver, clock, 200)

    driver.stop()
    assert driver.running is False
    assert len(collector.results) == 1
    assert collector.results[0].duration_sec == clock.now()

    meteors = [(m.object_id, m.y) for m in session.meteors]
    clock.advance(5.0)
    assert driver.pump() == 0
    assert [(m.object_id, m.y) for m in session.meteors] == meteors


def test_stop_drops_unfinished_bounded_game(clock, pinned_rng):
    session = create_session(GameType.COSMIC_BALANCE, DifficultyLevel.NORMAL, pinned_rng)
    collector = Collector()
    driver = SessionDriver(session, clock, on_result=collector)
    driver.start()
    run_frames(driver, clock, 50)

    driver.stop()
    assert collector.results == []
    assert driver.results_emitted == 0
    assert session.is_complete()


def test_input_forwarded_with_clock_time(clock, seeded_rng):
    session = create_session(GameType.SPACE_ATTACK, DifficultyLevel.HARD, seeded_rng)
    driver = SessionDriver(session, clock)
    tap = InputEvent(INPUT_TAP, object_id=1)
    assert driver.handle_input(tap) is False

    driver.start()
    run_frames(driver, clock, 70)  # first spawn at 1.0s on hard
    assert driver.handle_input(tap) is True
    assert session.score == 10


def test_mind_orbit_next_round_while_running(clock, seeded_rng):
    session = create_session(GameType.MIND_ORBIT, DifficultyLevel.EASY, seeded_rng)
    driver = SessionDriver(session, clock)
    driver.start()
    run_frames(driver, clock, 250)  # 3.5s lead-in + show

    for index in session.pattern:
        driver.handle_input(InputEvent(INPUT_TAP, cell=index))
    assert session.phase == PHASE_CORRECT

    assert driver.start() is True
    assert driver.running is True
    assert session.phase == PHASE_SHOWING
    assert len(session.pattern) == 2 + 2


def test_reaction_measured_from_visible_target_under_frame_lag(clock, seeded_rng):
    session = create_session(GameType.STELLAR_REFLEX, DifficultyLevel.NORMAL, seeded_rng)
    driver = SessionDriver(session, clock)
    driver.start()

    for _ in range(200):
        clock.advance(0.06)
        driver.pump()
        if session.phase == PHASE_TARGET:
            break
    assert session.phase == PHASE_TARGET
    assert session.appear_time == clock.now()

    assert driver.handle_input(InputEvent(INPUT_TAP, pos=session.target_pos)) is True
    assert session.last_points == 100
    assert session.reaction_times == [0.0]
