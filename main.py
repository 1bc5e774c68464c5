import argparse

import pygame

from config.settings import WindowConfig, load_settings
from data.kv_store import JsonFileKeyValueStore
from data.logger import JsonlLogger
from data.models import DifficultyLevel, GameType
from game.driver import SessionDriver
from game.input import InputManager
from game.runtime.clock import MonotonicClock, make_rng
from game.runtime.progress_store import ProgressStore
from game.sessions import create_session


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Nebula Flow session host")
    parser.add_argument("game", choices=[g.value for g in GameType])
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in DifficultyLevel],
        default=DifficultyLevel.NORMAL.value,
    )
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def hud_text(snapshot: dict) -> str:
    parts = [snapshot["phase"], f"score {snapshot['score']}"]
    if "level" in snapshot:
        parts.append(f"lv {snapshot['level']}")
    if "round" in snapshot:
        parts.append(f"round {snapshot['round']}/{snapshot['max_rounds']}")
    return " | ".join(parts)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    window = WindowConfig()

    store = ProgressStore(
        JsonFileKeyValueStore(settings.store_path),
        session_log=JsonlLogger(settings.sessions_log_path),
    )
    seed = args.seed if args.seed is not None else settings.seed
    session = create_session(GameType(args.game), DifficultyLevel(args.difficulty), make_rng(seed))
    driver = SessionDriver(session, MonotonicClock(), on_result=store.record_session)
    input_manager = InputManager()

    pygame.init()
    screen = pygame.display.set_mode((window.width, window.height))
    clock = pygame.time.Clock()

    driver.start()
    running = True
    while running:
        clock.tick(window.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_RETURN:
                # next round (Mind Orbit) or play again after results
                reset = getattr(session, "reset", None)
                if reset is not None and session.is_complete():
                    reset()
                driver.start()
            else:
                input_manager.process_pygame_event(event)

        for input_event in input_manager.poll_events():
            driver.handle_input(input_event)
        driver.pump()

        pygame.display.set_caption(f"{window.title} - {hud_text(session.snapshot())}")
        screen.fill((8, 10, 24))
        pygame.display.flip()

    # leaving mid-game: open-ended games report, bounded ones are dropped
    driver.stop()
    pygame.quit()

    summary = store.summary()
    print("Session closed")
    print(
        f"energy={summary.energy_fragments} games={summary.total_games_played} "
        f"streak={summary.current_streak}/{summary.best_streak} favorite={summary.favorite_game}"
    )


if __name__ == "__main__":
    main()
