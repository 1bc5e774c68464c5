import random
import sys

import pytest

from config.settings import default_data_dir, load_settings
from data.models import DifficultyLevel, GameType, InputEvent
from game.runtime.clock import ManualClock, make_rng
from game.sessions import SESSION_CLASSES, create_session
from main import hud_text


def test_manual_clock_only_moves_forward():
    clock = ManualClock(5.0)
    assert clock.advance(0.5) == 5.5
    clock.set(7.0)
    assert clock.now() == 7.0
    with pytest.raises(ValueError):
        clock.advance(-1.0)
    with pytest.raises(ValueError):
        clock.set(6.0)


def test_seeded_rng_repeats():
    assert make_rng(42).random() == make_rng(42).random()


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("NEBULA_FLOW_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("NEBULA_FLOW_SEED", "17")
    settings = load_settings()
    assert settings.data_dir == tmp_path
    assert settings.seed == 17
    assert settings.store_path == tmp_path / "progress.json"
    assert settings.sessions_log_path == tmp_path / "sessions.jsonl"


def test_load_settings_without_seed(monkeypatch, tmp_path):
    monkeypatch.setenv("NEBULA_FLOW_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("NEBULA_FLOW_SEED", raising=False)
    assert load_settings().seed is None


@pytest.mark.parametrize("game_type", list(GameType))
def test_create_session_for_every_game(game_type):
    session = create_session(game_type, DifficultyLevel.EASY, random.Random(0))
    assert isinstance(session, SESSION_CLASSES[game_type])
    assert session.game_type == game_type
    assert session.multiplier == 1


def test_unknown_input_kind_raises():
    session = create_session(GameType.SPACE_ATTACK, DifficultyLevel.EASY, random.Random(0))
    session.start(0.0)
    with pytest.raises(ValueError):
        session.handle_input(InputEvent("swipe"), 0.1)


def test_hud_text():
    session = create_session(GameType.STELLAR_REFLEX, DifficultyLevel.NORMAL, random.Random(0))
    text = hud_text(session.snapshot())
    assert text.startswith("READY | score 0")
    assert "round 1/10" in text


def test_default_data_dir_follows_xdg(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    monkeypatch.delenv("NEBULA_FLOW_DATA_DIR", raising=False)
    assert default_data_dir() == tmp_path / "NebulaFlow"
    assert load_settings().data_dir == tmp_path / "NebulaFlow"
    # nothing is created until the first write
    assert not (tmp_path / "NebulaFlow").exists()
