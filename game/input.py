import pygame
from typing import List

from data.models import INPUT_PRESS, INPUT_RELEASE, INPUT_TAP, InputEvent


# 4x4 grid, one keyboard row per grid row
GRID_KEYS = [
    pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4,
    pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_r,
    pygame.K_a, pygame.K_s, pygame.K_d, pygame.K_f,
    pygame.K_z, pygame.K_x, pygame.K_c, pygame.K_v,
]

HOLD_KEYS = {pygame.K_SPACE}


class InputManager:
    """
    Layer between pygame events and the session engine.

    Pointer down counts both as a tap at that point and as pressing the
    hold control; pointer up releases it. Each session ignores the kinds it
    has no use for, and Mind Orbit maps a tap position onto its grid. Events
    queue up until the host collects them with poll_events().
    """

    def __init__(self) -> None:
        self._queue: List[InputEvent] = []
        self.key_to_cell = {key: idx for idx, key in enumerate(GRID_KEYS)}

    def process_pygame_event(self, event) -> None:
        translated = self.translate(event)
        self._queue.extend(translated)

    def translate(self, event) -> List[InputEvent]:
        if event.type == pygame.KEYDOWN:
            if event.key in HOLD_KEYS:
                return [InputEvent(INPUT_PRESS)]
            cell = self.key_to_cell.get(event.key)
            if cell is not None:
                return [InputEvent(INPUT_TAP, cell=cell)]
            return []

        if event.type == pygame.KEYUP and event.key in HOLD_KEYS:
            return [InputEvent(INPUT_RELEASE)]

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            pos = (float(event.pos[0]), float(event.pos[1]))
            return [InputEvent(INPUT_PRESS), InputEvent(INPUT_TAP, pos=pos)]

        if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            return [InputEvent(INPUT_RELEASE)]

        return []

    def poll_events(self) -> List[InputEvent]:
        events = self._queue
        self._queue = []
        return events
