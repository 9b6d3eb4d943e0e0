"""logic/input_manager.py — Raw pygame input → named intents.

The game loop hands every pygame event to ``feed``; systems downstream
only ask about intents (``just("click_move")``, ``held("move_left")``).
Which keys mean what depends on the active ``InputContext``.

    im.begin_frame()
    for event in pygame.event.get():
        im.feed(event)
    im.end_frame()

    if im.just("click_move"):
        ctl.set_destination(im.click_world(camera))
    ctl.update_movement(dt, now)         # PlayerController reads held()

A touch d-pad calls ``inject_held``; its intents are merged with the
keyboard ones, so the controller cannot tell them apart.
"""

from __future__ import annotations
import math
from enum import Enum, auto
from typing import Iterable

import pygame

from core.constants import TILE_SIZE
from logic.movement import MOVE_INTENTS, key_vector


class InputContext(Enum):
    GAMEPLAY = auto()
    UI = auto()          # a modal overlay owns the keyboard
    CUTSCENE = auto()    # nothing gets through except QUIT


# key → intent, per context.  Several keys may share an intent.
_KEYS: dict[InputContext, dict[int, str]] = {
    InputContext.GAMEPLAY: {
        pygame.K_w: "move_up",     pygame.K_UP: "move_up",
        pygame.K_s: "move_down",   pygame.K_DOWN: "move_down",
        pygame.K_a: "move_left",   pygame.K_LEFT: "move_left",
        pygame.K_d: "move_right",  pygame.K_RIGHT: "move_right",
        pygame.K_e: "interact",
        pygame.K_TAB: "toggle_debug",
    },
    InputContext.UI: {
        pygame.K_ESCAPE: "ui_close",
    },
}

# mouse button → intent (1 = left, 3 = right)
_BUTTONS: dict[InputContext, dict[int, str]] = {
    InputContext.GAMEPLAY: {1: "click_move", 3: "interact"},
}


class InputManager:
    """Edge-triggered presses via ``just``, level-triggered movement via ``held``."""

    def __init__(self):
        self.context = InputContext.GAMEPLAY
        self._pressed: set[str] = set()
        self._held: set[str] = set()
        self._virtual_held: set[str] = set()
        # screen pixels of this frame's click_move
        self.click_pos: tuple[int, int] | None = None
        # events no intent claimed (QUIT, resize, ...)
        self.raw_events: list[pygame.event.Event] = []

    # -- frame --

    def begin_frame(self):
        self._pressed.clear()
        self.click_pos = None
        self.raw_events.clear()

    def feed(self, event: pygame.event.Event):
        if event.type == pygame.QUIT:
            self.raw_events.append(event)
        elif self.context == InputContext.CUTSCENE:
            return
        elif event.type == pygame.KEYDOWN:
            self._on_key(event.key)
        elif event.type == pygame.MOUSEBUTTONDOWN:
            self._on_click(event.button, tuple(event.pos))
        else:
            self.raw_events.append(event)

    def end_frame(self):
        """Sample the keyboard for movement keys held right now."""
        self._held.clear()
        if self.context != InputContext.GAMEPLAY:
            return
        down = pygame.key.get_pressed()
        for key, intent in _KEYS[InputContext.GAMEPLAY].items():
            if intent in MOVE_INTENTS and down[key]:
                self._held.add(intent)

    def _on_key(self, key: int):
        intent = _KEYS.get(self.context, {}).get(key)
        if intent is not None:
            self._pressed.add(intent)

    def _on_click(self, button: int, pos: tuple[int, int]):
        intent = _BUTTONS.get(self.context, {}).get(button)
        if intent is None:
            return
        self._pressed.add(intent)
        if intent == "click_move":
            self.click_pos = pos

    # -- virtual d-pad --

    def inject_held(self, intents: Iterable[str]) -> None:
        self._virtual_held = {i for i in intents if i in MOVE_INTENTS}

    def clear_virtual(self) -> None:
        self._virtual_held.clear()

    # -- queries --

    def just(self, intent: str) -> bool:
        return intent in self._pressed

    def held(self, intent: str) -> bool:
        if self.context != InputContext.GAMEPLAY:
            return False
        return intent in self._held or intent in self._virtual_held

    def click_world(self, camera: tuple[float, float] = (0.0, 0.0),
                    tile_size: int = TILE_SIZE) -> tuple[float, float] | None:
        """This frame's click in world tile units, or ``None``."""
        if self.click_pos is None:
            return None
        sx, sy = self.click_pos
        return camera[0] + sx / tile_size, camera[1] + sy / tile_size

    def movement(self) -> tuple[float, float]:
        """Unit-length (dx, dy) from held movement intents; (0, 0) when idle."""
        dx, dy, _ = key_vector(i for i in MOVE_INTENTS if self.held(i))
        mag = math.hypot(dx, dy)
        if mag == 0.0:
            return 0.0, 0.0
        return dx / mag, dy / mag
