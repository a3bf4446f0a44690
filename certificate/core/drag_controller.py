"""Pointer-driven Idle/Dragging state machine for element positions."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .defaults import footprint
from .models import CANVAS_HEIGHT, CANVAS_WIDTH, ElementKey, Position
from .state import TemplateState

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragSession:
    key: ElementKey
    offset: Point


class PointerHost(ABC):
    """Application-wide source of pointer move/release events.

    ``install`` starts delivering events to ``listener.on_move(x, y)`` and
    ``listener.on_release()``; ``remove`` stops it.
    """

    @abstractmethod
    def install(self, listener) -> None:
        ...

    @abstractmethod
    def remove(self, listener) -> None:
        ...


class _PointerListener:
    def __init__(self, controller: "DragController"):
        self.controller = controller

    def on_move(self, x: float, y: float) -> None:
        self.controller.move_to((x, y))

    def on_release(self) -> None:
        self.controller.release()


def clamp_position(x: float, y: float, size: Tuple[int, int], canvas: Tuple[int, int]) -> Position:
    max_x = max(0, canvas[0] - size[0])
    max_y = max(0, canvas[1] - size[1])
    return Position(max(0, min(x, max_x)), max(0, min(y, max_y)))


class DragController:
    """Moves one draggable element at a time, clamped to the canvas.

    Move/release listeners live on the global ``PointerHost`` only while a
    drag is active: they are installed once when a drag starts and removed
    once when it ends, whether by release or by :meth:`close`.
    """

    def __init__(
        self,
        state: TemplateState,
        host: PointerHost,
        canvas_size: Tuple[int, int] = (CANVAS_WIDTH, CANVAS_HEIGHT),
        canvas_origin: Point = (0, 0),
    ):
        self.state = state
        self.host = host
        self.canvas_size = canvas_size
        self.canvas_origin = canvas_origin
        self._session: Optional[DragSession] = None
        self._scope: Optional[ExitStack] = None

    # ------------------------------------------------------------------
    @property
    def drag_state(self) -> DragState:
        return DragState.DRAGGING if self._session else DragState.IDLE

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    # ------------------------------------------------------------------
    def press(self, key, cursor: Point) -> bool:
        """Start dragging ``key``; returns False when the press is ignored."""
        if self._session is not None:
            return False
        key = ElementKey(key)
        element = self.state.element(key)
        if not element.draggable:
            return False

        origin_x, origin_y = self.canvas_origin
        pos = element.position
        offset = (cursor[0] - origin_x - pos.x, cursor[1] - origin_y - pos.y)

        scope = ExitStack()
        listener = _PointerListener(self)
        self.host.install(listener)
        scope.callback(self.host.remove, listener)

        self._scope = scope
        self._session = DragSession(key, offset)
        logger.debug("Drag started: %s offset=%s", key.value, offset)
        return True

    def move_to(self, cursor: Point) -> Optional[Position]:
        session = self._session
        if session is None:
            return None
        origin_x, origin_y = self.canvas_origin
        proposed_x = cursor[0] - session.offset[0] - origin_x
        proposed_y = cursor[1] - session.offset[1] - origin_y
        element = self.state.element(session.key)
        clamped = clamp_position(proposed_x, proposed_y, footprint(element), self.canvas_size)
        self.state.move(session.key, clamped.x, clamped.y)
        return clamped

    def release(self) -> None:
        if self._session is None:
            return
        logger.debug("Drag finished: %s", self._session.key.value)
        self._end()

    def close(self) -> None:
        """Tear down an active drag, e.g. when the canvas is destroyed."""
        if self._session is not None:
            logger.debug("Drag aborted: %s", self._session.key.value)
        self._end()

    # ------------------------------------------------------------------
    def _end(self) -> None:
        scope, self._scope = self._scope, None
        self._session = None
        if scope is not None:
            scope.close()
