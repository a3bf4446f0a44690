"""Explicit state container shared by the canvas and every control."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, List, Optional, Tuple

from .defaults import default_elements, default_info
from .models import (
    Element,
    ElementKey,
    ElementMap,
    Position,
    TemplateInfo,
    field_names,
)

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[ElementKey], str], None]


class TemplateState:
    """Typed store for template info and the twelve element configs.

    Form controls write any leaf except ``position`` through :meth:`set`;
    positions are written only through :meth:`move`, which the drag
    controller owns.
    """

    def __init__(self, info: Optional[TemplateInfo] = None, elements: Optional[ElementMap] = None):
        self.info = info or default_info()
        self._elements: ElementMap = elements or default_elements()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    def element(self, key) -> Element:
        return self._elements[ElementKey(key)]

    def elements(self) -> ElementMap:
        return dict(self._elements)

    def items(self) -> Iterator[Tuple[ElementKey, Element]]:
        return iter(list(self._elements.items()))

    # ------------------------------------------------------------------
    def get(self, key, field: str) -> Any:
        element = self.element(key)
        if field not in field_names(element):
            raise KeyError(f"{ElementKey(key).value} has no field {field!r}")
        value = getattr(element, field)
        if isinstance(value, Position):
            return Position(value.x, value.y)
        return value

    def set(self, key, field: str, value: Any) -> None:
        key = ElementKey(key)
        element = self.element(key)
        if field not in field_names(element):
            raise KeyError(f"{key.value} has no field {field!r}")
        if field == "position":
            raise ValueError("position is written by the drag controller only")
        if key is ElementKey.TITLE and field == "draggable" and value:
            raise ValueError("the title element cannot be made draggable")
        setattr(element, field, value)
        self._notify(key, field)

    def move(self, key, x: float, y: float) -> None:
        key = ElementKey(key)
        element = self.element(key)
        if not element.draggable:
            logger.debug("Ignoring move of fixed element %s", key.value)
            return
        element.position = Position(x, y)
        self._notify(key, "position")

    # ------------------------------------------------------------------
    def set_info(self, field: str, value: Any) -> None:
        if not hasattr(self.info, field):
            raise KeyError(f"template info has no field {field!r}")
        setattr(self.info, field, value)
        self._notify(None, field)

    def replace(self, info: TemplateInfo, elements: ElementMap) -> None:
        merged = default_elements()
        merged.update({ElementKey(k): v for k, v in elements.items()})
        self.info = info
        self._elements = merged
        self._notify(None, "*")

    def reset(self) -> None:
        self.replace(default_info(), default_elements())

    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: Optional[ElementKey], field: str) -> None:
        for listener in list(self._listeners):
            listener(key, field)
