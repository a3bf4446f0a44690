import pytest

from certificate.core.defaults import DEFAULT_ELEMENTS
from certificate.core.models import (
    ElementKey,
    ImageElement,
    Position,
    TemplateInfo,
    TemplateStatus,
    TextElement,
)
from certificate.core.state import TemplateState


class TestTemplateState:
    def test_starts_from_default_registry(self, state):
        assert set(state.elements()) == set(ElementKey)
        assert state.get(ElementKey.DATE, "position") == Position(400, 400)
        assert state.get("title", "draggable") is False
        assert state.info.title == "Course Completion Certificate"

    def test_defaults_are_not_shared(self, state):
        state.set("body", "content", "Changed")
        assert DEFAULT_ELEMENTS[ElementKey.BODY].content == "This certificate is awarded to"
        assert TemplateState().get("body", "content") == "This certificate is awarded to"

    def test_set_touches_one_leaf(self, state):
        state.set("subtitle", "font_size", 24)
        element = state.element("subtitle")
        assert element.font_size == 24
        assert element.font_color == "#8B0000"
        assert element.position == Position(400, 130)

    def test_unknown_field_raises(self, state):
        with pytest.raises(KeyError):
            state.get("stamp", "font_size")
        with pytest.raises(KeyError):
            state.set("title", "image_size", 10)

    def test_set_position_rejected(self, state):
        with pytest.raises(ValueError):
            state.set("body", "position", Position(1, 1))

    def test_title_cannot_become_draggable(self, state):
        with pytest.raises(ValueError):
            state.set("title", "draggable", True)
        assert state.get("title", "draggable") is False

    def test_get_position_returns_copy(self, state):
        pos = state.get("date", "position")
        pos.x = 1
        assert state.get("date", "position").x == 400

    def test_move_ignores_fixed_elements(self, state):
        state.move("title", 10, 10)
        assert state.get("title", "position") == Position(400, 80)
        state.move("hint", 10, 20)
        assert state.get("hint", "position") == Position(10, 20)

    def test_set_info(self, state):
        state.set_info("status", TemplateStatus.DRAFT)
        assert state.info.status is TemplateStatus.DRAFT
        with pytest.raises(KeyError):
            state.set_info("colour", "red")

    def test_replace_fills_missing_keys(self, state):
        state.replace(TemplateInfo(title="Quiz"), {ElementKey.BODY: TextElement(content="Only body")})
        assert state.info.title == "Quiz"
        assert state.get("body", "content") == "Only body"
        assert isinstance(state.element("stamp"), ImageElement)
        assert state.get("stamp", "position") == Position(500, 450)

    def test_reset_restores_defaults(self, state):
        state.set("body", "enable", False)
        state.set_info("title", "Changed")
        state.reset()
        assert state.get("body", "enable") is True
        assert state.info.title == "Course Completion Certificate"


class TestSubscriptions:
    def test_listener_receives_key_and_field(self, state):
        events = []
        state.subscribe(lambda key, field: events.append((key, field)))

        state.set("body", "content", "x")
        state.move("body", 5, 5)
        state.set_info("locale", "FR")
        state.reset()

        assert events == [
            (ElementKey.BODY, "content"),
            (ElementKey.BODY, "position"),
            (None, "locale"),
            (None, "*"),
        ]

    def test_unsubscribe(self, state):
        events = []
        unsubscribe = state.subscribe(lambda key, field: events.append(field))
        unsubscribe()
        unsubscribe()
        state.set("body", "content", "x")
        assert events == []
