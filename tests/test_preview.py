from datetime import date

import pytest

from certificate.core.defaults import default_elements
from certificate.core.models import ElementKey, ImageElement, LocalFile, TextElement
from certificate.core.preview import (
    CENTERED_MAX_WIDTH,
    LEFT_MAX_WIDTH,
    ImageItem,
    PreviewContext,
    TextItem,
    image_sources,
    render_element,
    render_preview,
    substitute_tokens,
    wrap_lines,
)


@pytest.fixture
def context():
    return PreviewContext(today=date(2026, 3, 5))


class TestTokens:
    def test_known_tokens_are_substituted(self, context):
        text = substitute_tokens("[student_name] by [instructor_name] on [platform_name]", context)
        assert text == "John Doe by Jane Smith on LMS Platform"

    def test_unknown_tokens_stay_literal(self, context):
        assert substitute_tokens("Score: [score] / [Student_Name]", context) == "Score: [score] / [Student_Name]"

    def test_date_formats(self, context):
        assert substitute_tokens("[date]", context, "textual") == "March 5, 2026"
        assert substitute_tokens("[date]", context, "numeric") == "3/5/2026"
        assert substitute_tokens("[date]", context) == "3/5/2026"


class TestRenderPreview:
    def test_default_scene(self, state, context):
        scene = render_preview(state, context)

        # the QR placeholder is disabled, signature and stamp have no image yet
        assert ElementKey.USER_CERTIFICATE_ADDITIONAL not in scene.keys()
        assert ElementKey.STAMP not in scene.keys()
        assert scene.item("student_name").text == "John Doe"
        assert scene.item("date").text == "March 5, 2026"
        assert scene.background is None
        assert scene.size == (800, 600)

    def test_disabled_elements_are_omitted(self, state, context):
        for key in ElementKey:
            state.set(key, "enable", False)
        assert render_preview(state, context).items == []

        state.set("hint", "enable", True)
        assert render_preview(state, context).keys() == [ElementKey.HINT]

    def test_disabling_keeps_configuration(self, state, context):
        state.set("body", "font_size", 40)
        state.set("body", "enable", False)
        state.set("body", "enable", True)
        assert render_preview(state, context).item("body").font_size == 40

    def test_centred_text_left_edge(self, context):
        element = TextElement(content="Hello", text_center=True)
        element.position.x = 400
        item = render_element("body", element, context)
        assert isinstance(item, TextItem)
        assert item.left_for(120) == 340

        element.text_center = False
        assert render_element("body", element, context).left_for(120) == 400

    def test_dynamic_marker_is_placeholder(self, state, context):
        state.set("user_certificate_additional", "enable", True)
        item = render_preview(state, context).item("user_certificate_additional")
        assert isinstance(item, ImageItem)
        assert item.placeholder and item.source is None
        assert item.size == 80

        state.set("stamp", "content", "[qr_code]")
        assert render_preview(state, context).item("stamp").placeholder

    def test_bound_image(self, state, context):
        upload = LocalFile("/tmp/stamp.png")
        state.set("stamp", "image", upload)
        state.set("platform_signature", "image", "https://cdn.example.com/sig.png")
        scene = render_preview(state, context)

        assert scene.item("stamp").source == "/tmp/stamp.png"
        assert scene.item("stamp").size == 120
        assert scene.item("platform_signature").source == "https://cdn.example.com/sig.png"

    def test_string_sizes_are_tolerated(self, context):
        element = ImageElement(content="[stamp]", image="a.png", image_size="64")
        assert render_element("stamp", element, context).size == 64

    def test_background_source(self, state, context):
        state.set_info("background_image", LocalFile("/tmp/bg.jpg"))
        assert render_preview(state, context).background == "/tmp/bg.jpg"

    def test_bare_element_mapping(self, context):
        scene = render_preview(default_elements(), context)
        assert scene.background is None
        assert scene.item("student_name").text == "John Doe"
        assert ElementKey.USER_CERTIFICATE_ADDITIONAL not in scene.keys()

    def test_image_sources(self, state):
        state.set_info("background_image", LocalFile("/tmp/bg.jpg"))
        state.set("stamp", "image", "https://cdn.example.com/stamp.png")
        assert list(image_sources(state)) == ["/tmp/bg.jpg", "https://cdn.example.com/stamp.png"]
        assert list(image_sources(default_elements())) == []


def char_width(text):
    return 10 * len(text)


class TestWrap:
    def test_short_text_is_one_line(self):
        assert wrap_lines("Hello world", char_width, 400) == ["Hello world"]

    def test_words_wrap_at_max_width(self):
        lines = wrap_lines("aaaa bbbb cccc", char_width, 90)
        assert lines == ["aaaa bbbb", "cccc"]
        assert all(char_width(line) <= 90 for line in lines)

    def test_long_word_breaks_between_characters(self):
        assert wrap_lines("x" * 25, char_width, 100) == ["x" * 10, "x" * 10, "x" * 5]

    def test_newlines_are_kept(self):
        assert wrap_lines("one\ntwo", char_width, 400) == ["one", "two"]
        assert wrap_lines("", char_width, 400) == [""]

    def test_max_width_follows_alignment(self, context):
        element = TextElement(content="Hello", text_center=True)
        assert render_element("body", element, context).max_width == CENTERED_MAX_WIDTH == 500

        element.text_center = False
        assert render_element("body", element, context).max_width == LEFT_MAX_WIDTH == 400

    def test_centring_uses_the_wrapped_width(self, context):
        element = TextElement(content="Hello", text_center=True)
        element.position.x = 400
        item = render_element("body", element, context)
        assert item.left_for(900) == 150
