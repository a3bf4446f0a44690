from certificate.core.models import ElementKey
from ui.locales import ensure_language, format_message, get_section


def test_unknown_language_falls_back_to_english():
    assert ensure_language("xx") == "en"
    assert ensure_language(None) == "en"
    assert ensure_language("EN") == "en"


def test_every_element_has_a_label():
    labels = get_section("en", "element_panel")["elements"]
    assert set(labels) == {key.value for key in ElementKey}


def test_format_message():
    strings = get_section("en", "editor_tab")
    assert format_message(strings, "editing", id=7) == "Editing template 7"
    # a missing placeholder leaves the raw template
    assert format_message(strings, "editing") == "Editing template {id}"
    assert format_message(strings, "nope") == ""
