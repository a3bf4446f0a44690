"""The single default registry for template info and every element."""

from __future__ import annotations

import copy
from typing import Dict, Tuple

from .models import (
    ElementKey,
    ElementMap,
    ImageElement,
    Position,
    TemplateInfo,
    TextElement,
)


# Approximate (width, height) used for clamping, per element kind.
FOOTPRINTS: Dict[str, Tuple[int, int]] = {
    "text": (100, 30),
    "image": (100, 30),
}

# Image contents that render as a neutral box instead of a bound image.
DYNAMIC_MARKERS = frozenset({"[qr_code]", "[user_certificate_additional]"})

TEMPLATE_CONTENTS = '<div class="certificate-template-container"></div>'


DEFAULT_ELEMENTS: ElementMap = {
    ElementKey.TITLE: TextElement(
        content="Certificate of Completion",
        font_size=32,
        font_color="#8B0000",
        styles="font-family: Arial;",
        font_weight_bold=True,
        text_center=True,
        position=Position(400, 80),
        draggable=False,
    ),
    ElementKey.SUBTITLE: TextElement(
        content="Awarded for Excellence",
        font_size=20,
        font_color="#8B0000",
        text_center=True,
        position=Position(400, 130),
    ),
    ElementKey.BODY: TextElement(
        content="This certificate is awarded to",
        font_size=16,
        text_center=True,
        position=Position(400, 200),
    ),
    ElementKey.STUDENT_NAME: TextElement(
        content="[student_name]",
        font_size=28,
        font_weight_bold=True,
        text_center=True,
        position=Position(400, 250),
    ),
    ElementKey.COMPLETION_TEXT: TextElement(
        content="for successfully completing the course.",
        font_size=16,
        text_center=True,
        position=Position(400, 300),
    ),
    ElementKey.DATE: TextElement(
        content="[date]",
        font_size=14,
        display_date="textual",
        text_center=True,
        position=Position(400, 400),
    ),
    ElementKey.INSTRUCTOR_NAME: TextElement(
        content="[instructor_name]",
        font_size=14,
        position=Position(100, 500),
    ),
    ElementKey.PLATFORM_NAME: TextElement(
        content="[platform_name]",
        font_size=14,
        position=Position(100, 520),
    ),
    ElementKey.HINT: TextElement(
        content="Verify at lms.rocket-soft.org",
        font_size=12,
        font_color="#666",
        text_center=True,
        position=Position(400, 550),
    ),
    ElementKey.PLATFORM_SIGNATURE: ImageElement(
        content="[platform_signature]",
        image_size=120,
        position=Position(400, 480),
    ),
    ElementKey.STAMP: ImageElement(
        content="[stamp]",
        image_size=120,
        position=Position(500, 450),
    ),
    ElementKey.USER_CERTIFICATE_ADDITIONAL: ImageElement(
        content="[user_certificate_additional]",
        image_size=80,
        enable=False,
        position=Position(400, 400),
    ),
}


def default_element(key: ElementKey):
    return copy.deepcopy(DEFAULT_ELEMENTS[ElementKey(key)])


def default_elements() -> ElementMap:
    return {key: default_element(key) for key in ElementKey}


def default_info() -> TemplateInfo:
    return TemplateInfo()


def footprint(element) -> Tuple[int, int]:
    return FOOTPRINTS[element.kind]
