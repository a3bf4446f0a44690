"""Dataclasses that describe a certificate template and its elements."""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Union


CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600

TEMPLATE_LOCALES = ("EN", "ES", "FR")

FONT_SIZE_RANGE = (1, 200)
IMAGE_SIZE_RANGE = (1, 800)


def clamp_size(value: int, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


def normalize_locale(value: Optional[str]) -> Optional[str]:
    """Upper-cased locale code, or None when blank."""
    if value is None:
        return None
    value = str(value).strip().upper()
    return value or None


def locale_options(current: Optional[str] = None) -> Tuple[str, ...]:
    """Known locales, plus ``current`` when a record carries another one."""
    current = normalize_locale(current)
    if current and current not in TEMPLATE_LOCALES:
        return TEMPLATE_LOCALES + (current,)
    return TEMPLATE_LOCALES


class ElementKey(str, Enum):
    TITLE = "title"
    SUBTITLE = "subtitle"
    BODY = "body"
    STUDENT_NAME = "student_name"
    COMPLETION_TEXT = "completion_text"
    DATE = "date"
    INSTRUCTOR_NAME = "instructor_name"
    PLATFORM_NAME = "platform_name"
    HINT = "hint"
    PLATFORM_SIGNATURE = "platform_signature"
    STAMP = "stamp"
    USER_CERTIFICATE_ADDITIONAL = "user_certificate_additional"


IMAGE_KEYS = frozenset(
    {
        ElementKey.PLATFORM_SIGNATURE,
        ElementKey.STAMP,
        ElementKey.USER_CERTIFICATE_ADDITIONAL,
    }
)
TEXT_KEYS = frozenset(k for k in ElementKey if k not in IMAGE_KEYS)


class TemplateType(str, Enum):
    QUIZ = "quiz"
    COURSE = "course"
    BUNDLE = "bundle"


class TemplateStatus(str, Enum):
    PUBLISH = "publish"
    DRAFT = "draft"


@dataclass(eq=False)
class LocalFile:
    """A file picked on the operator's disk, uploaded as a binary part.

    Equality is identity: two picks of the same path are different uploads.
    """

    path: str
    content_type: Optional[str] = None

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def mime_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.path)
        return guessed or "application/octet-stream"

    def open(self):
        return open(self.path, "rb")

    def __deepcopy__(self, memo):
        return self


# A bound image is either a local upload or an absolute URL of a stored asset.
ImageSource = Union[LocalFile, str, None]


@dataclass
class Position:
    x: float = 0
    y: float = 0

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class TextElement:
    kind: ClassVar[str] = "text"

    content: str = ""
    font_size: int = 16
    font_color: str = "#000"
    font_weight_bold: bool = False
    text_center: bool = False
    enable: bool = True
    position: Position = field(default_factory=Position)
    draggable: bool = True
    styles: Optional[str] = None
    display_date: Optional[str] = None


@dataclass
class ImageElement:
    kind: ClassVar[str] = "image"

    content: str = ""
    image: ImageSource = None
    image_size: int = 120
    enable: bool = True
    position: Position = field(default_factory=Position)
    draggable: bool = True


Element = Union[TextElement, ImageElement]


@dataclass
class TemplateInfo:
    locale: str = "EN"
    title: str = "Course Completion Certificate"
    type: TemplateType = TemplateType.COURSE
    status: TemplateStatus = TemplateStatus.PUBLISH
    background_image: ImageSource = None


def field_names(element: Element) -> Tuple[str, ...]:
    return tuple(f.name for f in fields(element))


ElementMap = Dict[ElementKey, Element]
