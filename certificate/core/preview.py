"""Pure preview path: element configs in, positioned render items out."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from .defaults import DYNAMIC_MARKERS
from .models import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    ElementKey,
    ImageElement,
    ImageSource,
    LocalFile,
    TextElement,
)

TOKEN_RE = re.compile(r"\[([a-z_]+)\]")

# Wrap width of a text element, by alignment.
CENTERED_MAX_WIDTH = 500
LEFT_MAX_WIDTH = 400


@dataclass
class PreviewContext:
    """Demo values substituted into text tokens; never real learner data."""

    student_name: str = "John Doe"
    instructor_name: str = "Jane Smith"
    platform_name: str = "LMS Platform"
    today: date = field(default_factory=date.today)

    def format_date(self, display_date: Optional[str]) -> str:
        if display_date == "textual":
            return f"{self.today:%B} {self.today.day}, {self.today.year}"
        return f"{self.today.month}/{self.today.day}/{self.today.year}"

    def tokens(self, display_date: Optional[str] = None) -> Dict[str, str]:
        return {
            "student_name": self.student_name,
            "instructor_name": self.instructor_name,
            "platform_name": self.platform_name,
            "date": self.format_date(display_date),
        }


@dataclass(frozen=True)
class TextItem:
    key: ElementKey
    text: str
    x: float
    y: float
    font_size: int
    color: str
    bold: bool
    centered: bool
    draggable: bool
    max_width: int = LEFT_MAX_WIDTH

    def left_for(self, rendered_width: float) -> float:
        """Left edge once the item's real (wrapped) width is known."""
        rendered_width = min(rendered_width, self.max_width)
        if self.centered:
            return self.x - rendered_width / 2
        return self.x


@dataclass(frozen=True)
class ImageItem:
    key: ElementKey
    x: float
    y: float
    size: int
    source: Optional[str]
    placeholder: bool
    label: str
    draggable: bool


RenderItem = Union[TextItem, ImageItem]


@dataclass
class PreviewScene:
    background: Optional[str]
    items: List[RenderItem]
    size: Tuple[int, int] = (CANVAS_WIDTH, CANVAS_HEIGHT)

    def keys(self) -> List[ElementKey]:
        return [item.key for item in self.items]

    def item(self, key) -> Optional[RenderItem]:
        key = ElementKey(key)
        for candidate in self.items:
            if candidate.key is key:
                return candidate
        return None


def substitute_tokens(content: str, context: PreviewContext, display_date: Optional[str] = None) -> str:
    values = context.tokens(display_date)

    def replace(match):
        return values.get(match.group(1), match.group(0))

    return TOKEN_RE.sub(replace, content or "")


def wrap_lines(text: str, measure: Callable[[str], float], max_width: float) -> List[str]:
    """Greedy word wrap; a word wider than ``max_width`` is broken between characters."""
    lines: List[str] = []
    for paragraph in (text or "").split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            for ch in word:
                if current and measure(current + ch) > max_width:
                    lines.append(current)
                    current = ch
                else:
                    current += ch
        lines.append(current)
    return lines


def source_ref(source: ImageSource) -> Optional[str]:
    if isinstance(source, LocalFile):
        return source.path
    return source or None


def _to_int(value, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def render_text(key: ElementKey, element: TextElement, context: PreviewContext) -> Optional[TextItem]:
    if not element.enable:
        return None
    return TextItem(
        key=key,
        text=substitute_tokens(element.content, context, element.display_date),
        x=element.position.x,
        y=element.position.y,
        font_size=_to_int(element.font_size, 16),
        color=element.font_color or "#000",
        bold=bool(element.font_weight_bold),
        centered=bool(element.text_center),
        draggable=element.draggable,
        max_width=CENTERED_MAX_WIDTH if element.text_center else LEFT_MAX_WIDTH,
    )


def render_image(key: ElementKey, element: ImageElement) -> Optional[ImageItem]:
    if not element.enable:
        return None
    placeholder = element.content in DYNAMIC_MARKERS
    source = source_ref(element.image)
    if not placeholder and source is None:
        return None
    return ImageItem(
        key=key,
        x=element.position.x,
        y=element.position.y,
        size=_to_int(element.image_size, 120),
        source=None if placeholder else source,
        placeholder=placeholder,
        label=element.content.strip("[]").replace("_", " ").title(),
        draggable=element.draggable,
    )


def render_element(key, element, context: Optional[PreviewContext] = None) -> Optional[RenderItem]:
    key = ElementKey(key)
    if isinstance(element, ImageElement):
        return render_image(key, element)
    return render_text(key, element, context or PreviewContext())


def render_preview(state, context: Optional[PreviewContext] = None) -> PreviewScene:
    """Build the WYSIWYG scene; disabled elements are omitted.

    ``state`` is a ``TemplateState`` or a bare element mapping. A mapping
    carries no template info, so its scene has no background.
    """
    context = context or PreviewContext()
    items: List[RenderItem] = []
    for key, element in state.items():
        item = render_element(key, element, context)
        if item is not None:
            items.append(item)
    info = getattr(state, "info", None)
    background = source_ref(info.background_image) if info is not None else None
    return PreviewScene(background=background, items=items)


def image_sources(state) -> Iterator[str]:
    """Every image source a state currently references, background first."""
    info = getattr(state, "info", None)
    if info is not None and source_ref(info.background_image):
        yield source_ref(info.background_image)
    for _, element in state.items():
        if isinstance(element, ImageElement) and source_ref(element.image):
            yield source_ref(element.image)
