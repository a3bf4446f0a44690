"""Mapping between the element map and the flat multipart submission schema.

Save path: :func:`serialize` flattens template info and every element into
``elements[<key>][<subfield>]`` form fields, with local uploads kept aside as
binary parts.

Load path: :func:`deserialize` parses a fetched record through one lenient
pydantic schema and merges it over the default registry in
:func:`merge_element`, the only place defaults are applied. Missing or
unparsable values never raise; they fall back to the default.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .defaults import TEMPLATE_CONTENTS, default_element, default_info
from .errors import LoadFailure
from .models import (
    FONT_SIZE_RANGE,
    IMAGE_SIZE_RANGE,
    ElementKey,
    ElementMap,
    LocalFile,
    Position,
    TemplateInfo,
    TemplateStatus,
    TemplateType,
    clamp_size,
    normalize_locale,
)
from .paths import resolve_asset_url

logger = logging.getLogger(__name__)

ELEMENT_FIELD = "elements[{key}][{field}]"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


# ─────────────────────────────────────────────
# Fetched record schema
# ─────────────────────────────────────────────

def _lenient_float(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _lenient_int(value):
    number = _lenient_float(value)
    return None if number is None else int(number)


def _lenient_bool(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    return None


def _lenient_str(value):
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


class FetchedElement(BaseModel):
    """One element as the backend stores it; every field is optional."""

    model_config = ConfigDict(extra="ignore")

    content: Optional[str] = None
    font_size: Optional[int] = None
    font_color: Optional[str] = None
    font_weight_bold: Optional[bool] = None
    text_center: Optional[bool] = None
    enable: Optional[bool] = None
    draggable: Optional[bool] = None
    styles: Optional[str] = None
    display_date: Optional[str] = None
    image: Optional[str] = None
    image_size: Optional[int] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None

    @field_validator("font_size", "image_size", mode="before")
    @classmethod
    def _ints(cls, value):
        return _lenient_int(value)

    @field_validator("position_x", "position_y", mode="before")
    @classmethod
    def _floats(cls, value):
        return _lenient_float(value)

    @field_validator("font_weight_bold", "text_center", "enable", "draggable", mode="before")
    @classmethod
    def _bools(cls, value):
        return _lenient_bool(value)

    @field_validator("content", "font_color", "styles", "display_date", "image", mode="before")
    @classmethod
    def _strings(cls, value):
        return _lenient_str(value)


class FetchedTemplate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    locale: Optional[str] = None
    title: Optional[str] = None
    type: Optional[TemplateType] = None
    status: Optional[TemplateStatus] = None
    image: Optional[str] = None
    elements: Dict[str, Any] = {}

    @field_validator("type", mode="before")
    @classmethod
    def _template_type(cls, value):
        values = {t.value for t in TemplateType}
        return value if isinstance(value, str) and value in values else None

    @field_validator("status", mode="before")
    @classmethod
    def _template_status(cls, value):
        values = {s.value for s in TemplateStatus}
        return value if isinstance(value, str) and value in values else None

    @field_validator("locale", "title", "image", mode="before")
    @classmethod
    def _strings(cls, value):
        return _lenient_str(value)

    @field_validator("elements", mode="before")
    @classmethod
    def _elements(cls, value):
        return value if isinstance(value, dict) else {}


# ─────────────────────────────────────────────
# Load path
# ─────────────────────────────────────────────

SIZE_BOUNDS = {"font_size": FONT_SIZE_RANGE, "image_size": IMAGE_SIZE_RANGE}


def merge_element(key, fetched: Any, asset_base: str = ""):
    """Overlay fetched sub-fields on the default config of ``key``."""
    key = ElementKey(key)
    element = default_element(key)
    if not isinstance(fetched, dict):
        logger.debug("No stored config for %s, using defaults", key.value)
        return element

    parsed = FetchedElement.model_validate(fetched)
    for f in fields(element):
        if f.name == "position":
            continue
        value = getattr(parsed, f.name, None)
        if f.name == "image":
            value = resolve_asset_url(asset_base, value)
        if value is None:
            logger.debug("%s.%s missing, keeping default", key.value, f.name)
            continue
        if key is ElementKey.TITLE and f.name == "draggable":
            continue
        if f.name in SIZE_BOUNDS:
            value = clamp_size(value, SIZE_BOUNDS[f.name])
        setattr(element, f.name, value)

    element.position = Position(
        parsed.position_x if parsed.position_x is not None else 0,
        parsed.position_y if parsed.position_y is not None else 0,
    )
    return element


def unwrap_record(payload: Any) -> Dict[str, Any]:
    """Accept either the bare record or the ``{"data": record}`` envelope."""
    if isinstance(payload, dict) and "elements" not in payload and isinstance(payload.get("data"), dict):
        payload = payload["data"]
    if not isinstance(payload, dict):
        raise LoadFailure(f"Unexpected template payload: {type(payload).__name__}")
    return payload


def deserialize(record: Any, asset_base: str = "") -> Tuple[TemplateInfo, ElementMap]:
    record = unwrap_record(record)
    try:
        fetched = FetchedTemplate.model_validate(record)
    except ValidationError as exc:
        raise LoadFailure(f"Malformed template record: {exc}") from exc

    defaults = default_info()
    info = TemplateInfo(
        locale=normalize_locale(fetched.locale) or defaults.locale,
        title=fetched.title or defaults.title,
        type=fetched.type or defaults.type,
        status=fetched.status or defaults.status,
        background_image=resolve_asset_url(asset_base, fetched.image),
    )
    elements = {
        key: merge_element(key, fetched.elements.get(key.value), asset_base)
        for key in ElementKey
    }
    return info, elements


# ─────────────────────────────────────────────
# Save path
# ─────────────────────────────────────────────

@dataclass
class Submission:
    fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[Tuple[str, LocalFile]] = field(default_factory=list)

    def flattened(self) -> Dict[str, Union[str, LocalFile]]:
        flat: Dict[str, Union[str, LocalFile]] = dict(self.fields)
        flat.update(self.files)
        return flat


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def serialize(info: TemplateInfo, elements: ElementMap) -> Submission:
    submission = Submission()
    submission.fields.extend(
        [
            ("locale", to_text(info.locale)),
            ("title", to_text(info.title)),
            ("type", to_text(info.type)),
            ("status", to_text(info.status)),
            ("template_contents", TEMPLATE_CONTENTS),
        ]
    )
    if isinstance(info.background_image, LocalFile):
        submission.files.append(("image", info.background_image))

    for key, element in elements.items():
        key = ElementKey(key)
        for f in fields(element):
            value = getattr(element, f.name)
            if value is None:
                continue
            name = ELEMENT_FIELD.format(key=key.value, field=f.name)
            if isinstance(value, Position):
                submission.fields.append((ELEMENT_FIELD.format(key=key.value, field="position_x"), to_text(value.x)))
                submission.fields.append((ELEMENT_FIELD.format(key=key.value, field="position_y"), to_text(value.y)))
            elif isinstance(value, LocalFile):
                submission.files.append((name, value))
            else:
                submission.fields.append((name, to_text(value)))
    return submission


def serialize_state(state) -> Submission:
    return serialize(state.info, state.elements())
