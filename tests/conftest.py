import re

import pytest

from certificate.core.drag_controller import PointerHost
from certificate.core.state import TemplateState

FIELD_RE = re.compile(r"^elements\[(\w+)\]\[(\w+)\]$")


class RecordingHost(PointerHost):
    """Pointer host that records listener installs and removals."""

    def __init__(self):
        self.installed = []
        self.removed = []

    @property
    def active(self):
        return [l for l in self.installed if l not in self.removed]

    def install(self, listener):
        self.installed.append(listener)

    def remove(self, listener):
        self.removed.append(listener)


def record_from_fields(fields):
    """Rebuild the stored record a backend would return for submitted text fields."""
    record = {"elements": {}}
    for name, value in fields:
        match = FIELD_RE.match(name)
        if match:
            key, field = match.groups()
            record["elements"].setdefault(key, {})[field] = value
        elif name != "template_contents":
            record[name] = value
    return record


@pytest.fixture
def state():
    return TemplateState()


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture(name="record_from_fields")
def record_from_fields_fixture():
    return record_from_fields
