from unittest.mock import MagicMock

import pytest
from PIL import Image

from certificate.core.editor import TemplateEditor
from certificate.core.errors import EditorError, LoadFailure, SaveFailure
from certificate.core.image_loader import ImageLoader
from certificate.core.models import ElementKey, Position
from certificate.core.settings import EditorSettings


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def editor(client):
    settings = EditorSettings(asset_base_url="https://cdn.example.com")
    return TemplateEditor(settings, client=client, image_loader=MagicMock())


class TestLoad:
    def test_load_replaces_state(self, editor, client):
        client.fetch_template.return_value = {
            "title": "Quiz certificate",
            "image": "uploads/bg.png",
            "elements": {"date": {"position_x": "10", "position_y": "20"}},
        }

        editor.load(42)

        assert editor.template_id == 42
        assert editor.state.info.title == "Quiz certificate"
        assert editor.state.get("date", "position") == Position(10, 20)
        editor.image_loader.prefetch.assert_called_once()
        prefetched = list(editor.image_loader.prefetch.call_args.args[0])
        assert prefetched == ["https://cdn.example.com/uploads/bg.png"]

    def test_load_failure_leaves_defaults(self, editor, client):
        client.fetch_template.side_effect = LoadFailure("offline")

        with pytest.raises(LoadFailure):
            editor.load(42)

        assert editor.template_id is None
        assert editor.state.get("date", "position") == Position(400, 400)
        assert editor.state.info.title == "Course Completion Certificate"


class TestSave:
    def test_create_resets_to_defaults(self, editor, client):
        client.create_template.return_value = {"id": 9}
        editor.state.set("body", "content", "Edited")

        assert editor.save() == {"id": 9}

        submission = client.create_template.call_args.args[0]
        assert ("elements[body][content]", "Edited") in submission.fields
        assert editor.state.get("body", "content") == "This certificate is awarded to"

    def test_update_keeps_edits(self, editor, client):
        client.fetch_template.return_value = {"elements": {}}
        editor.load(5)
        editor.state.set("body", "content", "Edited")

        editor.save()

        client.update_template.assert_called_once()
        assert client.update_template.call_args.args[0] == 5
        client.create_template.assert_not_called()
        assert editor.state.get("body", "content") == "Edited"

    def test_save_failure_keeps_edits(self, editor, client):
        client.create_template.side_effect = SaveFailure("500")
        editor.state.set("hint", "content", "Keep me")
        editor.state.move("hint", 12, 34)

        with pytest.raises(SaveFailure):
            editor.save()

        assert editor.state.get("hint", "content") == "Keep me"
        assert editor.state.get("hint", "position") == Position(12, 34)

    def test_delete_requires_loaded_template(self, editor, client):
        with pytest.raises(SaveFailure):
            editor.delete()
        client.delete_template.assert_not_called()

    def test_delete_resets(self, editor, client):
        client.fetch_template.return_value = {"title": "Old"}
        editor.load(3)
        editor.delete()
        client.delete_template.assert_called_once_with(3)
        assert editor.template_id is None
        assert editor.state.info.title == "Course Completion Certificate"


class TestPreview:
    def test_preview_omits_disabled(self, editor):
        editor.state.set("subtitle", "enable", False)
        assert ElementKey.SUBTITLE not in editor.preview().keys()

    def test_export_preview_png(self, tmp_path):
        editor = TemplateEditor(EditorSettings(), client=MagicMock(), image_loader=ImageLoader())
        path = editor.export_preview(str(tmp_path / "preview.png"))

        with Image.open(path) as img:
            assert img.size == (800, 600)

    def test_export_preview_does_not_download(self, tmp_path):
        session = MagicMock()
        editor = TemplateEditor(EditorSettings(), client=MagicMock(), image_loader=ImageLoader(session=session))
        editor.state.set_info("background_image", "https://cdn.example.com/bg.png")
        editor.state.set("stamp", "image", "https://cdn.example.com/stamp.png")

        editor.export_preview(str(tmp_path / "preview.png"))

        session.get.assert_not_called()

    def test_export_preview_bad_path(self, tmp_path):
        editor = TemplateEditor(EditorSettings(), client=MagicMock(), image_loader=ImageLoader())
        with pytest.raises(EditorError):
            editor.export_preview(str(tmp_path / "missing" / "preview.png"))
