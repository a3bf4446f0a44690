import logging
import os

from PySide6.QtCore import QObject, QThread, Signal
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from certificate.core.editor import TemplateEditor
from certificate.core.errors import EditorError
from certificate.widgets.certificate_canvas import CertificateCanvas
from certificate.widgets.element_panel import ElementPanel
from certificate.widgets.template_info_panel import TemplateInfoPanel
from ui.locales import ensure_language, format_message, get_section

logger = logging.getLogger(__name__)


class TaskWorker(QObject):
    """Runs one blocking editor call off the UI thread."""

    finished = Signal(object)
    failed = Signal(str)

    def __init__(self, task, *args):
        super().__init__()
        self.task = task
        self.args = args

    def run(self):
        try:
            result = self.task(*self.args)
            self.finished.emit(result)
        except EditorError as e:
            self.failed.emit(str(e))
        except Exception as e:
            logger.exception("Unexpected failure in background task")
            self.failed.emit(str(e))


class EditorTab(QWidget):
    templateSaved = Signal(object)

    def __init__(self, editor: TemplateEditor, parent=None, error_notifier=None):
        super().__init__(parent)
        self.editor = editor
        self.error_notifier = error_notifier

        self.language = ensure_language(editor.settings.language)
        self.strings: dict = {}

        self.worker_thread: QThread | None = None
        self.worker: TaskWorker | None = None
        self._pending_id = None
        self._pending_created = False

        layout = QHBoxLayout()

        # Canvas
        self.canvas = CertificateCanvas(editor.state, editor.image_loader)
        layout.addWidget(self.canvas)

        # Control panel
        right = QVBoxLayout()

        id_row = QHBoxLayout()
        self.id_edit = QLineEdit()
        id_row.addWidget(self.id_edit)
        self.load_button = QPushButton()
        self.load_button.clicked.connect(self.load_template)
        id_row.addWidget(self.load_button)
        right.addLayout(id_row)

        self.status_label = QLabel()
        right.addWidget(self.status_label)

        self.info_panel = TemplateInfoPanel(editor.state)
        right.addWidget(self.info_panel)

        self.element_panel = ElementPanel(editor.state)
        self.canvas.elementSelected.connect(self.element_panel.set_element)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.element_panel)
        right.addWidget(scroll, 1)

        buttons = QHBoxLayout()
        self.save_button = QPushButton()
        self.save_button.clicked.connect(self.save_template)
        buttons.addWidget(self.save_button)
        self.new_button = QPushButton()
        self.new_button.clicked.connect(self.new_template)
        buttons.addWidget(self.new_button)
        self.delete_button = QPushButton()
        self.delete_button.clicked.connect(self.delete_template)
        buttons.addWidget(self.delete_button)
        right.addLayout(buttons)

        self.export_button = QPushButton()
        self.export_button.clicked.connect(self.export_preview)
        right.addWidget(self.export_button)

        layout.addLayout(right)
        self.setLayout(layout)

        self.set_language(self.language)

    # ------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------
    def _start(self, task, args, on_finished, on_failed):
        if self.worker_thread is not None:
            return False
        self._set_controls(enabled=False)

        self.worker_thread = QThread()
        self.worker = TaskWorker(task, *args)
        self.worker.moveToThread(self.worker_thread)
        self.worker_thread.started.connect(self.worker.run)
        self.worker.finished.connect(on_finished)
        self.worker.failed.connect(on_failed)
        self.worker.finished.connect(self.worker_thread.quit)
        self.worker.failed.connect(self.worker_thread.quit)
        self.worker_thread.finished.connect(self.worker.deleteLater)
        self.worker_thread.finished.connect(self.worker_thread.deleteLater)
        self.worker_thread.finished.connect(self._reset_worker_state)
        self.worker_thread.start()
        return True

    def _reset_worker_state(self):
        self.worker_thread = None
        self.worker = None
        self._set_controls(enabled=True)

    def _set_controls(self, enabled: bool):
        for button in (
            self.load_button,
            self.save_button,
            self.new_button,
            self.delete_button,
        ):
            button.setEnabled(enabled)
        self.delete_button.setEnabled(enabled and self.editor.template_id is not None)

    # ------------------------------------------------------------
    # Load
    # ------------------------------------------------------------
    def load_template(self, template_id=None):
        template_id = template_id or self.id_edit.text().strip()
        if not template_id:
            self._emit_error(
                self.strings.get("error_title", ""),
                self.strings.get("no_id", ""),
                level="warning",
            )
            return
        self.id_edit.setText(str(template_id))
        self.status_label.setText(format_message(self.strings, "loading", id=template_id))
        self._pending_id = template_id
        self._start(
            self.editor.fetch,
            (template_id,),
            self._load_finished,
            self._load_failed,
        )

    def _load_finished(self, result):
        info, elements = result
        self.editor.apply(self._pending_id, info, elements)
        self._update_status()

    def _load_failed(self, message: str):
        self._update_status()
        self._emit_error(self.strings.get("load_failed", ""), message)

    # ------------------------------------------------------------
    # Save / delete
    # ------------------------------------------------------------
    def save_template(self):
        self._pending_created = self.editor.template_id is None
        submission = self.editor.build_submission()
        self.status_label.setText(self.strings.get("saving", ""))
        self._start(
            self.editor.submit,
            (submission,),
            self._save_finished,
            self._save_failed,
        )

    def _save_finished(self, result):
        created = self._pending_created
        self.editor.finish_save(created)
        self._update_status()
        self._emit_error(
            self.strings.get("done_title", ""),
            self.strings.get("created" if created else "updated", ""),
            level="info",
        )
        self.templateSaved.emit(result)

    def _save_failed(self, message: str):
        self._update_status()
        self._emit_error(self.strings.get("save_failed", ""), message)

    def delete_template(self):
        template_id = self.editor.template_id
        if template_id is None:
            return
        self._start(
            self.editor.client.delete_template,
            (template_id,),
            self._delete_finished,
            self._save_failed,
        )

    def _delete_finished(self, _result=None):
        self.editor.new_template()
        self.id_edit.clear()
        self._update_status()

    def new_template(self):
        self.editor.new_template()
        self.id_edit.clear()
        self._update_status()

    # ------------------------------------------------------------
    # Preview export
    # ------------------------------------------------------------
    def export_preview(self):
        path, _ = QFileDialog.getSaveFileName(
            self,
            self.strings.get("export_preview", ""),
            os.path.join(os.getcwd(), "certificate_preview.png"),
            "PNG (*.png)",
        )
        if not path:
            return
        try:
            self.editor.export_preview(path, self.canvas.context)
        except EditorError as e:
            self._emit_error(self.strings.get("error_title", ""), str(e))
            return
        self._emit_error(
            self.strings.get("done_title", ""),
            format_message(self.strings, "exported", path=path),
            level="info",
        )

    # ------------------------------------------------------------
    def _update_status(self):
        if self.editor.template_id is None:
            self.status_label.setText(self.strings.get("new_template", ""))
        else:
            self.status_label.setText(
                format_message(self.strings, "editing", id=self.editor.template_id)
            )
        self._set_controls(enabled=self.worker_thread is None)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        strings = get_section(language, "editor_tab")
        self.strings = strings
        self.id_edit.setPlaceholderText(strings.get("template_id", ""))
        self.load_button.setText(strings.get("load", ""))
        self.save_button.setText(strings.get("save", ""))
        self.new_button.setText(strings.get("new", ""))
        self.delete_button.setText(strings.get("delete", ""))
        self.export_button.setText(strings.get("export_preview", ""))
        self.canvas.placeholder_text = strings.get("upload_background", "Upload Background Image")
        self.info_panel.set_strings(get_section(language, "template_info"))
        self.element_panel.set_strings(get_section(language, "element_panel"))
        self._update_status()
        self.canvas.update()

    def shutdown(self):
        self.canvas.shutdown()
        self.element_panel.shutdown()
        self.info_panel.shutdown()
        if self.worker_thread is not None:
            self.worker_thread.quit()
            self.worker_thread.wait()

    def _emit_error(self, title: str, message: str, level: str = "error"):
        if self.error_notifier:
            self.error_notifier.emit_error(title, message, level)
