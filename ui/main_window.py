from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QMainWindow, QTabWidget

from certificate.core.editor import TemplateEditor
from ui.editor_tab import EditorTab
from ui.error_window import ErrorLogWidget, NotifierLogHandler
from ui.locales import ensure_language, get_section


class ErrorNotifier(QObject):
    errorOccurred = Signal(str, str, str)

    def emit_error(self, title: str, message: str, level: str = "error"):
        self.errorOccurred.emit(title, message, level)


class MainWindow(QMainWindow):
    def __init__(self, editor: TemplateEditor):
        super().__init__()

        self.editor = editor
        self.language = ensure_language(editor.settings.language)

        self.error_notifier = ErrorNotifier()
        self.log_handler = NotifierLogHandler(self.error_notifier)
        self.log_handler.attach()

        self.setMinimumSize(1100, 700)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.editor_tab = EditorTab(editor, error_notifier=self.error_notifier)
        self.error_log_tab = ErrorLogWidget()
        self.error_notifier.errorOccurred.connect(self.error_log_tab.add_entry)

        self.tabs.addTab(self.editor_tab, "")
        self.tabs.addTab(self.error_log_tab, "")

        self.set_language(self.language)

    def open_template(self, template_id):
        self.editor_tab.load_template(template_id)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        app_strings = get_section(language, "app")
        tabs_strings = get_section(language, "tabs")
        error_strings = get_section(language, "error_log")

        title = app_strings.get("window_title")
        if not title:
            name = app_strings.get("name", "Certificate Designer")
            version = app_strings.get("version", "")
            title = f"{name} {version}".strip()

        self.setWindowTitle(title)
        self.tabs.setTabText(0, tabs_strings.get("editor", "Template Editor"))
        self.tabs.setTabText(1, error_strings.get("tab_title", "Errors"))
        self.editor_tab.set_language(language)
        self.error_log_tab.set_language(language)

    def closeEvent(self, event):  # noqa: N802
        self.editor_tab.shutdown()
        self.log_handler.detach()
        super().closeEvent(event)
