import logging
from datetime import datetime

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QGuiApplication
from PySide6.QtWidgets import (
    QHBoxLayout,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ui.locales import ensure_language, get_section

LEVEL_COLORS = {
    "error": "#fee2e2",
    "warning": "#fef3c7",
    "info": "#e0f2fe",
}
COLUMNS = ("timestamp", "level", "title", "details")


class NotifierLogHandler(logging.Handler):
    """Forwards WARNING and above from the ``certificate`` loggers to the log tab."""

    def __init__(self, notifier, logger_name: str = "certificate", level=logging.WARNING):
        super().__init__(level)
        self.notifier = notifier
        self.logger_name = logger_name

    def attach(self):
        logging.getLogger(self.logger_name).addHandler(self)

    def detach(self):
        logging.getLogger(self.logger_name).removeHandler(self)

    def emit(self, record):
        try:
            level = "error" if record.levelno >= logging.ERROR else "warning"
            self.notifier.emit_error(record.name, record.getMessage(), level)
        except Exception:
            self.handleError(record)


class ErrorLogWidget(QWidget):
    def __init__(self, parent=None, max_rows: int = 500):
        super().__init__(parent)
        self.language = ensure_language("en")
        self.strings: dict = {}
        self.max_rows = max_rows

        layout = QVBoxLayout()

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.itemSelectionChanged.connect(self.update_copy_button_state)
        layout.addWidget(self.table)

        controls = QHBoxLayout()
        self.copy_button = QPushButton()
        self.copy_button.clicked.connect(self.copy_selected)
        controls.addWidget(self.copy_button)
        self.clear_button = QPushButton()
        self.clear_button.clicked.connect(self.clear_entries)
        controls.addWidget(self.clear_button)
        controls.addStretch(1)
        layout.addLayout(controls)

        self.setLayout(layout)
        self.set_language(self.language)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        self.strings = get_section(language, "error_log")

        self.table.setHorizontalHeaderLabels([self.strings.get(c, c) for c in COLUMNS])
        self.copy_button.setText(self.strings.get("copy", ""))
        self.clear_button.setText(self.strings.get("clear", ""))
        self.update_copy_button_state()

    def add_entry(self, title: str, message: str, level: str = "error"):
        if self.table.rowCount() >= self.max_rows:
            self.table.removeRow(0)
        row = self.table.rowCount()
        self.table.insertRow(row)

        values = (datetime.now().strftime("%Y-%m-%d %H:%M:%S"), level, title, message)
        background = QColor(LEVEL_COLORS.get(level, "#ffffff"))
        for column, value in enumerate(values):
            item = QTableWidgetItem(value)
            item.setFlags(item.flags() & ~Qt.ItemIsEditable)
            item.setBackground(background)
            self.table.setItem(row, column, item)

        self.table.resizeColumnsToContents()
        self.table.scrollToBottom()

    def clear_entries(self):
        self.table.setRowCount(0)
        self.update_copy_button_state()

    def row_text(self, row: int) -> str:
        cells = (self.table.item(row, c) for c in range(len(COLUMNS)))
        return " | ".join(cell.text() for cell in cells if cell and cell.text())

    def copy_selected(self):
        rows = sorted({index.row() for index in self.table.selectedIndexes()})
        if rows:
            QGuiApplication.clipboard().setText("\n".join(self.row_text(r) for r in rows))

    def update_copy_button_state(self):
        self.copy_button.setEnabled(bool(self.table.selectedIndexes()))
