from PySide6.QtWidgets import (
    QComboBox, QFileDialog, QFormLayout, QHBoxLayout, QLineEdit, QPushButton, QWidget
)

from certificate.core.models import (
    TEMPLATE_LOCALES, LocalFile, TemplateStatus, TemplateType, locale_options, normalize_locale
)
from certificate.core.preview import source_ref
from certificate.widgets.element_panel import IMAGE_FILTER


class TemplateInfoPanel(QWidget):
    """Template-level fields: locale, title, type, status and background."""

    def __init__(self, state, parent=None):
        super().__init__(parent)
        self.state = state
        self.strings: dict = {}
        self._loading = False

        layout = QFormLayout(self)

        self.cmb_locale = QComboBox()
        self.cmb_locale.addItems(list(TEMPLATE_LOCALES))
        self.cmb_locale.currentTextChanged.connect(lambda v: self._write("locale", v))

        self.edit_title = QLineEdit()
        self.edit_title.textEdited.connect(lambda v: self._write("title", v))

        self.cmb_type = QComboBox()
        for t in TemplateType:
            self.cmb_type.addItem(t.value, t.value)
        self.cmb_type.currentIndexChanged.connect(
            lambda _: self._write("type", TemplateType(self.cmb_type.currentData()))
        )

        self.cmb_status = QComboBox()
        for s in TemplateStatus:
            self.cmb_status.addItem(s.value, s.value)
        self.cmb_status.currentIndexChanged.connect(
            lambda _: self._write("status", TemplateStatus(self.cmb_status.currentData()))
        )

        self.edit_background = QLineEdit()
        self.edit_background.setReadOnly(True)
        self.btn_background = QPushButton()
        self.btn_background.clicked.connect(self.pick_background)
        background_row = QWidget()
        h = QHBoxLayout(background_row)
        h.setContentsMargins(0, 0, 0, 0)
        h.addWidget(self.edit_background)
        h.addWidget(self.btn_background)

        self.rows = {
            "locale": self.cmb_locale,
            "title": self.edit_title,
            "type": self.cmb_type,
            "status": self.cmb_status,
            "background_image": background_row,
        }
        for name, widget in self.rows.items():
            layout.addRow(name, widget)

        self._unsubscribe = state.subscribe(self._on_state_changed)
        self.refresh()

    # ───────────────────────────────────────────────
    def refresh(self):
        info = self.state.info
        self._loading = True
        try:
            self._sync_locales(info.locale)
            if self.edit_title.text() != info.title:
                self.edit_title.setText(info.title)
            self.cmb_type.setCurrentIndex(max(self.cmb_type.findData(TemplateType(info.type).value), 0))
            self.cmb_status.setCurrentIndex(max(self.cmb_status.findData(TemplateStatus(info.status).value), 0))
            self.edit_background.setText(source_ref(info.background_image) or "")
        finally:
            self._loading = False

    def _sync_locales(self, locale):
        locale = normalize_locale(locale) or TEMPLATE_LOCALES[0]
        for option in locale_options(locale):
            if self.cmb_locale.findText(option) < 0:
                self.cmb_locale.addItem(option)
        self.cmb_locale.setCurrentText(locale)

    def _on_state_changed(self, key, field):
        if key is None and not self._loading:
            self.refresh()

    def _write(self, field, value):
        if self._loading:
            return
        self._loading = True
        try:
            self.state.set_info(field, value)
        finally:
            self._loading = False

    def pick_background(self):
        path, _ = QFileDialog.getOpenFileName(
            self, self.strings.get("choose_background", ""), "", IMAGE_FILTER
        )
        if path:
            self.edit_background.setText(path)
            self._write("background_image", LocalFile(path))

    # ───────────────────────────────────────────────
    def set_strings(self, strings: dict):
        self.strings = strings
        layout = self.layout()
        for name, widget in self.rows.items():
            label = layout.labelForField(widget)
            if label is not None:
                label.setText(strings.get(name, name))
        self.btn_background.setText(strings.get("browse", ""))

    def shutdown(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
