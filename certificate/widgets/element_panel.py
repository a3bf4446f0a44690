from PySide6.QtCore import Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QCheckBox, QColorDialog, QComboBox, QFileDialog, QHBoxLayout, QLabel,
    QLineEdit, QPlainTextEdit, QPushButton, QSpinBox, QVBoxLayout, QWidget
)

from certificate.core.models import FONT_SIZE_RANGE, IMAGE_SIZE_RANGE, ElementKey, LocalFile, TextElement
from certificate.core.preview import source_ref

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp)"


class ElementPanel(QWidget):
    """Property editor for one element; every change is written to the state."""

    elementChanged = Signal(str)

    def __init__(self, state, parent=None):
        super().__init__(parent)
        self.state = state
        self.key = ElementKey.TITLE
        self.strings: dict = {}
        self._loading = False

        self.build_ui()
        self._unsubscribe = state.subscribe(self._on_state_changed)
        self.set_element(self.key.value)

    # ───────────────────────────────────────────────
    def build_ui(self):
        layout = QVBoxLayout(self)

        self.cmb_element = QComboBox()
        for key in ElementKey:
            self.cmb_element.addItem(key.value, key.value)
        self.cmb_element.currentIndexChanged.connect(self._on_element_picked)
        self.lbl_element = QLabel()
        layout.addWidget(self._row(self.lbl_element, self.cmb_element))

        self.chk_enable = QCheckBox()
        self.chk_enable.toggled.connect(lambda v: self._write("enable", v))
        layout.addWidget(self.chk_enable)

        self.edit_content = QPlainTextEdit()
        self.edit_content.setFixedHeight(80)
        self.edit_content.textChanged.connect(
            lambda: self._write("content", self.edit_content.toPlainText())
        )
        self.lbl_content = QLabel()
        layout.addWidget(self.lbl_content)
        layout.addWidget(self.edit_content)

        # ───── text ─────
        self.text_box = QWidget()
        text_layout = QVBoxLayout(self.text_box)
        text_layout.setContentsMargins(0, 0, 0, 0)

        self.spin_font_size = QSpinBox()
        self.spin_font_size.setRange(*FONT_SIZE_RANGE)
        self.spin_font_size.valueChanged.connect(lambda v: self._write("font_size", v))
        self.lbl_font_size = QLabel()
        text_layout.addWidget(self._row(self.lbl_font_size, self.spin_font_size))

        self.btn_color = QPushButton()
        self.btn_color.clicked.connect(self.pick_color)
        text_layout.addWidget(self.btn_color)

        self.chk_bold = QCheckBox()
        self.chk_bold.toggled.connect(lambda v: self._write("font_weight_bold", v))
        text_layout.addWidget(self.chk_bold)

        self.chk_center = QCheckBox()
        self.chk_center.toggled.connect(lambda v: self._write("text_center", v))
        text_layout.addWidget(self.chk_center)

        self.cmb_date = QComboBox()
        self.cmb_date.addItem("-", "")
        self.cmb_date.addItem("numeric", "numeric")
        self.cmb_date.addItem("textual", "textual")
        self.cmb_date.currentIndexChanged.connect(
            lambda _: self._write("display_date", self.cmb_date.currentData() or None)
        )
        self.lbl_date = QLabel()
        self.date_row = self._row(self.lbl_date, self.cmb_date)
        text_layout.addWidget(self.date_row)

        layout.addWidget(self.text_box)

        # ───── image ─────
        self.image_box = QWidget()
        image_layout = QVBoxLayout(self.image_box)
        image_layout.setContentsMargins(0, 0, 0, 0)

        self.edit_image = QLineEdit()
        self.edit_image.setReadOnly(True)
        self.btn_browse = QPushButton()
        self.btn_browse.clicked.connect(self.pick_image)
        image_layout.addWidget(self._row(self.edit_image, self.btn_browse))

        self.spin_image_size = QSpinBox()
        self.spin_image_size.setRange(*IMAGE_SIZE_RANGE)
        self.spin_image_size.valueChanged.connect(lambda v: self._write("image_size", v))
        self.lbl_image_size = QLabel()
        image_layout.addWidget(self._row(self.lbl_image_size, self.spin_image_size))

        layout.addWidget(self.image_box)

        self.lbl_position = QLabel()
        layout.addWidget(self.lbl_position)

        layout.addStretch()

    def _on_element_picked(self, _index):
        if not self._loading:
            self.set_element(self.cmb_element.currentData())

    def _row(self, label, widget):
        row = QWidget()
        h = QHBoxLayout(row)
        h.setContentsMargins(0, 0, 0, 0)
        h.addWidget(label)
        h.addWidget(widget)
        return row

    # ───────────────────────────────────────────────
    # Loading the selected element
    # ───────────────────────────────────────────────
    def set_element(self, key):
        if key is None:
            return
        self.key = ElementKey(key)
        self._loading = True
        try:
            index = self.cmb_element.findData(self.key.value)
            if index != self.cmb_element.currentIndex():
                self.cmb_element.setCurrentIndex(index)
            self._load_fields()
        finally:
            self._loading = False

    def _load_fields(self):
        element = self.state.element(self.key)
        is_text = isinstance(element, TextElement)
        self.text_box.setVisible(is_text)
        self.image_box.setVisible(not is_text)

        self.chk_enable.setChecked(element.enable)
        if self.edit_content.toPlainText() != element.content:
            self.edit_content.setPlainText(element.content)

        if is_text:
            self.spin_font_size.setValue(element.font_size)
            self.chk_bold.setChecked(element.font_weight_bold)
            self.chk_center.setChecked(element.text_center)
            self.btn_color.setStyleSheet(f"background-color: {element.font_color};")
            self.date_row.setVisible(self.key is ElementKey.DATE)
            index = self.cmb_date.findData(element.display_date or "")
            self.cmb_date.setCurrentIndex(max(index, 0))
        else:
            self.edit_image.setText(source_ref(element.image) or "")
            self.spin_image_size.setValue(element.image_size)

        self._show_position(element)

    def _show_position(self, element):
        x, y = element.position.as_tuple()
        template = self.strings.get("position", "Position: {x}, {y}")
        self.lbl_position.setText(template.format(x=round(x), y=round(y)))

    def _on_state_changed(self, key, field):
        if self._loading:
            return
        if key is None and field == "*":
            self.set_element(self.key.value)
        elif key is self.key and field == "position":
            self._show_position(self.state.element(key))

    # ───────────────────────────────────────────────
    def _write(self, field, value):
        if self._loading:
            return
        self._loading = True
        try:
            self.state.set(self.key, field, value)
        finally:
            self._loading = False
        self.elementChanged.emit(self.key.value)

    def pick_color(self):
        current = QColor(self.state.get(self.key, "font_color"))
        col = QColorDialog.getColor(current, self)
        if not col.isValid():
            return
        self.btn_color.setStyleSheet(f"background-color: {col.name()};")
        self._write("font_color", col.name())

    def pick_image(self):
        path, _ = QFileDialog.getOpenFileName(
            self, self.strings.get("choose_image", ""), "", IMAGE_FILTER
        )
        if path:
            self.edit_image.setText(path)
            self._write("image", LocalFile(path))

    # ───────────────────────────────────────────────
    def set_strings(self, strings: dict):
        self.strings = strings
        self.lbl_element.setText(strings.get("element", ""))
        self.chk_enable.setText(strings.get("enable", ""))
        self.lbl_content.setText(strings.get("content", ""))
        self.lbl_font_size.setText(strings.get("font_size", ""))
        self.btn_color.setText(strings.get("font_color", ""))
        self.chk_bold.setText(strings.get("bold", ""))
        self.chk_center.setText(strings.get("center", ""))
        self.lbl_date.setText(strings.get("display_date", ""))
        self.btn_browse.setText(strings.get("browse", ""))
        self.lbl_image_size.setText(strings.get("image_size", ""))
        labels = strings.get("elements", {})
        for i in range(self.cmb_element.count()):
            key = self.cmb_element.itemData(i)
            self.cmb_element.setItemText(i, labels.get(key, key))
        self._show_position(self.state.element(self.key))

    def shutdown(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
