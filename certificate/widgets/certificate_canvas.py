from PySide6.QtCore import QEvent, QObject, QPoint, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QApplication, QWidget

from certificate.core.drag_controller import DragController, PointerHost
from certificate.core.models import CANVAS_HEIGHT, CANVAS_WIDTH, ElementKey
from certificate.core.preview import (
    ImageItem,
    PreviewContext,
    TextItem,
    image_sources,
    render_preview,
    wrap_lines,
)


# ============================================================
# QtPointerHost: global move/release delivery for a drag
# ============================================================
class _PointerFilter(QObject):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.listener = None

    def eventFilter(self, obj, event):  # noqa: N802
        listener = self.listener
        if listener is None:
            return False
        if event.type() == QEvent.MouseMove:
            pos = event.globalPosition()
            listener.on_move(pos.x(), pos.y())
        elif event.type() == QEvent.MouseButtonRelease:
            listener.on_release()
        return False


class QtPointerHost(PointerHost):
    """Installs an application-wide event filter while a drag is active."""

    def __init__(self, parent=None):
        self._filter = _PointerFilter(parent)

    def install(self, listener):
        self._filter.listener = listener
        QApplication.instance().installEventFilter(self._filter)

    def remove(self, listener):
        if self._filter.listener is not listener:
            return
        self._filter.listener = None
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._filter)


# ============================================================
# CertificateCanvas: 800×600 WYSIWYG editor surface
# ============================================================
class CertificateCanvas(QWidget):
    elementSelected = Signal(str)

    def __init__(self, state, image_loader, context=None, parent=None):
        super().__init__(parent)
        self.setFixedSize(CANVAS_WIDTH, CANVAS_HEIGHT)

        self.state = state
        self.image_loader = image_loader
        self.context = context or PreviewContext()
        self.controller = DragController(state, QtPointerHost(self))

        self.placeholder_text = "Upload Background Image"
        self._pixmaps: dict[str, QPixmap] = {}
        self._hit_rects: dict[ElementKey, QRectF] = {}
        self._unsubscribe = state.subscribe(self._on_state_changed)

    # --------------------------------------------------------
    def _on_state_changed(self, key, field):
        if field in {"image", "background_image", "*"}:
            self._pixmaps.clear()
            self.image_loader.retain(image_sources(self.state))
        self.update()

    def _pixmap(self, source):
        if source in self._pixmaps:
            return self._pixmaps[source]
        pix = QPixmap()
        data = self.image_loader.read_bytes(source, fetch=False)
        if data:
            pix.loadFromData(data)
        self._pixmaps[source] = pix
        return pix

    # --------------------------------------------------------
    # PAINT
    # --------------------------------------------------------
    def paintEvent(self, event):  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)

        scene = render_preview(self.state, self.context)
        self._hit_rects = {}

        # 1) background
        background = self._pixmap(scene.background) if scene.background else None
        if background is not None and not background.isNull():
            painter.drawPixmap(self.rect(), background)
        else:
            painter.fillRect(self.rect(), QColor(248, 113, 113))
            painter.setPen(QColor("#ffffff"))
            painter.drawText(self.rect(), Qt.AlignCenter, self.placeholder_text)

        # 2) elements
        session = self.controller.session
        active = session.key if session else None
        for item in scene.items:
            if isinstance(item, TextItem):
                rect = self._paint_text(painter, item)
            else:
                rect = self._paint_image(painter, item)
            if rect is None:
                continue
            self._hit_rects[item.key] = rect
            if item.key is active:
                painter.setPen(QPen(QColor("#3b82f6"), 2, Qt.DashLine))
                painter.setBrush(QColor(59, 130, 246, 25))
                painter.drawRect(rect)
                painter.setBrush(Qt.NoBrush)
            elif item.key is ElementKey.TITLE:
                painter.setPen(QPen(QColor(254, 202, 202), 2))
                painter.drawRect(rect)

        painter.end()

    def _paint_text(self, painter, item: TextItem):
        font = QFont("Arial")
        font.setPixelSize(max(1, item.font_size))
        font.setBold(item.bold)
        metrics = QFontMetricsF(font)
        lines = wrap_lines(item.text, metrics.horizontalAdvance, item.max_width)
        width = max(metrics.horizontalAdvance(line) for line in lines)
        height = metrics.height() * len(lines)
        left = item.left_for(width)

        painter.setFont(font)
        painter.setPen(QColor(item.color))
        rect = QRectF(left, item.y, width, height)
        align = Qt.AlignHCenter if item.centered else Qt.AlignLeft
        painter.drawText(rect, align | Qt.AlignTop, "\n".join(lines))
        return rect

    def _paint_image(self, painter, item: ImageItem):
        rect = QRectF(item.x, item.y, item.size, item.size)
        if item.placeholder:
            painter.setPen(QPen(QColor("#cccccc"), 1))
            painter.setBrush(QColor("#f0f0f0"))
            painter.drawRect(rect)
            painter.setBrush(Qt.NoBrush)
            painter.setPen(QColor("#666666"))
            font = QFont("Arial")
            font.setPixelSize(12)
            painter.setFont(font)
            painter.drawText(rect, Qt.AlignCenter, item.label)
            return rect

        pix = self._pixmap(item.source)
        if pix.isNull():
            return None
        scaled = pix.scaled(item.size, item.size, Qt.KeepAspectRatio, Qt.SmoothTransformation)
        painter.drawPixmap(
            int(item.x + (item.size - scaled.width()) / 2),
            int(item.y + (item.size - scaled.height()) / 2),
            scaled,
        )
        return rect

    # --------------------------------------------------------
    # Mouse: press starts a drag, the controller's global
    # listeners take over until release
    # --------------------------------------------------------
    def mousePressEvent(self, event):  # noqa: N802
        if event.button() != Qt.LeftButton:
            return
        local = event.position()
        for key in reversed(list(self._hit_rects)):
            if self._hit_rects[key].contains(local):
                self.elementSelected.emit(key.value)
                origin = self.mapToGlobal(QPoint(0, 0))
                self.controller.canvas_origin = (origin.x(), origin.y())
                glob = event.globalPosition()
                if self.controller.press(key, (glob.x(), glob.y())):
                    self.update()
                event.accept()
                return
        super().mousePressEvent(event)

    def set_context(self, context: PreviewContext):
        self.context = context
        self.update()

    # --------------------------------------------------------
    def shutdown(self):
        """Release drag listeners and stop observing the state."""
        self.controller.close()
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def closeEvent(self, event):  # noqa: N802
        self.shutdown()
        super().closeEvent(event)

    def hideEvent(self, event):  # noqa: N802
        self.controller.close()
        super().hideEvent(event)
