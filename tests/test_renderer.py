from datetime import date

from PIL import Image

from certificate.core.image_loader import ImageLoader
from certificate.core.models import LocalFile
from certificate.core.preview import PreviewContext, render_preview
from certificate.core.renderer import CertificateRenderer


def make_png(path, size, color):
    Image.new("RGB", size, color).save(path)
    return str(path)


def test_background_fills_canvas(state, tmp_path):
    background = make_png(tmp_path / "bg.png", (40, 30), (0, 0, 255))
    state.set_info("background_image", LocalFile(background))
    for key in list(state.elements()):
        state.set(key, "enable", False)

    img = CertificateRenderer(ImageLoader()).render(render_preview(state))

    assert img.size == (800, 600)
    assert img.getpixel((10, 10))[:3] == (0, 0, 255)
    assert img.getpixel((790, 590))[:3] == (0, 0, 255)


def test_bound_image_is_drawn_inside_its_box(state, tmp_path):
    stamp = make_png(tmp_path / "stamp.png", (10, 10), (255, 0, 0))
    for key in list(state.elements()):
        state.set(key, "enable", False)
    state.set("stamp", "enable", True)
    state.set("stamp", "image", LocalFile(stamp))

    img = CertificateRenderer(ImageLoader()).render(render_preview(state))

    # stamp sits at (500, 450) scaled up to 120×120
    assert img.getpixel((560, 510))[:3] == (255, 0, 0)
    assert img.getpixel((499, 449))[:3] == (255, 255, 255)


def test_placeholder_box(state):
    for key in list(state.elements()):
        state.set(key, "enable", False)
    state.set("user_certificate_additional", "enable", True)

    img = CertificateRenderer(ImageLoader()).render(render_preview(state))

    assert img.getpixel((401, 401))[:3] == (0xF0, 0xF0, 0xF0)


def test_missing_image_is_skipped(state):
    state.set("stamp", "image", LocalFile("/nowhere/stamp.png"))
    scene = render_preview(state, PreviewContext(today=date(2026, 1, 1)))
    img = CertificateRenderer(ImageLoader()).render(scene)
    assert img.getpixel((560, 510))[:3] == (255, 255, 255)


def test_long_text_wraps_inside_its_max_width(state):
    for key in list(state.elements()):
        state.set(key, "enable", False)
    state.set("body", "enable", True)
    state.set("body", "text_center", False)
    state.set("body", "font_size", 20)
    state.set("body", "content", "certificate " * 40)
    state.move("body", 0, 100)

    img = CertificateRenderer(ImageLoader()).render(render_preview(state)).convert("L")

    # left-aligned text wraps at 400 px
    assert img.crop((0, 100, 400, 280)).getextrema()[0] < 128
    assert img.crop((405, 100, 800, 280)).getextrema() == (255, 255)
