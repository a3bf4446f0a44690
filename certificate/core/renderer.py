import logging
from functools import lru_cache

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .image_loader import ImageLoader
from .preview import ImageItem, PreviewScene, TextItem, wrap_lines

logger = logging.getLogger(__name__)

PLACEHOLDER_FILL = "#f0f0f0"
PLACEHOLDER_OUTLINE = "#cccccc"
PLACEHOLDER_TEXT = "#666666"
HINT_TEXT = "#9ca3af"


@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False):
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def _color(value: str, fallback: str = "#000000"):
    try:
        return ImageColor.getrgb(value)
    except ValueError:
        logger.debug("Unknown colour %r, using %s", value, fallback)
        return ImageColor.getrgb(fallback)


class CertificateRenderer:
    """
    Rasterises a PreviewScene into a PIL image the size of the canvas.
    Draws, in order:
    - background (or a hint when none is bound)
    - text items, centred on x when flagged
    - image items and dynamic placeholders
    """

    def __init__(self, image_loader: ImageLoader = None, background_color: str = "#ffffff", fetch_remote: bool = True):
        self.image_loader = image_loader or ImageLoader()
        self.background_color = background_color
        self.fetch_remote = fetch_remote

    def render(self, scene: PreviewScene) -> Image.Image:
        W, H = scene.size
        card = Image.new("RGBA", (W, H), _color(self.background_color, "#ffffff"))
        draw = ImageDraw.Draw(card)

        # -------------------------------------------------
        # 1. BACKGROUND
        # -------------------------------------------------
        background = self.image_loader.load_scaled(scene.background, W, H, fetch=self.fetch_remote) if scene.background else None
        if background is not None:
            card.alpha_composite(background, (0, 0))
        else:
            hint = "Upload Background Image"
            font = load_font(18)
            width = self._text_width(draw, hint, font)
            draw.text(((W - width) / 2, H / 2 - 9), hint, font=font, fill=_color(HINT_TEXT))

        # -------------------------------------------------
        # 2. ELEMENTS
        # -------------------------------------------------
        for item in scene.items:
            if isinstance(item, TextItem):
                self._draw_text(draw, item)
            elif isinstance(item, ImageItem):
                self._draw_image(card, draw, item)

        return card

    def save(self, scene: PreviewScene, path: str) -> str:
        self.render(scene).save(path, "PNG")
        return path

    # -------------------------------------------------
    def _draw_text(self, draw, item: TextItem):
        font = load_font(max(1, item.font_size), item.bold)
        lines = wrap_lines(item.text, lambda s: draw.textlength(s, font=font), item.max_width)
        text = "\n".join(lines)
        width = self._text_width(draw, text, font)
        left = item.left_for(width)
        draw.multiline_text(
            (left, item.y),
            text,
            font=font,
            fill=_color(item.color),
            align="center" if item.centered else "left",
        )

    def _draw_image(self, card, draw, item: ImageItem):
        x, y, size = int(item.x), int(item.y), max(1, item.size)
        if item.placeholder:
            draw.rectangle(
                [x, y, x + size, y + size],
                fill=_color(PLACEHOLDER_FILL),
                outline=_color(PLACEHOLDER_OUTLINE),
            )
            font = load_font(12)
            width = self._text_width(draw, item.label, font)
            draw.text((x + (size - width) / 2, y + size / 2 - 6), item.label, font=font, fill=_color(PLACEHOLDER_TEXT))
            return

        img = self.image_loader.load(item.source, fetch=self.fetch_remote)
        if img is None:
            return
        # contain-fit inside the size × size box
        ratio = min(size / img.width, size / img.height)
        img = img.resize((max(1, round(img.width * ratio)), max(1, round(img.height * ratio))), Image.LANCZOS)
        offset = (x + (size - img.width) // 2, y + (size - img.height) // 2)
        card.paste(img, offset, img)

    @staticmethod
    def _text_width(draw, text: str, font) -> float:
        lines = text.split("\n") or [""]
        return max(draw.textlength(line, font=font) for line in lines)
