from __future__ import annotations

import io
from typing import List, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFont

from .config import (
    OG_BACKGROUND,
    OG_BRAND_COLOR,
    OG_BRAND_SIZE,
    OG_GRADIENT_END,
    OG_GRID_STEP,
    OG_SEPARATOR_COLOR,
    OG_SIZE,
    OG_TITLE_COLOR,
    OG_TITLE_SIZE,
    SiteProfile,
    og_font_path,
)

OUTER_PADDING = 88
INNER_PADDING = 48
BRAND_MARGIN = 40
SEPARATOR_GAP = 8
LINE_HEIGHT = 1.4


def _font(size: int) -> ImageFont.ImageFont:
    path = og_font_path()
    if path:
        return ImageFont.truetype(str(path), size)
    return ImageFont.load_default(size=size)


def _background(size: Tuple[int, int]) -> Image.Image:
    # top-left -> bottom-right gradient
    vertical = Image.linear_gradient("L").resize(size)
    horizontal = Image.linear_gradient("L").rotate(90).resize(size)
    mask = ImageChops.add(vertical, horizontal, scale=2.0)
    start = Image.new("RGB", size, OG_BACKGROUND)
    end = Image.new("RGB", size, OG_GRADIENT_END)
    return Image.composite(end, start, mask).convert("RGBA")


def _grid(size: Tuple[int, int]) -> Image.Image:
    overlay = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    line = (255, 255, 255, 13)
    width, height = size
    for x in range(0, width, OG_GRID_STEP):
        draw.line([(x, 0), (x, height)], fill=line, width=1)
    for y in range(0, height, OG_GRID_STEP):
        draw.line([(0, y), (width, y)], fill=line, width=1)
    return overlay


def _break_word(draw: ImageDraw.ImageDraw, word: str,
                font: ImageFont.ImageFont, max_width: int) -> List[str]:
    pieces: List[str] = []
    current = ""
    for ch in word:
        if current and draw.textlength(current + ch, font=font) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    if current:
        pieces.append(current)
    return pieces


def wrap_text(draw: ImageDraw.ImageDraw, text: str,
              font: ImageFont.ImageFont, max_width: int) -> List[str]:
    """Greedy word wrap; words wider than `max_width` are split by character."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        if draw.textlength(word, font=font) > max_width:
            if current:
                lines.append(current)
            *full, current = _break_word(draw, word, font, max_width)
            lines.extend(full)
            continue
        candidate = f"{current} {word}".strip()
        if current and draw.textlength(candidate, font=font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _draw_title(draw: ImageDraw.ImageDraw, title: str, size: Tuple[int, int]) -> None:
    font = _font(OG_TITLE_SIZE)
    width, height = size
    max_width = width - 2 * (OUTER_PADDING + INNER_PADDING)
    lines = wrap_text(draw, title, font, max_width)
    step = int(OG_TITLE_SIZE * LINE_HEIGHT)
    y = (height - step * len(lines)) / 2
    for line in lines:
        line_width = draw.textlength(line, font=font)
        draw.text(
            ((width - line_width) / 2, y + step / 2),
            line,
            font=font,
            fill=OG_TITLE_COLOR,
            anchor="lm",
        )
        y += step


def _draw_brand(draw: ImageDraw.ImageDraw, site: SiteProfile, size: Tuple[int, int]) -> None:
    font = _font(OG_BRAND_SIZE)
    segments = [
        (site.name, OG_BRAND_COLOR, 0),
        ("|", OG_SEPARATOR_COLOR, SEPARATOR_GAP),
        ("Blog", OG_BRAND_COLOR, 0),
        ("|", OG_SEPARATOR_COLOR, SEPARATOR_GAP),
        (site.url, OG_BRAND_COLOR, 0),
    ]
    total = sum(draw.textlength(text, font=font) + 2 * gap for text, _, gap in segments)
    width, height = size
    x = width - BRAND_MARGIN - total
    y = height - BRAND_MARGIN
    for text, color, gap in segments:
        x += gap
        draw.text((x, y), text, font=font, fill=color, anchor="ls")
        x += draw.textlength(text, font=font) + gap


def render_og_image(title: str, site: SiteProfile, size: Tuple[int, int] = OG_SIZE) -> bytes:
    """PNG preview card with the post title and site branding."""
    image = Image.alpha_composite(_background(size), _grid(size))
    draw = ImageDraw.Draw(image)
    _draw_title(draw, title, size)
    _draw_brand(draw, site, size)

    buf = io.BytesIO()
    image.convert("RGB").save(buf, format="PNG")
    return buf.getvalue()
