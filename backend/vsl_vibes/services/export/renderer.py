"""
Slide rendering to 1920x1080 PNG.

Two renderers share one interface (``async render(slide) -> bytes``):

- LocalSlideRenderer draws the slide with Pillow
- RemoteSlideRenderer posts slide HTML to htmlcsstoimage and downloads
  the resulting image; ``render_url`` returns the hosted URL instead
"""

import asyncio
import html
import io
import re
from pathlib import Path
from typing import List, Optional, Tuple

import httpx
from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from ...config import HCTI_URL, SLIDE_HEIGHT, SLIDE_WIDTH, get_api_key
from ...core.exceptions import UpstreamError
from ...core.logging import get_logger
from ...core.security import Resolver, is_public_https_url, resolve_host
from ...models.deck import Slide
from ..media.http import require_key, send_with_retry
from .archive import decode_data_url, is_data_url

logger = get_logger(__name__, component="renderer")

# Editor font sizes are in preview points; this maps them onto the export canvas
TEXT_SCALE = 0.8

COLORS = {
    "white": (255, 255, 255),
    "dark": (26, 26, 26),
    "black": (26, 26, 26),
    "red": (220, 38, 38),
}

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "/Library/Fonts/Arial Bold.ttf",
]

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{6})")


def font_size_for(slide: Slide) -> int:
    return max(12, int(slide.style.text_size * TEXT_SCALE))


def get_font(size: int) -> ImageFont.ImageFont:
    """Load a bold system font, falling back to Pillow's built-in font."""
    for font_path in FONT_CANDIDATES:
        if Path(font_path).exists():
            try:
                return ImageFont.truetype(font_path, size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def gradient_colors(gradient: Optional[str]) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    colors = [tuple(int(h[i:i + 2], 16) for i in (0, 2, 4)) for h in _HEX_COLOR.findall(gradient or "")]
    if len(colors) >= 2:
        return colors[0], colors[-1]
    return (102, 126, 234), (118, 75, 162)


def slide_text_color(slide: Slide) -> Tuple[int, int, int]:
    return COLORS["white"] if slide.style.text_color == "white" else COLORS["black"]


# =============================================================================
# HTML (remote renderer)
# =============================================================================

def build_slide_html(slide: Slide) -> str:
    """Self-contained HTML for one slide at the export canvas size."""
    style = slide.style
    background = "#1a1a1a" if style.background == "dark" else "#ffffff"
    background_css = f"background-color: {background};"
    if style.background == "gradient" and style.gradient:
        background_css = f"background: {style.gradient};"

    text_color = "#ffffff" if style.text_color == "white" else "#1a1a1a"
    weight = "800" if style.text_weight == "extrabold" else "700"
    image = slide.background_image
    image_layer = ""
    text_top = "0"
    if image and image.url and style.background == "image":
        blur = f"filter: blur({image.blur}px);" if image.blur else ""
        image_layer = (
            f'<div style="position: absolute; inset: 0; background-image: url(\'{html.escape(image.url)}\'); '
            f'background-size: cover; background-position: center; opacity: {image.opacity / 100}; {blur}"></div>'
        )
    elif image and image.url and style.background == "split":
        ratio = style.split_ratio or 50
        text_top = f"{ratio}%"
        image_layer = (
            f'<div style="position: absolute; left: 0; right: 0; top: 0; height: {ratio}%; '
            f'background-image: url(\'{html.escape(image.url)}\'); background-size: cover; '
            f'background-position: center {image.image_position_y or 35}%;"></div>'
        )

    words = []
    for segment in slide.segments or []:
        word = html.escape(segment.text)
        if segment.emphasis == "red":
            word = f'<span style="color: #dc2626;">{word}</span>'
        elif segment.emphasis == "underline":
            color = "#1a1a1a" if segment.underline_style == "brush-black" else "#dc2626"
            word = f'<span style="text-decoration: underline; text-decoration-color: {color}; text-decoration-thickness: 6px;">{word}</span>'
        elif segment.emphasis == "circle":
            color = "#1a1a1a" if segment.circle_style == "black-solid" else "#dc2626"
            border = "dotted" if segment.circle_style == "red-dotted" else "solid"
            word = f'<span style="border: 5px {border} {color}; border-radius: 50%; padding: 0 12px;">{word}</span>'
        elif segment.emphasis == "bold":
            word = f'<span style="font-weight: 900;">{word}</span>'
        words.append(word)
    text = " ".join(words) or html.escape(slide.full_script_text)

    visual = ""
    if slide.is_infographic and slide.infographic_visual:
        value = slide.infographic_visual.value
        visual_html = value if slide.infographic_visual.type == "svg" else html.escape(value)
        visual = f'<div style="font-size: 220px; width: 320px; height: 320px; margin-bottom: 40px;">{visual_html}</div>'

    return f"""
      <div style="width: {SLIDE_WIDTH}px; height: {SLIDE_HEIGHT}px; {background_css} position: relative; overflow: hidden; font-family: system-ui, -apple-system, sans-serif;">
        {image_layer}
        <div style="position: absolute; left: 0; right: 0; bottom: 0; top: {text_top}; z-index: 10; display: flex; flex-direction: column; align-items: center; justify-content: center; padding: 0 80px;">
          {visual}
          <p style="text-align: center; font-size: {font_size_for(slide)}px; color: {text_color}; font-weight: {weight}; line-height: 1.15; margin: 0;">{text}</p>
        </div>
      </div>
    """


async def fetch_bytes(url: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """Bytes of a data URL or a remote URL (downloaded with retry)."""
    if is_data_url(url):
        return decode_data_url(url)[1]
    response = await send_with_retry("GET", url, provider="download", client=client)
    return response.content


class RemoteSlideRenderer:
    """htmlcsstoimage.com renderer (Basic auth with user id and API key)."""

    name = "remote"

    def __init__(
        self,
        user_id: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        url: str = HCTI_URL,
    ):
        self.user_id = user_id
        self.api_key = api_key
        self.client = client
        self.url = url

    async def render_url(self, slide: Slide) -> str:
        user_id = require_key(get_api_key("HCTI_USER_ID", self.user_id), "HCTI_USER_ID not configured", "hcti")
        api_key = require_key(get_api_key("HCTI_API_KEY", self.api_key), "HCTI_API_KEY not configured", "hcti")
        response = await send_with_retry(
            "POST",
            self.url,
            provider="hcti",
            client=self.client,
            auth=(user_id, api_key),
            json={"html": build_slide_html(slide), "css": "", "google_fonts": ""},
        )
        url = response.json().get("url")
        if not url:
            raise UpstreamError("htmlcsstoimage returned no image url", provider="hcti",
                                status_code=response.status_code)
        return url

    async def render(self, slide: Slide) -> bytes:
        return await fetch_bytes(await self.render_url(slide), self.client)


class LocalSlideRenderer:
    """Pillow renderer; background images are fetched before drawing."""

    name = "local"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        width: int = SLIDE_WIDTH,
        height: int = SLIDE_HEIGHT,
        resolve: Resolver = resolve_host,
    ):
        self.client = client
        self.width = width
        self.height = height
        self.resolve = resolve

    async def render(self, slide: Slide) -> bytes:
        background: Optional[bytes] = None
        image = slide.background_image
        if image and image.url and slide.style.background in ("image", "split"):
            background = await self._fetch_background(image.url)
        # Drawing is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(self.draw, slide, background)

    async def _fetch_background(self, url: str) -> Optional[bytes]:
        """Inline images are decoded; remote ones only come from public https hosts."""
        if not is_data_url(url) and not await is_public_https_url(url, self.resolve):
            logger.warning("Skipping background image from a non-public URL", extra={"url": url[:200]})
            return None
        return await fetch_bytes(url, self.client)

    def draw(self, slide: Slide, background: Optional[bytes] = None) -> bytes:
        canvas = self._background(slide, background)
        draw = ImageDraw.Draw(canvas)

        text_top = 0
        if slide.style.background == "split" and background:
            text_top = int(self.height * (slide.style.split_ratio or 50) / 100)
        self._draw_text(draw, slide, text_top)

        if slide.headshot and slide.headshot.name:
            caption = slide.headshot.name
            if slide.headshot.title:
                caption = f"{caption}, {slide.headshot.title}"
            small = get_font(40)
            width = draw.textlength(caption, font=small)
            draw.text(((self.width - width) / 2, self.height - 110), caption,
                      font=small, fill=slide_text_color(slide))

        output = io.BytesIO()
        canvas.save(output, format="PNG")
        return output.getvalue()

    def _background(self, slide: Slide, background: Optional[bytes]) -> Image.Image:
        size = (self.width, self.height)
        style = slide.style

        if style.background == "gradient":
            start, end = gradient_colors(style.gradient)
            mask = Image.linear_gradient("L").resize(size)
            return Image.composite(Image.new("RGB", size, end), Image.new("RGB", size, start), mask)

        base_color = COLORS["dark"] if style.background in ("dark", "image") else COLORS["white"]
        canvas = Image.new("RGB", size, base_color)
        if not background:
            return canvas

        try:
            with Image.open(io.BytesIO(background)) as source:
                photo = source.convert("RGB")
        except Image.DecompressionBombError as e:
            raise ValueError(f"Background image is too large to render: {e}") from e
        image = slide.background_image

        if style.background == "split":
            band = (self.width, int(self.height * (style.split_ratio or 50) / 100))
            centering = (0.5, (image.image_position_y or 35) / 100)
            canvas.paste(ImageOps.fit(photo, band, centering=centering), (0, 0))
            return canvas

        photo = ImageOps.fit(photo, size)
        if image.blur:
            photo = photo.filter(ImageFilter.GaussianBlur(image.blur))
        return Image.blend(canvas, photo, max(0.0, min(1.0, image.opacity / 100)))

    def _layout(self, draw: ImageDraw.ImageDraw, slide: Slide, font, max_width: float) -> List[List[Tuple[str, object]]]:
        """Wrap segments into lines of (word, segment) pairs."""
        segments = slide.segments or []
        words = [(segment.text, segment) for segment in segments] or [
            (word, None) for word in slide.full_script_text.split()
        ]
        space = draw.textlength(" ", font=font)
        lines: List[List[Tuple[str, object]]] = [[]]
        width = 0.0
        for word, segment in words:
            word_width = draw.textlength(word, font=font)
            if lines[-1] and width + space + word_width > max_width:
                lines.append([])
                width = 0.0
            width += (space if lines[-1] else 0) + word_width
            lines[-1].append((word, segment))
        return lines

    def _draw_text(self, draw: ImageDraw.ImageDraw, slide: Slide, top: int) -> None:
        font_size = font_size_for(slide)
        font = get_font(font_size)
        padding = 120
        lines = self._layout(draw, slide, font, self.width - 2 * padding)

        line_height = int(font_size * 1.2)
        block_height = line_height * len(lines)
        y = top + (self.height - top - block_height) // 2
        space = draw.textlength(" ", font=font)
        base_color = slide_text_color(slide)

        for line in lines:
            line_width = sum(draw.textlength(word, font=font) for word, _ in line) + space * max(len(line) - 1, 0)
            x = (self.width - line_width) / 2
            for word, segment in line:
                word_width = draw.textlength(word, font=font)
                emphasis = segment.emphasis if segment is not None else "none"
                color = COLORS["red"] if emphasis == "red" else base_color
                draw.text((x, y), word, font=font, fill=color)

                if emphasis == "underline":
                    underline = COLORS["black"] if segment.underline_style == "brush-black" else COLORS["red"]
                    if segment.underline_style == "regular":
                        underline = base_color
                    underline_y = y + font_size * 1.05
                    draw.line([(x, underline_y), (x + word_width, underline_y)], fill=underline,
                              width=max(4, font_size // 12))
                elif emphasis == "circle":
                    outline = COLORS["black"] if segment.circle_style == "black-solid" else COLORS["red"]
                    margin = font_size * 0.25
                    draw.ellipse([x - margin, y - margin, x + word_width + margin, y + font_size * 1.15 + margin],
                                 outline=outline, width=max(4, font_size // 14))
                x += word_width + space
            y += line_height


async def render_slides(renderer, slides: List[Slide]) -> List[bytes]:
    """Render slides in order; the first failure aborts."""
    images = []
    for index, slide in enumerate(slides):
        images.append(await renderer.render(slide))
        logger.debug("Slide rendered", extra={"index": index, "renderer": renderer.name})
    return images


__all__ = [
    "LocalSlideRenderer",
    "RemoteSlideRenderer",
    "build_slide_html",
    "fetch_bytes",
    "render_slides",
]
