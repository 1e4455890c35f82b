import base64
import io

from PIL import Image

from osrs_icons.errors import ImageEncodingError

SVG_CANVAS_SIZE = 32
PALETTE_COLORS = 256

_DECODE_ERRORS = (OSError, ValueError, SyntaxError)


def to_cursor_value(png_bytes: bytes) -> str:
    encoded = base64.b64encode(png_bytes).decode("ascii")
    return f"url('data:image/png;base64,{encoded}'), auto"


def compress_png(data: bytes) -> bytes:
    """Re-encode an image as a palette PNG at maximum lossless compression."""
    try:
        with Image.open(io.BytesIO(data)) as src:
            rgba = src.convert("RGBA")
        paletted = rgba.quantize(colors=PALETTE_COLORS, method=Image.Quantize.FASTOCTREE)
        out = io.BytesIO()
        paletted.save(out, format="PNG", optimize=True, compress_level=9)
    except _DECODE_ERRORS as exc:
        raise ImageEncodingError(f"Could not compress image: {exc}") from exc
    return out.getvalue()


def _svg_to_png(data: bytes, **size: int) -> bytes:
    # cairosvg loads the native cairo library on import.
    import cairosvg

    return cairosvg.svg2png(bytestring=data, **size)


def rasterize_svg(data: bytes, size: int = SVG_CANVAS_SIZE) -> bytes:
    """Render an SVG so that it fits inside a ``size`` x ``size`` box, keeping its aspect ratio."""
    try:
        probe_png = _svg_to_png(data)
        with Image.open(io.BytesIO(probe_png)) as probe:
            width, height = probe.size
        scale = min(size / width, size / height)
        return _svg_to_png(
            data,
            output_width=max(1, round(width * scale)),
            output_height=max(1, round(height * scale)),
        )
    except (*_DECODE_ERRORS, ZeroDivisionError) as exc:
        raise ImageEncodingError(f"Could not rasterise SVG: {exc}") from exc


def encode_cursor(data: bytes, is_svg: bool = False) -> str:
    png = rasterize_svg(data) if is_svg else data
    return to_cursor_value(compress_png(png))
