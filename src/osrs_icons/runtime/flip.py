import base64
import binascii
import io
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from PIL import Image, ImageOps

from osrs_icons.errors import ImageEncodingError

_FLIP_URL_RE = re.compile(r"url\('(.*?)'\)")
_PNG_DATA_URL_PREFIX = "data:image/png;base64,"

Mirror = Callable[[str], str]


def mirror_png_data_url(data_url: str) -> str:
    """Mirror a base64 PNG data URI horizontally."""
    if not data_url.startswith(_PNG_DATA_URL_PREFIX):
        raise ImageEncodingError("Only base64 PNG data URLs can be flipped")
    try:
        raw = base64.b64decode(data_url[len(_PNG_DATA_URL_PREFIX) :], validate=True)
        with Image.open(io.BytesIO(raw)) as src:
            mirrored = ImageOps.mirror(src.convert("RGBA"))
        out = io.BytesIO()
        mirrored.save(out, format="PNG", optimize=True)
    except (binascii.Error, OSError, ValueError) as exc:
        raise ImageEncodingError(f"Failed to load cursor image for flipping: {exc}") from exc
    return _PNG_DATA_URL_PREFIX + base64.b64encode(out.getvalue()).decode("ascii")


class CursorFlipper:
    """Flips cursor values horizontally and remembers every result it produced.

    ``mirror`` is the imaging capability. Without one (``None``) values pass
    through untouched, the same as outside a rendering environment.
    """

    def __init__(self, mirror: Mirror | None = mirror_png_data_url) -> None:
        self._mirror = mirror
        self._cache: dict[str, str] = {}

    def flip(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._flip_one(value)
        if isinstance(value, Mapping):
            return {key: self._flip_member(member) for key, member in value.items()}
        if isinstance(value, Sequence):
            return [self._flip_one(item) for item in value]
        raise TypeError(f"Cannot flip value of type {type(value).__name__}")

    def clear(self) -> None:
        self._cache.clear()

    def _flip_member(self, member: Any) -> Any:
        if isinstance(member, str):
            return self._flip_one(member)
        if isinstance(member, (list, tuple)) and all(isinstance(item, str) for item in member):
            return [self._flip_one(item) for item in member]
        return member

    def _flip_one(self, cursor_value: str) -> str:
        cached = self._cache.get(cursor_value)
        if cached is not None:
            return cached
        if self._mirror is None:
            return cursor_value

        match = _FLIP_URL_RE.search(cursor_value)
        if not match:
            return cursor_value

        original = match.group(1)
        flipped = cursor_value.replace(original, self._mirror(original), 1)
        self._cache[cursor_value] = flipped
        return flipped
