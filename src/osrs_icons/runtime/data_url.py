import re
from collections.abc import Mapping
from typing import overload

# Single-quoted url('...') only; cursor values are always generated that way.
_URL_RE = re.compile(r"url\('(.*)'\)")


def extract_url(cursor_value: str) -> str:
    match = _URL_RE.search(cursor_value)
    return match.group(1) if match else cursor_value


@overload
def to_data_url(cursor_value: str) -> str: ...


@overload
def to_data_url(cursor_value: Mapping[str, str]) -> dict[str, str]: ...


def to_data_url(cursor_value):
    """Return the ``data:image/png;base64,...`` URI embedded in a cursor value.

    Accepts a single cursor string or a mapping of them; anything that does not
    contain ``url('...')`` is returned unchanged.
    """
    if isinstance(cursor_value, str):
        return extract_url(cursor_value)
    return {key: extract_url(value) for key, value in cursor_value.items()}
