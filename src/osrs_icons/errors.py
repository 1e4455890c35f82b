class OsrsIconsError(Exception):
    """Base class for errors raised by the icon pipeline."""


class WikiApiError(OsrsIconsError):
    """The wiki API answered with a payload we cannot use."""


class ImageEncodingError(OsrsIconsError):
    """An image could not be decoded, rasterised or recompressed."""
