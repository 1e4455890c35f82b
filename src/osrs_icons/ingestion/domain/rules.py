import re
from collections.abc import Iterable, Mapping

from osrs_icons.config.logger_config import logger
from osrs_icons.ingestion.domain.models import ImageRequest, WikiItem

# JavaScript / TypeScript words that cannot be used as `export const` names.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "abstract",
        "arguments",
        "await",
        "boolean",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "double",
        "else",
        "enum",
        "eval",
        "export",
        "extends",
        "false",
        "final",
        "finally",
        "float",
        "for",
        "function",
        "goto",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "int",
        "interface",
        "let",
        "long",
        "native",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "short",
        "static",
        "super",
        "switch",
        "synchronized",
        "this",
        "throw",
        "throws",
        "transient",
        "true",
        "try",
        "typeof",
        "undefined",
        "var",
        "void",
        "volatile",
        "while",
        "with",
        "yield",
    }
)

SUPPORTED_IMAGE_EXTENSIONS: tuple[str, ...] = (".png", ".svg")

_PUNCTUATION_RE = re.compile(r"['\"().,]")
_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9\s\-_]")
_SEPARATOR_RE = re.compile(r"[\s\-_]+")
_FILE_PREFIX_RE = re.compile(r"^File:")
_IMAGE_SUFFIX_RE = re.compile(r"\.(png|svg)$", re.IGNORECASE)


def sanitize_variable_name(title: str) -> str:
    """Convert a wiki title into a camelCase identifier.

    ``+`` becomes ``Plus``, ``&`` becomes ``And``, punctuation is dropped and
    reserved words are prefixed with an underscore. A leading digit is left
    alone here; see :func:`to_identifier`.
    """
    cleaned = title.replace("+", "Plus").replace("&", "And")
    cleaned = _PUNCTUATION_RE.sub("", cleaned)
    cleaned = _DISALLOWED_RE.sub("", cleaned)
    words = [word for word in _SEPARATOR_RE.split(cleaned) if word]

    name = "".join(
        word.lower() if index == 0 else word[0].upper() + word[1:].lower()
        for index, word in enumerate(words)
    )
    if name in RESERVED_WORDS:
        name = "_" + name
    return name


def to_identifier(title: str) -> str:
    name = sanitize_variable_name(title)
    if not name or name[0].isdigit():
        name = "_" + name
    return name


def strip_file_title(title: str) -> str:
    return _IMAGE_SUFFIX_RE.sub("", _FILE_PREFIX_RE.sub("", title))


def is_supported_image(title: str) -> bool:
    return title.lower().endswith(SUPPORTED_IMAGE_EXTENSIONS)


def filter_image_files(files: Mapping[str, WikiItem]) -> dict[str, WikiItem]:
    filtered: dict[str, WikiItem] = {}
    for title, item in files.items():
        if is_supported_image(title):
            filtered[title] = item
        else:
            logger.info("Skipping unsupported file format: {}", title)
    return filtered


def build_image_requests(items: Iterable[WikiItem]) -> list[ImageRequest]:
    return [ImageRequest(file_title=item.title, key=strip_file_title(item.title)) for item in items]
