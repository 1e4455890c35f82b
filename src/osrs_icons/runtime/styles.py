import math
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

# https://developer.mozilla.org/en-US/docs/Web/CSS/cursor
CURSOR_STATES: frozenset[str] = frozenset(
    {
        "default",
        "pointer",
        "wait",
        "text",
        "move",
        "crosshair",
        "grab",
        "grabbing",
        "not-allowed",
        "help",
        "progress",
        "cell",
        "copy",
        "alias",
        "no-drop",
        "col-resize",
        "row-resize",
        "n-resize",
        "e-resize",
        "s-resize",
        "w-resize",
        "zoom-in",
        "zoom-out",
    }
)

CURSOR_ID_ATTRIBUTE = "data-osrs-cursor-id"
ANIM_ID_ATTRIBUTE = "data-osrs-anim-id"

Revert = Callable[[], None]


class StyleHost(Protocol):
    def next_id(self, prefix: str) -> str: ...

    def append_style(self, css: str, marker: str) -> int: ...

    def remove_style(self, handle: int) -> None: ...


class AttributeTarget(Protocol):
    def set_attribute(self, name: str, value: str) -> None: ...

    def remove_attribute(self, name: str) -> None: ...


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


@dataclass
class StyleDocument:
    """In-memory stand-in for a page head: collects injected ``<style>`` blocks."""

    clock: Callable[[], float] = time.time
    styles: dict[int, tuple[str, str]] = field(default_factory=dict)
    _counter: int = field(default=0, init=False, repr=False)
    _next_handle: int = field(default=0, init=False, repr=False)

    def next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}-{_to_base36(int(self.clock() * 1000))}"

    def append_style(self, css: str, marker: str) -> int:
        self._next_handle += 1
        self.styles[self._next_handle] = (marker, css)
        return self._next_handle

    def remove_style(self, handle: int) -> None:
        self.styles.pop(handle, None)

    def render(self) -> str:
        return "\n".join(f'<style {marker}="true">\n{css}\n</style>' for marker, css in self.styles.values())


@dataclass
class ElementTarget:
    attributes: dict[str, str] = field(default_factory=dict)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)


def _noop() -> None:
    return None


def apply_cursors(
    mapping: Mapping[str, str],
    target: AttributeTarget | None = None,
    document: StyleHost | None = None,
) -> Revert:
    """Map CSS cursor states to cursor values, globally or on one element.

    Returns a function that removes the injected rules again. Without a
    ``document`` nothing is injected and the returned function does nothing.
    """
    unknown = sorted(set(mapping) - CURSOR_STATES)
    if unknown:
        raise ValueError(f"Unknown cursor states: {', '.join(unknown)}")
    if document is None:
        return _noop

    selector = "*"
    if target is not None:
        scope_id = document.next_id("osrs")
        selector = f'[{CURSOR_ID_ATTRIBUTE}="{scope_id}"]'
        target.set_attribute(CURSOR_ID_ATTRIBUTE, scope_id)

    rules = []
    for state, cursor_value in mapping.items():
        fallback = "auto" if state == "default" else state
        rules.append(f"{selector} {{ cursor: {cursor_value.replace(', auto', f', {fallback}', 1)}; }}")

    handle = document.append_style("\n".join(rules), "data-osrs-cursors")

    def revert() -> None:
        document.remove_style(handle)
        if target is not None:
            target.remove_attribute(CURSOR_ID_ATTRIBUTE)

    return revert


def animate_cursor(
    frames: Sequence[str],
    duration: int = 1000,
    target: AttributeTarget | None = None,
    iterations: float = math.inf,
    document: StyleHost | None = None,
) -> Revert:
    """Cycle through ``frames`` with a ``step-end`` keyframe animation.

    Each frame gets an equal slice of ``duration`` milliseconds. Returns a
    function that stops the animation and removes its styles.
    """
    if len(frames) < 2:
        raise ValueError(f"animate_cursor requires at least 2 frames, received {len(frames)}.")
    if document is None:
        return _noop

    animation_name = document.next_id("osrs-anim")
    scope_id = f"{animation_name}-scope"
    selector = "*"
    if target is not None:
        selector = f'[{ANIM_ID_ATTRIBUTE}="{scope_id}"]'
        target.set_attribute(ANIM_ID_ATTRIBUTE, scope_id)

    steps = "\n".join(
        f"  {index / len(frames) * 100:.2f}% {{ cursor: {cursor_value}; }}"
        for index, cursor_value in enumerate(frames)
    )
    if math.isinf(iterations):
        iteration_count = "infinite"
    elif float(iterations).is_integer():
        iteration_count = str(int(iterations))
    else:
        iteration_count = str(iterations)

    css = "\n".join(
        [
            f"@keyframes {animation_name} {{",
            steps,
            "}",
            f"{selector} {{",
            f"  animation: {animation_name} {duration}ms step-end {iteration_count};",
            "}",
        ]
    )
    handle = document.append_style(css, "data-osrs-animate")

    def stop() -> None:
        document.remove_style(handle)
        if target is not None:
            target.remove_attribute(ANIM_ID_ATTRIBUTE)

    return stop
