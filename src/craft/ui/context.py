"""Build context: mounted-tree bookkeeping, drawing layers, and cell diffing.

A ``BuildContext`` owns one element tree rendered to one
:class:`~craft.ui.display.Display`.  A render pass:

1.  Re-renders dirty elements top-down by depth.  A component's ``render``
    draws through the context primitives and returns the children to
    reconcile against the ones mounted last time.
2.  Composes the ``draw`` buffer from every element's recorded output, in
    tree order, so children paint over their parents.
3.  Flushes: cells whose record differs from the ``current`` buffer are
    blitted, then ``current`` becomes a copy of ``draw``.

Per-element state lives in identity-keyed side tables rather than on the
elements or components themselves.  An exception raised by a component's
``render`` or lifecycle hooks is logged and leaves that subtree's previous
output in place.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from functools import partial
from typing import TYPE_CHECKING, Any, Iterator

from craft.ui.builder import flatten_children
from craft.ui.colors import Color, decode_cell, encode_cell
from craft.ui.config import UiConfig
from craft.ui.layout import TextAlign, TextWrap, align_cells, layout_cells
from craft.ui.types import (
    Child,
    ClassElement,
    Element,
    ElementKind,
    FunctionElement,
    Props,
)
from craft.utils.errors import LayerStackError
from craft.utils.signal import Connection

if TYPE_CHECKING:
    from craft.ui.component import Component
    from craft.ui.display import Display

__all__ = ["BuildContext", "BuildContextLayer"]

logger = logging.getLogger(__name__)

Pen = tuple[int, int]


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuildContextLayer:
    """Drawing defaults for a region of the screen.

    ``right`` and ``bottom`` are exclusive, in absolute cell coordinates.
    """

    background_color: Color
    foreground_color: Color
    left: int
    top: int
    right: int
    bottom: int
    text_align: TextAlign
    text_wrap: TextWrap

    @property
    def width(self) -> int:
        return max(0, self.right - self.left)

    @property
    def height(self) -> int:
        return max(0, self.bottom - self.top)


# ---------------------------------------------------------------------------
# Internal records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _DrawState:
    """Layer stack and pen position at some point of a pass."""

    layers: tuple[BuildContextLayer, ...] = ()
    saved_pens: tuple[Pen, ...] = ()
    pen: Pen = (0, 0)


_EMPTY_STATE = _DrawState()


@dataclass(eq=False)
class _Output:
    """What an element drew during its last successful render."""

    entry: _DrawState
    exit_pen: Pen
    writes: list[tuple[int, str]] = field(default_factory=list)


def _text_node(props: Props, ctx: BuildContext) -> None:
    ctx.draw_text(props["text"])


def _describe(element: Element) -> str:
    if element.kind is ElementKind.CLASS:
        return element.component_type.__name__
    return getattr(element.render, "__name__", repr(element.render))


# ---------------------------------------------------------------------------
# BuildContext
# ---------------------------------------------------------------------------


class BuildContext:
    """Renders an element tree to a display and keeps it up to date."""

    def __init__(
        self,
        display: Display,
        root: Element,
        config: UiConfig | None = None,
    ) -> None:
        self.display = display
        self.root: Element = root
        self.config = config or UiConfig()

        # Mounted-tree side tables
        self._elements: dict[Component, ClassElement] = {}
        self._observers: dict[Element, Connection] = {}
        self._depths: dict[Element, int] = {}
        self._parents: dict[Element, Element | None] = {}
        self._children: dict[Element, list[Element]] = {}
        self._outputs: dict[Element, _Output] = {}

        # Render scheduling
        self._dirty: set[Element] = set()
        self._deferred: set[Element] = set()
        self._pending_did_mount: list[Component] = []
        self._committed: set[Component] = set()
        self._root_mounted = False
        self._rendering = False
        self._render_requested = False
        self._closed = False

        # Drawing state
        self._size: tuple[int, int] = (0, 0)
        self._default_layer = self._make_default_layer(0, 0)
        self._layers: list[BuildContextLayer] = []
        self._saved_pens: list[Pen] = []
        self._pen: Pen = (0, 0)
        self._entry_depth = 0
        self._writes: list[tuple[int, str]] | None = None

        # Cell buffers: index -> 3-character cell record
        self._current: dict[int, str] = {}
        self._draw: dict[int, str] = {}

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def _make_default_layer(self, width: int, height: int) -> BuildContextLayer:
        return BuildContextLayer(
            background_color=self.config.background_color,
            foreground_color=self.config.foreground_color,
            left=0,
            top=0,
            right=width,
            bottom=height,
            text_align=self.config.text_align,
            text_wrap=self.config.text_wrap,
        )

    @property
    def layer(self) -> BuildContextLayer:
        """The active layer: the top of the stack, or the default layer."""
        return self._layers[-1] if self._layers else self._default_layer

    @property
    def layer_depth(self) -> int:
        return len(self._layers)

    def push_layer(self, **fields: Any) -> BuildContextLayer:
        """Push a copy of the active layer with *fields* overridden.

        The pen moves to the new layer's origin until the layer is popped.
        """
        layer = replace(self.layer, **fields)
        self._layers.append(layer)
        self._saved_pens.append(self._pen)
        self._pen = (0, 0)
        return layer

    def pop_layer(self) -> None:
        """Pop the active layer, restoring the previous one and its pen.

        Raises :class:`LayerStackError` when the caller did not push it.
        """
        if len(self._layers) <= self._entry_depth:
            raise LayerStackError("pop_layer() without a matching push_layer()")
        self._layers.pop()
        self._pen = self._saved_pens.pop()

    @contextmanager
    def layered(self, **fields: Any) -> Iterator[BuildContextLayer]:
        """Context manager pairing :meth:`push_layer` with :meth:`pop_layer`."""
        layer = self.push_layer(**fields)
        try:
            yield layer
        finally:
            self.pop_layer()

    def _snapshot(self) -> _DrawState:
        return _DrawState(tuple(self._layers), tuple(self._saved_pens), self._pen)

    def _restore(self, state: _DrawState) -> None:
        self._layers = list(state.layers)
        self._saved_pens = list(state.saved_pens)
        self._pen = state.pen

    def _unwind(self, depth: int) -> None:
        while len(self._layers) > depth:
            self._layers.pop()
            self._pen = self._saved_pens.pop()

    # ------------------------------------------------------------------
    # Drawing primitives
    # ------------------------------------------------------------------

    def screen_size(self) -> tuple[int, int]:
        """``(width, height)`` of the display, in cells."""
        return self._size

    @property
    def pen(self) -> Pen:
        """Current drawing position, relative to the active layer."""
        return self._pen

    def move_to(self, x: int, y: int) -> None:
        """Move the pen to ``(x, y)`` relative to the active layer."""
        self._pen = (x, y)

    def _put(self, x: int, y: int, content: str, layer: BuildContextLayer) -> None:
        # x, y are absolute; clip to the layer and to the screen
        if not (layer.left <= x < layer.right and layer.top <= y < layer.bottom):
            return
        width, height = self._size
        if not (0 <= x < width and 0 <= y < height):
            return
        if self._writes is None:
            raise RuntimeError("Drawing is only possible while a component renders")
        self._writes.append(
            (
                y * width + x,
                encode_cell(content, layer.background_color, layer.foreground_color),
            )
        )

    def draw_cell(self, x: int, y: int, content: str) -> None:
        """Draw *content* (one cell) at ``(x, y)`` relative to the active layer."""
        layer = self.layer
        self._put(layer.left + x, layer.top + y, content, layer)

    def draw_box(self, width: int | None = None, height: int | None = None) -> None:
        """Fill a rectangle at the pen with the layer's background colour.

        Defaults to the rest of the active layer.  The pen does not move.
        """
        layer = self.layer
        pen_x, pen_y = self._pen
        if width is None:
            width = layer.width - pen_x
        if height is None:
            height = layer.height - pen_y
        blank = self.config.blank
        for dy in range(max(0, height)):
            for dx in range(max(0, width)):
                self._put(layer.left + pen_x + dx, layer.top + pen_y + dy, blank, layer)

    def draw_text(self, text: str) -> int:
        """Lay out *text* across the active layer starting at the pen's row.

        Each line is wrapped and aligned per the layer, and fills the whole
        layer width.  The pen moves to the start of the following row.
        Returns the number of lines drawn.
        """
        layer = self.layer
        width = layer.width
        _, row = self._pen
        lines = layout_cells(text, width, layer.text_wrap, self.config.ellipsis)
        for offset, line in enumerate(lines):
            aligned = align_cells(line, width, layer.text_align, self.config.blank)
            y = layer.top + row + offset
            for column, content in enumerate(aligned):
                self._put(layer.left + column, y, content, layer)
        self._pen = (0, row + len(lines))
        return len(lines)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def mounted_components(self) -> list[Component]:
        """Mounted component instances, in tree order."""
        result: list[Component] = []
        if self._root_mounted:
            for element in self._walk(self.root):
                if element.kind is ElementKind.CLASS:
                    result.append(element.instance)
        return result

    def element_of(self, component: Component) -> ClassElement | None:
        return self._elements.get(component)

    def depth_of(self, element: Element) -> int | None:
        return self._depths.get(element)

    def children_of(self, element: Element) -> list[Element]:
        return list(self._children.get(element, ()))

    def is_mounted(self, element: Element) -> bool:
        return element in self._depths

    def cell_at(self, x: int, y: int) -> str | None:
        """The committed cell record at ``(x, y)``, if any."""
        width, height = self._size
        if not (0 <= x < width and 0 <= y < height):
            return None
        return self._current.get(y * width + x)

    def _walk(self, element: Element) -> Iterator[Element]:
        yield element
        for child in self._children.get(element, ()):
            yield from self._walk(child)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _mark_dirty(self, component: Component) -> None:
        element = self._elements.get(component)
        if element is None:
            return
        if self._rendering:
            self._deferred.add(element)
        else:
            self._dirty.add(element)
        self.request_render()

    def request_render(self) -> None:
        """Schedule a render pass on the next event-loop tick.

        Multiple calls coalesce into a single pass.  Without a running
        loop nothing is scheduled and the owner calls :meth:`render`.
        """
        if self._render_requested or self._closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._render_requested = True
        loop.call_soon(self._do_render_tick)

    def _do_render_tick(self) -> None:
        self._render_requested = False
        if self._closed:
            return
        self.render()

    def invalidate(self) -> None:
        """Forget what the display shows and re-render the whole tree."""
        self._current.clear()
        self._dirty.update(self._depths)
        self.request_render()

    @property
    def needs_render(self) -> bool:
        return not self._root_mounted or bool(self._dirty)

    # ------------------------------------------------------------------
    # Render pass
    # ------------------------------------------------------------------

    def render(self) -> int:
        """Run one render pass and flush it.  Returns the cells written."""
        if self._rendering or self._closed:
            return 0

        self._rendering = True
        try:
            size = tuple(self.display.get_size())
            if size != self._size:
                self._resize(size)  # type: ignore[arg-type]

            if not self._root_mounted:
                self._root_mounted = True
                self._restore(_EMPTY_STATE)
                self._mount(self.root, None, 0)

            while self._dirty:
                element = min(self._dirty, key=lambda e: self._depths.get(e, 0))
                self._dirty.discard(element)
                if self.is_mounted(element):
                    self._rerender(element)

            self._restore(_EMPTY_STATE)
            self._compose()
        finally:
            self._rendering = False
            if self._deferred:
                self._dirty.update(e for e in self._deferred if self.is_mounted(e))
                self._deferred.clear()

        written = self.flush()
        self._run_did_mount()
        if self._dirty:
            self.request_render()
        return written

    def _resize(self, size: tuple[int, int]) -> None:
        logger.debug("Display size changed from %s to %s", self._size, size)
        self._size = size
        self._default_layer = self._make_default_layer(*size)
        self._current.clear()
        self._dirty.update(self._depths)

    def _rerender(self, element: Element) -> None:
        output = self._outputs.get(element)
        entry = output.entry if output is not None else _EMPTY_STATE
        old_exit = output.exit_pen if output is not None else None

        self._restore(entry)
        self._render(element)
        self._restore(_EMPTY_STATE)

        # later siblings were laid out from the old exit position
        parent = self._parents.get(element)
        new_exit = self._outputs[element].exit_pen
        if parent is not None and old_exit is not None and new_exit != old_exit:
            self._dirty.add(parent)

    def _normalize(self, result: Any) -> list[Element]:
        if result is None:
            return []
        if not isinstance(result, (list, tuple)):
            result = [result]
        elements: list[Element] = []
        for child in flatten_children(result):
            elements.append(self._as_element(child))
        return elements

    @staticmethod
    def _as_element(child: Child) -> Element:
        if isinstance(child, (str, int, float)):
            text = str(child)
            return FunctionElement(
                render=_text_node, props={"text": text, "children": []}, children=[]
            )
        if isinstance(child, (FunctionElement, ClassElement)):
            return child
        raise TypeError(f"Cannot render {type(child).__name__!r} as a child")

    def _render(self, element: Element) -> None:
        """Render *element* under the current draw state and reconcile its children."""
        entry = self._snapshot()
        base = len(self._layers)
        outer_writes, outer_depth = self._writes, self._entry_depth
        self._writes, self._entry_depth = [], base
        try:
            if element.kind is ElementKind.CLASS:
                result = element.instance.render(self)
            else:
                result = element.render(element.props, self)
            children = self._normalize(result)
        except Exception:
            self._report(element, "render")
            previous = self._outputs.get(element)
            self._restore(entry)
            if previous is None:
                self._outputs[element] = _Output(entry=entry, exit_pen=entry.pen)
            else:
                self._pen = previous.exit_pen
            return
        finally:
            writes = self._writes
            self._writes, self._entry_depth = outer_writes, outer_depth

        self._reconcile(element, children)
        self._unwind(base)
        self._outputs[element] = _Output(
            entry=entry, exit_pen=self._pen, writes=writes or []
        )

        if element.kind is ElementKind.CLASS:
            instance = element.instance
            if instance not in self._committed and instance not in self._pending_did_mount:
                self._pending_did_mount.append(instance)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _reconcile(self, parent: Element, new: list[Element]) -> None:
        old = self._children.get(parent, [])
        keyed = {child.key: child for child in old if child.key is not None}
        claimed: set[Element] = set()
        matches: list[Element | None] = []

        for index, child in enumerate(new):
            if child.key is not None:
                candidate = keyed.get(child.key)
            elif index < len(old) and old[index].key is None:
                candidate = old[index]
            else:
                candidate = None

            if (
                candidate is not None
                and candidate not in claimed
                and candidate.kind is child.kind
                and candidate.identity is child.identity
            ):
                claimed.add(candidate)
                matches.append(candidate)
            else:
                matches.append(None)

        for child in old:
            if child not in claimed:
                self._unmount(child)

        depth = self._depths[parent] + 1
        mounted: list[Element] = []
        for child, match in zip(new, matches):
            if match is None:
                self._mount(child, parent, depth)
                mounted.append(child)
            else:
                mounted.append(self._update(match, child, parent, depth))
        self._children[parent] = mounted

    def _mount(self, element: Element, parent: Element | None, depth: int) -> None:
        self._depths[element] = depth
        self._parents[element] = parent
        self._children[element] = []

        if element.kind is ElementKind.CLASS:
            instance = element.instance
            self._elements[instance] = element
            self._observers[element] = instance.needs_rebuild.subscribe(
                partial(self._mark_dirty, instance)
            )
            try:
                instance.will_mount(self)
            except Exception:
                self._report(element, "will_mount")
                entry = self._snapshot()
                self._outputs[element] = _Output(entry=entry, exit_pen=entry.pen)
                return

        self._render(element)

    def _update(
        self,
        old: Element,
        new: Element,
        parent: Element,
        depth: int,
    ) -> Element:
        """Update the mounted *old* with the description *new*; return the kept element."""
        if old.kind is ElementKind.CLASS:
            instance = old.instance
            try:
                proceed = instance.should_update(new.props, self)
            except Exception:
                self._report(old, "should_update")
                proceed = False
            if not proceed:
                previous = self._outputs.get(old)
                if previous is not None and previous.entry == self._snapshot():
                    self._pen = previous.exit_pen
                    return old
                # the layout above it moved; redraw with the props it kept
                self._dirty.discard(old)
                self._render(old)
                return old
            instance.props = new.props
            element: Element = ClassElement(
                instance=instance,
                component_type=old.component_type,
                props=new.props,
                children=new.children,
            )
        else:
            element = new

        self._rebind(old, element, parent, depth)
        self._render(element)
        return element

    def _rebind(self, old: Element, new: Element, parent: Element, depth: int) -> None:
        """Move every side-table entry of *old* over to *new*."""
        self._dirty.discard(old)
        if old in self._deferred:
            # a state change queued for the next pass follows the element
            self._deferred.discard(old)
            self._deferred.add(new)
        self._depths.pop(old, None)
        self._parents.pop(old, None)
        self._depths[new] = depth
        self._parents[new] = parent

        children = self._children.pop(old, [])
        self._children[new] = children
        for child in children:
            self._parents[child] = new

        output = self._outputs.pop(old, None)
        if output is not None:
            self._outputs[new] = output

        observer = self._observers.pop(old, None)
        if observer is not None:
            self._observers[new] = observer

        if new.kind is ElementKind.CLASS:
            self._elements[new.instance] = new

    def _unmount(self, element: Element) -> None:
        if element.kind is ElementKind.CLASS:
            try:
                element.instance.will_unmount(self)
            except Exception:
                self._report(element, "will_unmount")

        for child in self._children.pop(element, []):
            self._unmount(child)

        observer = self._observers.pop(element, None)
        if observer is not None:
            observer.disconnect()
        self._depths.pop(element, None)
        self._parents.pop(element, None)
        self._outputs.pop(element, None)
        self._dirty.discard(element)
        self._deferred.discard(element)

        if element.kind is ElementKind.CLASS:
            instance = element.instance
            self._elements.pop(instance, None)
            self._committed.discard(instance)
            if instance in self._pending_did_mount:
                self._pending_did_mount.remove(instance)

    def unmount(self) -> None:
        """Unmount the whole tree and stop scheduling renders."""
        if self._root_mounted:
            self._unmount(self.root)
            self._root_mounted = False
        self._pending_did_mount.clear()
        self._closed = True

    def _run_did_mount(self) -> None:
        pending, self._pending_did_mount = self._pending_did_mount, []
        for instance in pending:
            element = self._elements.get(instance)
            if element is None:
                continue
            self._committed.add(instance)
            try:
                instance.did_mount(self)
            except Exception:
                self._report(element, "did_mount")

    def _report(self, element: Element, hook: str) -> None:
        logger.exception(
            "%s raised in %s; keeping its previous output", _describe(element), hook
        )

    # ------------------------------------------------------------------
    # Buffers
    # ------------------------------------------------------------------

    def _compose(self) -> None:
        width, height = self._size
        blank = encode_cell(
            self.config.blank,
            self.config.background_color,
            self.config.foreground_color,
        )
        draw = dict.fromkeys(range(width * height), blank)
        if self._root_mounted:
            for element in self._walk(self.root):
                output = self._outputs.get(element)
                if output is not None:
                    draw.update(output.writes)
        self._draw = draw

    def flush(self) -> int:
        """Blit every cell of ``draw`` that differs from ``current``.

        Adjacent changed cells on a row share one blit.  Afterwards
        ``current`` equals ``draw``.  Returns the number of cells written.
        """
        width, height = self._size
        draw, current = self._draw, self._current
        written = 0

        for y in range(height):
            x = 0
            while x < width:
                index = y * width + x
                cell = draw.get(index)
                if cell is None or cell == current.get(index):
                    x += 1
                    continue
                start = x
                run: list[str] = []
                while x < width:
                    index = y * width + x
                    cell = draw.get(index)
                    if cell is None or cell == current.get(index):
                        break
                    run.append(cell)
                    x += 1
                self._blit(start, y, run)
                written += len(run)

        self._current = dict(draw)
        if written:
            logger.debug("Flushed %d changed cells", written)
        return written

    def _blit(self, x: int, y: int, run: list[str]) -> None:
        text: list[str] = []
        foreground: list[str] = []
        background: list[str] = []
        for record in run:
            content, bg, fg = decode_cell(record)
            text.append(content)
            background.append(bg.digit)
            foreground.append(fg.digit)
        self.display.blit(x, y, "".join(text), "".join(foreground), "".join(background))
