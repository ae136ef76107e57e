"""
Printed page labels.

A PDF may carry a ``/PageLabels`` number tree in its catalog: a tree whose
nodes hold ``/Nums`` arrays of ``(start index, label descriptor)`` pairs and/or
``/Kids`` arrays of child nodes.  Each descriptor says how the pages from its
start index onwards are numbered (decimal, roman, alphabetic or prefix only),
with an optional prefix and start value.

This module flattens that tree into sorted :class:`LabelEntry` values, renders
a label for every physical page and groups physical pages by label so that a
printed page number can be resolved back to physical pages.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pdfnav.errors import DocumentError
from pdfnav.pdfobj import Name, Ref

logger = logging.getLogger(__name__)

# Guard against pathological nesting in addition to the visited set
MAX_TREE_DEPTH = 64

_ROMAN_VALUES = (1000, 900, 500, 400, 100, 90, 50, 40, 10, 9, 5, 4, 1)
_ROMAN_SYMBOLS = ("m", "cm", "d", "cd", "c", "xc", "l", "xl", "x", "ix", "v", "iv", "i")


class LabelStyle(enum.Enum):
    DECIMAL = "D"
    ROMAN_LOWER = "r"
    ROMAN_UPPER = "R"
    ALPHA_LOWER = "a"
    ALPHA_UPPER = "A"
    NONE = ""

    @classmethod
    def from_name(cls, name: Any) -> LabelStyle:
        try:
            return cls(str(name)) if name is not None else cls.NONE
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class LabelEntry:
    start_index: int
    style: LabelStyle = LabelStyle.NONE
    prefix: str = ""
    start_value: int = 1


# Printed label -> 1-based physical pages sharing it, ascending
LabelMap = dict[str, list[int]]


# ---------------------------------------------------------------------------
# Numeral rendering
# ---------------------------------------------------------------------------


def to_roman(number: int, upper: bool = False) -> str:
    """Classical subtractive Roman numeral; non-positive numbers stay decimal."""
    if number <= 0:
        return str(number)
    parts = []
    for value, symbol in zip(_ROMAN_VALUES, _ROMAN_SYMBOLS):
        count, number = divmod(number, value)
        parts.append(symbol * count)
    roman = "".join(parts)
    return roman.upper() if upper else roman


def to_alpha(number: int, upper: bool = False) -> str:
    """Bijective base-26: 1 -> a, 26 -> z, 27 -> aa; non-positive stays decimal."""
    if number <= 0:
        return str(number)
    letters = []
    while number > 0:
        number -= 1
        number, rem = divmod(number, 26)
        letters.append(chr(ord("a") + rem))
    alpha = "".join(reversed(letters))
    return alpha.upper() if upper else alpha


def format_number(number: int, style: LabelStyle) -> str:
    if style is LabelStyle.DECIMAL:
        return str(number)
    if style is LabelStyle.ROMAN_LOWER:
        return to_roman(number)
    if style is LabelStyle.ROMAN_UPPER:
        return to_roman(number, upper=True)
    if style is LabelStyle.ALPHA_LOWER:
        return to_alpha(number)
    if style is LabelStyle.ALPHA_UPPER:
        return to_alpha(number, upper=True)
    return ""


# ---------------------------------------------------------------------------
# Number tree traversal
# ---------------------------------------------------------------------------


class NumberTreeVisitor:
    """Collect :class:`LabelEntry` values from a page-label number tree.

    The walk uses an explicit stack, so neither a cyclic ``/Kids`` graph nor a
    very deep tree can loop forever or blow the interpreter stack.  Nodes that
    do not look like number-tree nodes are skipped; whatever was collected
    from the rest of the tree is kept.

    Args:
        resolve: Dereferences a :class:`~pdfnav.pdfobj.Ref`; may raise
            :class:`~pdfnav.errors.DocumentError`.
        max_depth: Nodes below this depth are ignored.
    """

    def __init__(
        self,
        resolve: Callable[[Any], Any] | None = None,
        max_depth: int = MAX_TREE_DEPTH,
    ) -> None:
        self._resolve = resolve or (lambda obj: obj)
        self.max_depth = max_depth
        self.entries: list[LabelEntry] = []
        self.skipped = 0
        self._visited: set[Any] = set()
        self._alive: list[Any] = []

    def visit(self, root: Any) -> list[LabelEntry]:
        stack: list[tuple[Any, int]] = [(root, 0)]
        while stack:
            obj, depth = stack.pop()
            node = self._enter(obj, depth)
            if node is None:
                continue
            self._collect_nums(node)
            kids = self._deref(node.get(Name("Kids")))
            if kids is None:
                continue
            if not isinstance(kids, list):
                logger.debug("Ignoring non-array /Kids %r", kids)
                self.skipped += 1
                continue
            # reversed so that kids are visited in document order
            for kid in reversed(kids):
                stack.append((kid, depth + 1))

        self.entries.sort(key=lambda e: e.start_index)
        return self.entries

    def _enter(self, obj: Any, depth: int) -> dict | None:
        if depth > self.max_depth:
            logger.warning("Page label tree deeper than %d levels; subtree skipped", self.max_depth)
            self.skipped += 1
            return None
        key = ("ref", obj.xref, obj.gen) if isinstance(obj, Ref) else ("obj", id(obj))
        if key in self._visited:
            logger.warning("Cycle in page label tree at %r; node skipped", obj)
            self.skipped += 1
            return None
        self._visited.add(key)
        # ids are only unique while the object lives
        self._alive.append(obj)

        node = self._deref(obj)
        if node is None:
            return None
        if not isinstance(node, dict):
            logger.debug("Ignoring page label node that is not a dictionary: %r", node)
            self.skipped += 1
            return None
        return node

    def _deref(self, obj: Any) -> Any:
        if not isinstance(obj, Ref):
            return obj
        try:
            return self._resolve(obj)
        except DocumentError as exc:
            logger.warning("Skipping unreadable page label node: %s", exc)
            self.skipped += 1
            return None

    def _collect_nums(self, node: dict) -> None:
        nums = self._deref(node.get(Name("Nums")))
        if nums is None:
            return
        if not isinstance(nums, list):
            logger.debug("Ignoring non-array /Nums %r", nums)
            self.skipped += 1
            return
        if len(nums) % 2:
            logger.debug("Odd-length /Nums array; trailing key ignored")
        for i in range(0, len(nums) - 1, 2):
            key = self._deref(nums[i])
            if isinstance(key, bool) or not isinstance(key, int) or key < 0:
                logger.debug("Ignoring page label key %r", key)
                self.skipped += 1
                continue
            descriptor = self._deref(nums[i + 1])
            self.entries.append(parse_label_descriptor(key, descriptor))


def parse_label_descriptor(start_index: int, descriptor: Any) -> LabelEntry:
    """Build an entry from a ``/S /P /St`` dictionary; missing fields use defaults."""
    if not isinstance(descriptor, dict):
        return LabelEntry(start_index)
    style = LabelStyle.from_name(descriptor.get(Name("S")))
    prefix = descriptor.get(Name("P"))
    start = descriptor.get(Name("St"))
    return LabelEntry(
        start_index=start_index,
        style=style,
        prefix=prefix if isinstance(prefix, str) and not isinstance(prefix, Name) else "",
        start_value=start if isinstance(start, int) and not isinstance(start, bool) else 1,
    )


def extract_label_entries(tree) -> list[LabelEntry]:
    """Entries of a :class:`~pdfnav.document.PageLabelTree`, or ``[]`` for none."""
    if tree is None:
        return []
    visitor = NumberTreeVisitor(tree.resolve)
    entries = visitor.visit(tree.root)
    if visitor.skipped:
        logger.info("Page label tree: %d malformed node(s) skipped", visitor.skipped)
    return entries


# ---------------------------------------------------------------------------
# Label generation
# ---------------------------------------------------------------------------


def find_entry(entries: list[LabelEntry], page_index: int) -> LabelEntry:
    # Pages before the first entry fall back to the first entry
    result = entries[0]
    for entry in entries:
        if entry.start_index <= page_index:
            result = entry
        else:
            break
    return result


def generate_labels(entries: list[LabelEntry], page_count: int) -> list[str]:
    """Printed label of every physical page (list index = 0-based page index)."""
    if not entries:
        return [str(i + 1) for i in range(page_count)]

    labels = []
    for i in range(page_count):
        entry = find_entry(entries, i)
        number = entry.start_value + (i - entry.start_index)
        labels.append(entry.prefix + format_number(number, entry.style))
    return labels


def build_label_map(labels: list[str]) -> LabelMap:
    label_map: LabelMap = {}
    for index, label in enumerate(labels):
        label_map.setdefault(label, []).append(index + 1)
    return label_map


def read_page_labels(document) -> tuple[LabelMap, list[str]]:
    """Label map and per-page labels for an open :class:`~pdfnav.document.PdfDocument`."""
    entries = extract_label_entries(document.read_page_label_tree())
    labels = generate_labels(entries, document.page_count)
    return build_label_map(labels), labels
