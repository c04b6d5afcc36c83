"""
DOM Converter - Turns selected DOM subtrees into JSON-serializable items.

Each element matched by a CSS selector becomes one item, in one of three
representations:

- complete: the element's outer HTML
- deep:     a nested mapping keyed by tag/class/id references
- shallow:  the element's flattened text

Deep conversion is lossy by nature. Sibling elements that share a reference
(two plain ``<div>`` children, say) land on the same key, and the collision
policy decides what survives. The default keeps the last sibling.
"""

import logging
from enum import Enum
from typing import Union

import soupsieve
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction
from soupsieve import SelectorSyntaxError

from domscraper.exceptions import ConversionError, InvalidSelectorError
from domscraper.models import SelectorResult

logger = logging.getLogger(__name__)

TEXT_KEY = "$text"

# Node types that carry no text content
NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)

StructuredNode = dict[str, Union[str, list, "StructuredNode"]]
Item = Union[str, StructuredNode]


class ConversionMode(str, Enum):
    """Output representation for matched elements."""

    COMPLETE = "complete"
    DEEP = "deep"
    SHALLOW = "shallow"

    @classmethod
    def from_flags(cls, complete: bool = False, deep: bool = False) -> "ConversionMode":
        """Resolve request flags; complete wins over deep."""
        if complete:
            return cls.COMPLETE
        if deep:
            return cls.DEEP
        return cls.SHALLOW


class CollisionPolicy(str, Enum):
    """What happens when sibling elements share an element reference."""

    OVERWRITE = "overwrite"
    MERGE_TO_ARRAY = "merge_to_array"
    ERROR = "error"


def element_reference(tag: Tag) -> str:
    """
    Build the mapping key for an element.

    ``_`` stands in for ``.`` and ``$`` for ``#`` so the keys stay easy to
    address from JavaScript: ``<div class="a b" id="x">`` becomes ``div_a_b$x``.
    """
    ref = tag.name
    classes = _attribute(tag, "class")
    if classes:
        ref += "_" + classes.replace(" ", "_")
    element_id = _attribute(tag, "id")
    if element_id:
        ref += "$" + element_id
    return ref


def _attribute(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        # Parsers configured with multi-valued attributes hand back lists
        return " ".join(value)
    return value or ""


def element_children(tag: Tag) -> list[Tag]:
    """Direct child elements, skipping text and comment nodes."""
    return [child for child in tag.children if isinstance(child, Tag)]


def _is_text(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, NON_TEXT)


def own_text(tag: Tag) -> str:
    """Text held directly by the element, excluding descendants' text."""
    return "".join(str(child) for child in tag.children if _is_text(child))


def flattened_text(tag: Tag) -> str:
    """
    Concatenated text of every descendant, in document order.

    Unlike ``Tag.get_text()`` this keeps the contents of ``<script>`` and
    ``<style>`` elements, matching the browser's ``textContent``.
    """
    return "".join(str(node) for node in tag.descendants if _is_text(node))


class DomConverter:
    """
    Converts HTML into per-selector result items.

    Usage:
        converter = DomConverter()
        items = converter.convert(html, "ul.menu", deep=True)
    """

    def __init__(
        self,
        collision_policy: CollisionPolicy = CollisionPolicy.OVERWRITE,
        parser: str = "lxml",
    ):
        self.collision_policy = CollisionPolicy(collision_policy)
        self.parser = parser

    def parse(self, html: str) -> BeautifulSoup:
        """Parse HTML permissively; class attributes are kept as raw strings."""
        return BeautifulSoup(html or "", self.parser, multi_valued_attributes=None)

    def convert(
        self,
        html: str,
        selector: str,
        complete: bool = False,
        deep: bool = False,
    ) -> list[Item]:
        """
        Convert every element matching ``selector``.

        Args:
            html: HTML document or fragment
            selector: CSS selector
            complete: Return outer HTML (takes precedence over ``deep``)
            deep: Return nested mappings

        Returns:
            One item per matched element, in document order

        Raises:
            InvalidSelectorError: If the selector cannot be parsed
            ConversionError: On a key collision under CollisionPolicy.ERROR
        """
        mode = ConversionMode.from_flags(complete, deep)
        return self._convert_soup(self.parse(html), selector, mode)

    def convert_many(
        self,
        html: str,
        selectors: list[str],
        complete: bool = False,
        deep: bool = False,
    ) -> list[SelectorResult]:
        """Convert each selector independently against one parsed document."""
        mode = ConversionMode.from_flags(complete, deep)
        soup = self.parse(html)

        results = []
        for selector in selectors:
            items = self._convert_soup(soup, selector, mode)
            results.append(SelectorResult(selector=selector, count=len(items), items=items))
        return results

    @staticmethod
    def validate_selector(selector: str) -> None:
        """
        Check a selector without a document at hand.

        A blank selector is valid and matches nothing.

        Raises:
            InvalidSelectorError: If the selector cannot be parsed
        """
        if not selector.strip():
            return
        try:
            soupsieve.compile(selector)
        except SelectorSyntaxError as e:
            raise InvalidSelectorError(selector, str(e).splitlines()[0]) from e

    def _convert_soup(self, soup: BeautifulSoup, selector: str, mode: ConversionMode) -> list[Item]:
        self.validate_selector(selector)
        if not selector.strip():
            return []
        matches = soup.select(selector)

        logger.debug(f"Selector {selector!r} matched {len(matches)} elements ({mode.value})")

        if mode is ConversionMode.COMPLETE:
            return [str(tag) for tag in matches]
        if mode is ConversionMode.DEEP:
            return [self.to_structure(tag) for tag in matches]
        return [flattened_text(tag) for tag in matches]

    def to_structure(self, tag: Tag) -> StructuredNode:
        """Convert one element to ``{reference: value}``."""
        ref, value = self._build(tag)
        return {ref: value}

    def _build(self, tag: Tag) -> tuple[str, Union[str, StructuredNode]]:
        ref = element_reference(tag)
        children = element_children(tag)
        if not children:
            return ref, flattened_text(tag)

        node: StructuredNode = {}
        text = own_text(tag)
        if text:
            node[TEXT_KEY] = text

        for child in children:
            child_ref, child_value = self._build(child)
            self._assign(node, child_ref, child_value)
            # Parent text that merely repeats a child's text is dropped
            if TEXT_KEY in node and node[TEXT_KEY] == flattened_text(child):
                del node[TEXT_KEY]

        return ref, node

    def _assign(self, node: StructuredNode, key: str, value: Union[str, StructuredNode]) -> None:
        if key not in node:
            node[key] = value
            return

        if self.collision_policy is CollisionPolicy.ERROR:
            raise ConversionError(f"Duplicate element reference among siblings: {key!r}")

        if self.collision_policy is CollisionPolicy.MERGE_TO_ARRAY:
            existing = node[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[key] = [existing, value]
            return

        node[key] = value
