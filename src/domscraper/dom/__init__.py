"""
domscraper DOM Module.

Provides DOM-to-JSON conversion of selected subtrees.
"""

from domscraper.dom.converter import (
    TEXT_KEY,
    CollisionPolicy,
    ConversionMode,
    DomConverter,
    element_reference,
)

__all__ = [
    "DomConverter",
    "ConversionMode",
    "CollisionPolicy",
    "TEXT_KEY",
    "element_reference",
]
