"""Helpers for walking and describing XML menu elements."""

from __future__ import annotations

from collections.abc import Iterator
from xml.etree.ElementTree import Element

__all__ = [
    "child_elements",
    "reversed_child_elements",
    "first_child_element",
    "last_child_element",
    "element_text",
    "describe_element",
]


def _matches(child: Element, tag_name: str | None) -> bool:
    # Comments and processing instructions carry a non-string tag.
    if not isinstance(child.tag, str):
        return False
    return not tag_name or child.tag == tag_name


def child_elements(parent: Element, tag_name: str | None = None) -> Iterator[Element]:
    """Yield the child elements of *parent*, optionally only those named *tag_name*.

    The children are taken as a snapshot, so the caller may remove or move
    the yielded elements while iterating.
    """
    for child in list(parent):
        if _matches(child, tag_name):
            yield child


def reversed_child_elements(
    parent: Element, tag_name: str | None = None
) -> Iterator[Element]:
    """Yield the child elements of *parent* from last to first."""
    for child in reversed(list(parent)):
        if _matches(child, tag_name):
            yield child


def first_child_element(parent: Element, tag_name: str | None = None) -> Element | None:
    """Return the first child element (named *tag_name* if given), or None."""
    return next(child_elements(parent, tag_name), None)


def last_child_element(parent: Element, tag_name: str | None = None) -> Element | None:
    """Return the last child element (named *tag_name* if given), or None."""
    return next(reversed_child_elements(parent, tag_name), None)


def element_text(element: Element) -> str:
    """Return all text contained in *element* and its descendants."""
    return "".join(element.itertext())


def describe_element(element: Element) -> str:
    """Return a one-line debugging description of *element*."""
    args = "".join(f" {name}={value}'" for name, value in element.attrib.items())
    return f"<{element.tag}{args}>{element_text(element)}</{element.tag}>"