"""Matching rules of the desktop menu specification (Include/Exclude)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Protocol
from xml.etree.ElementTree import Element

from .xmlhelper import child_elements, element_text

__all__ = [
    "DesktopEntry",
    "MenuRule",
    "OrRule",
    "AndRule",
    "NotRule",
    "FilenameRule",
    "CategoryRule",
    "AllRule",
    "build_rule",
    "MenuRules",
]

log = logging.getLogger(__name__)


class DesktopEntry(Protocol):
    """What a rule needs to know about a desktop entry."""

    @property
    def categories(self) -> Iterable[str]: ...


class MenuRule(ABC):
    """A predicate over desktop entries."""

    @abstractmethod
    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        """Return True if the rule matches the entry."""


class OrRule(MenuRule):
    """Matches when any of its child rules match."""

    def __init__(self, element: Element) -> None:
        self.children: list[MenuRule] = []
        for child in child_elements(element):
            rule = build_rule(child)
            if rule is not None:
                self.children.append(rule)

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return any(r.check(desktop_file_id, desktop_file) for r in self.children)


class AndRule(OrRule):
    """Matches when all of its child rules match; never matches when empty."""

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return bool(self.children) and all(
            r.check(desktop_file_id, desktop_file) for r in self.children
        )


class NotRule(OrRule):
    """Matches when none of its child rules match."""

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return not super().check(desktop_file_id, desktop_file)


class FilenameRule(MenuRule):
    """Matches the entry with the given desktop-file id."""

    def __init__(self, element: Element) -> None:
        self.id = element_text(element)

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return desktop_file_id == self.id


class CategoryRule(MenuRule):
    """Matches entries that list the given category."""

    def __init__(self, element: Element) -> None:
        self.category = element_text(element)

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return self.category in list(desktop_file.categories)


class AllRule(MenuRule):
    """Matches every entry."""

    def __init__(self, element: Element | None = None) -> None:
        pass

    def check(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        return True


_RULE_TYPES: dict[str, type[MenuRule]] = {
    "Or": OrRule,
    "And": AndRule,
    "Not": NotRule,
    "Filename": FilenameRule,
    "Category": CategoryRule,
    "All": AllRule,
}


def build_rule(element: Element) -> MenuRule | None:
    """Build the rule that *element* describes; warn and return None if unknown."""
    rule_type = _RULE_TYPES.get(element.tag)
    if rule_type is None:
        log.warning("Unknown rule %s", element.tag)
        return None
    return rule_type(element)


class MenuRules:
    """The Include and Exclude rules of one menu."""

    def __init__(self) -> None:
        self.include_rules: list[MenuRule] = []
        self.exclude_rules: list[MenuRule] = []

    def add_include(self, element: Element) -> None:
        """Add an <Include> element; its children are joined with OR."""
        self.include_rules.append(OrRule(element))

    def add_exclude(self, element: Element) -> None:
        """Add an <Exclude> element; its children are joined with OR."""
        self.exclude_rules.append(OrRule(element))

    def check_include(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        """Return True if any include rule matches."""
        return any(r.check(desktop_file_id, desktop_file) for r in self.include_rules)

    def check_exclude(self, desktop_file_id: str, desktop_file: DesktopEntry) -> bool:
        """Return True if any exclude rule matches."""
        return any(r.check(desktop_file_id, desktop_file) for r in self.exclude_rules)