"""Builds <AppLink> elements for the desktop entries each menu selects."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol
from xml.etree.ElementTree import Element, SubElement

from .context import MenuContext
from .rules import MenuRules
from .xmlhelper import child_elements, element_text, reversed_child_elements

__all__ = [
    "DesktopFile",
    "DesktopFileLoader",
    "AppFileInfo",
    "MenuApplinkProcessor",
    "check_try_exec",
]


class DesktopFile(Protocol):
    """What the processor needs from a loaded desktop entry."""

    file_name: str

    @property
    def categories(self) -> Iterable[str]: ...

    def is_shown(self, environment: str) -> bool: ...

    def value(self, key: str) -> object: ...

    def localized_value(self, key: str) -> object: ...


DesktopFileLoader = Callable[[str], "DesktopFile | None"]
"""Loads the desktop file at a path; returns None when it is not valid."""


def _to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_bool(value: object) -> bool:
    if isinstance(value, str):
        return not (value == "" or value == "0" or value.lower() == "false")
    return bool(value)


def _bool_attribute(value: object) -> str:
    return "1" if _to_bool(value) else "0"


@dataclass(eq=False)
class AppFileInfo:
    """A desktop entry found in an <AppDir>, with its desktop-file id."""

    desktop_file: DesktopFile
    id: str
    allocated: bool = False


class MenuApplinkProcessor:
    """Replaces AppDir/Include/Exclude of a menu tree with <AppLink> elements."""

    def __init__(
        self,
        element: Element,
        context: MenuContext,
        load_desktop_file: DesktopFileLoader,
        parent: MenuApplinkProcessor | None = None,
    ) -> None:
        self.element = element
        self.context = context
        self.parent = parent
        self._load_desktop_file = load_desktop_file
        self.only_unallocated = element.get("onlyUnallocated", "") == "1"
        self.app_file_infos: dict[str, AppFileInfo] = {}
        self.selected: list[AppFileInfo] = []
        self.rules = MenuRules()
        self.children = [
            MenuApplinkProcessor(menu, context, load_desktop_file, self)
            for menu in child_elements(element, "Menu")
        ]

    def run(self) -> None:
        """Select entries for every menu, then create their <AppLink> elements."""
        self._select()
        self._create_app_links()

    def _select(self) -> None:
        self._fill_app_file_infos()
        self._create_rules()

        for file_id, info in self.app_file_infos.items():
            entry = info.desktop_file
            if self.rules.check_include(file_id, entry):
                if not self.only_unallocated:
                    info.allocated = True
                if not self.rules.check_exclude(file_id, entry):
                    self.selected.append(info)

        for child in self.children:
            child._select()

    def _create_app_links(self) -> None:
        environments = self.context.environments
        for info in self.selected:
            if self.only_unallocated and info.allocated:
                continue

            entry = info.desktop_file
            if not any(entry.is_shown(env) for env in environments):
                continue

            SubElement(
                self.element,
                "AppLink",
                {
                    "id": info.id,
                    "title": _to_text(entry.localized_value("Name")),
                    "comment": _to_text(entry.localized_value("Comment")),
                    "genericName": _to_text(entry.localized_value("GenericName")),
                    "exec": _to_text(entry.value("Exec")),
                    "terminal": _bool_attribute(entry.value("Terminal")),
                    "startupNoify": _bool_attribute(entry.value("StartupNotify")),
                    "path": _to_text(entry.value("Path")),
                    "icon": _to_text(entry.value("Icon")),
                    "desktopFile": entry.file_name,
                },
            )

        for child in self.children:
            child._create_app_links()

    def _fill_app_file_infos(self) -> None:
        # Later <AppDir>s are read first, so entries of earlier ones replace them.
        for app_dir in reversed_child_elements(self.element, "AppDir"):
            self._find_desktop_files(element_text(app_dir), "")
            self.element.remove(app_dir)

        # Entries of the ancestor menus are added on top of this menu's own.
        if self.parent is not None:
            self.app_file_infos.update(self.parent.app_file_infos)

    def _find_desktop_files(self, dir_name: str, prefix: str) -> None:
        self.context.add_watch_path(os.path.abspath(dir_name))
        try:
            with os.scandir(dir_name) as scan:
                entries = sorted(
                    (e for e in scan if not e.name.startswith(".")),
                    key=lambda e: e.name.lower(),
                )
        except OSError:
            return

        for entry in entries:
            if entry.name.lower().endswith(".desktop") and entry.is_file():
                desktop_file = self._load_desktop_file(os.path.realpath(entry.path))
                if desktop_file is not None:
                    file_id = prefix + entry.name
                    self.app_file_infos[file_id] = AppFileInfo(desktop_file, file_id)

        for entry in entries:
            if entry.is_dir():
                sub_dir = os.path.realpath(entry.path)
                if sub_dir != dir_name:
                    self._find_desktop_files(sub_dir, f"{prefix}{entry.name}-")

    def _create_rules(self) -> None:
        for child in child_elements(self.element):
            if child.tag == "Include":
                self.rules.add_include(child)
                self.element.remove(child)
            elif child.tag == "Exclude":
                self.rules.add_exclude(child)
                self.element.remove(child)


def check_try_exec(prog_name: str) -> bool:
    """Return True if *prog_name* is an executable path or found on PATH."""
    if prog_name.startswith(os.sep):
        return os.access(prog_name, os.X_OK)

    for directory in os.environ.get("PATH", "").split(":"):
        if os.access(os.path.join(directory, prog_name), os.X_OK):
            return True
    return False