"""Reads a menu file and resolves its merge and directory elements."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from .context import MenuContext
from .xmlhelper import child_elements, element_text, reversed_child_elements

__all__ = ["MenuLoadError", "MenuReader"]


class MenuLoadError(Exception):
    """Raised when a menu file cannot be loaded."""


def _env_path(name: str, default: str) -> str:
    value = os.environ.get(name, "")
    return (value or default).rstrip("/") or "/"


def _env_paths(name: str, default: str) -> list[str]:
    value = os.environ.get(name, "") or default
    return [p.rstrip("/") or "/" for p in value.split(":") if p]


def _config_home() -> str:
    return _env_path("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))


def _config_dirs() -> list[str]:
    return _env_paths("XDG_CONFIG_DIRS", "/etc/xdg")


def _data_home() -> str:
    return _env_path("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))


def _data_dirs() -> list[str]:
    return _env_paths("XDG_DATA_DIRS", "/usr/local/share:/usr/share")


def _resolve(base_dir: str, name: str) -> str:
    return os.path.join(base_dir, name) if base_dir else name


def _insert_before(parent: Element, new: Element, ref: Element) -> None:
    index = next(i for i, child in enumerate(parent) if child is ref)
    parent.insert(index, new)


def _base_name(path: str) -> str:
    return os.path.basename(path).split(".", 1)[0]


class MenuReader:
    """Loads one menu file, merging the files and directories it refers to."""

    def __init__(
        self, context: MenuContext, parent_reader: MenuReader | None = None
    ) -> None:
        self.context = context
        self.parent_reader = parent_reader
        self.file_name = ""
        self.dir_name = ""
        self.error_string = ""
        self.xml: Element | None = None
        self._branch_files: list[str] = (
            list(parent_reader._branch_files) if parent_reader else []
        )

    def _fail(self, message: str) -> MenuLoadError:
        self.error_string = message
        return MenuLoadError(message)

    def load(self, file_name: str, base_dir: str = "") -> Element:
        """Load *file_name* (relative to *base_dir*) and return its root element."""
        if not file_name:
            raise self._fail("Menu file not defined.")

        path = os.path.realpath(_resolve(base_dir, file_name))
        self.file_name = path
        self.dir_name = os.path.dirname(path)

        if path in self._branch_files:
            raise self._fail(f"Recursive loop detected: {path}")
        self._branch_files.append(path)

        try:
            with open(path, "rb") as stream:
                self.context.add_watch_path(path)
                try:
                    tree = ElementTree.parse(stream)
                except ElementTree.ParseError as exc:
                    line, column = exc.position
                    raise self._fail(
                        f"Parse error at line {line}, column {column}:\n{exc}"
                    ) from exc
        except OSError as exc:
            raise self._fail(f"{file_name} not loading: {exc.strerror}") from exc

        root = tree.getroot()
        self.xml = root

        info = Element("FileInfo", {"file": path})
        if self.parent_reader is not None:
            info.set("parent", self.parent_reader.file_name)
        root.insert(0, info)

        self._process_merge_tags(root)
        return root

    # Duplicate merge elements are handled like duplicate <AppDir> elements:
    # the last one wins, so children are processed from last to first.
    def _process_merge_tags(self, element: Element) -> None:
        merged_files: list[str] = []
        for child in reversed_child_elements(element):
            tag = child.tag
            if tag == "MergeFile":
                self._process_merge_file(element, child, merged_files)
            elif tag == "MergeDir":
                self._merge_dir(element_text(child), element, child, merged_files)
            elif tag == "DefaultMergeDirs":
                self._process_default_merge_dirs(element, child, merged_files)
            elif tag == "AppDir":
                self._add_dir_tag(element, child, "AppDir", element_text(child))
            elif tag == "DefaultAppDirs":
                self._add_default_dirs(element, child, "AppDir", "applications")
            elif tag == "DirectoryDir":
                self._add_dir_tag(element, child, "DirectoryDir", element_text(child))
            elif tag == "DefaultDirectoryDirs":
                self._add_default_dirs(
                    element, child, "DirectoryDir", "desktop-directories"
                )
            elif tag == "Menu":
                self._process_merge_tags(child)
                continue
            else:
                continue
            element.remove(child)

    def _process_merge_file(
        self, parent: Element, element: Element, merged_files: list[str]
    ) -> None:
        if element.get("type", "") != "parent":
            self._merge_file(element_text(element), parent, element, merged_files)
            return

        relative = ""
        config_dirs = _config_dirs()
        for config_dir in config_dirs:
            if self.file_name.startswith(config_dir):
                relative = self.file_name[len(config_dir):]
                config_dirs = [d for d in config_dirs if d != config_dir]
                break

        if not relative:
            config_home = _config_home()
            if self.file_name.startswith(config_home):
                relative = self.file_name[len(config_home):]

        if not relative:
            return

        for config_dir in config_dirs:
            candidate = config_dir + relative
            if os.path.exists(candidate):
                self._merge_file(candidate, parent, element, merged_files)
                return

    def _process_default_merge_dirs(
        self, parent: Element, element: Element, merged_files: list[str]
    ) -> None:
        base = _base_name(self.context.menu_file_name)
        base = base[base.rfind("-") + 1:]

        config_home = _config_home()
        for directory in [*_config_dirs(), config_home]:
            self._merge_dir(
                f"{directory}/menus/{base}-merged", parent, element, merged_files
            )

        if base == "applications":
            self._merge_file(
                f"{config_home}/menus/applications-kmenuedit.menu",
                parent,
                element,
                merged_files,
            )

    def _add_default_dirs(
        self, parent: Element, element: Element, tag_name: str, sub_dir: str
    ) -> None:
        for directory in [_data_home(), *_data_dirs()]:
            self._add_dir_tag(parent, element, tag_name, f"{directory}/{sub_dir}/")

    def _add_dir_tag(
        self, parent: Element, previous: Element, tag_name: str, directory: str
    ) -> None:
        path = os.path.join(self.dir_name, directory)
        if os.path.isdir(path):
            new = Element(tag_name)
            new.text = os.path.realpath(path)
            _insert_before(parent, new, previous)

    def _merge_file(
        self,
        file_name: str,
        parent: Element,
        element: Element,
        merged_files: list[str],
    ) -> None:
        path = os.path.join(self.dir_name, file_name)
        if not os.path.exists(path):
            return

        canonical = os.path.realpath(path)
        if canonical in merged_files:
            return
        merged_files.append(canonical)

        reader = MenuReader(self.context, self)
        try:
            root = reader.load(file_name, self.dir_name)
        except MenuLoadError:
            return

        # The <Name> of a merged file's root menu is dropped.
        for child in child_elements(root):
            if child.tag != "Name":
                _insert_before(parent, copy.deepcopy(child), element)

    def _merge_dir(
        self,
        dir_name: str,
        parent: Element,
        element: Element,
        merged_files: list[str],
    ) -> None:
        path = os.path.join(self.dir_name, dir_name)
        if not os.path.isdir(path):
            return

        directory = Path(os.path.realpath(path))
        files = sorted(
            (
                entry
                for entry in directory.glob("*.menu")
                if entry.is_file() and os.access(entry, os.R_OK)
            ),
            key=lambda entry: entry.name.lower(),
        )
        for entry in files:
            self._merge_file(
                os.path.realpath(entry), parent, element, merged_files
            )