"""Applies <Layout> and <DefaultLayout> rules to a built menu tree."""

from __future__ import annotations

from dataclasses import dataclass, replace
from xml.etree.ElementTree import Element, SubElement

from .xmlhelper import child_elements

__all__ = [
    "LayoutParams",
    "MenuLayoutProcessor",
    "find_last_element_by_tag",
    "childs_count",
]

_COUNTED_TAGS = frozenset({"AppLink", "Menu", "Separator"})

_BOOL_ATTRIBUTES = {
    "show_empty": "show_empty",
    "inline": "inline",
    "inline_header": "inline_header",
    "inline_alias": "inline_alias",
}


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def find_last_element_by_tag(element: Element, tag_name: str) -> Element | None:
    """Return the last descendant of *element* named *tag_name*, or None."""
    found = None
    for candidate in element.iter(tag_name):
        if candidate is not element:
            found = candidate
    return found


def childs_count(element: Element) -> int:
    """Count the AppLink, Menu and Separator children of *element*."""
    return sum(1 for child in child_elements(element) if child.tag in _COUNTED_TAGS)


@dataclass(frozen=True)
class LayoutParams:
    """Attributes that control how a sub-menu is shown or inlined."""

    show_empty: bool = False
    inline: bool = False
    inline_limit: int = 4
    inline_header: bool = True
    inline_alias: bool = False

    def updated_from(self, element: Element) -> LayoutParams:
        """Return a copy overridden by the layout attributes present on *element*."""
        attrib = element.attrib
        changes: dict[str, object] = {
            field: attrib[name] == "true"
            for name, field in _BOOL_ATTRIBUTES.items()
            if name in attrib
        }
        if "inline_limit" in attrib:
            changes["inline_limit"] = _to_int(attrib["inline_limit"])
        return replace(self, **changes)


def _create_default_layout() -> Element:
    layout = Element("DefaultLayout")
    SubElement(layout, "Merge", {"type": "menus"})
    SubElement(layout, "Merge", {"type": "files"})
    return layout


def _is_child(parent: Element, element: Element) -> bool:
    return any(child is element for child in parent)


def _has_child_nodes(element: Element) -> bool:
    return len(element) > 0 or bool(element.text and element.text.strip())


class MenuLayoutProcessor:
    """Reorders the children of a <Menu> element according to its layout."""

    def __init__(
        self, element: Element, parent: MenuLayoutProcessor | None = None
    ) -> None:
        self.element = element
        own_default = find_last_element_by_tag(element, "DefaultLayout")

        if parent is None:
            params = LayoutParams()
            if own_default is None:
                own_default = _create_default_layout()
                element.append(own_default)
            self.default_layout = own_default
        else:
            params = parent.default_params
            self.default_layout = (
                own_default if own_default is not None else parent.default_layout
            )

        self.default_params = params.updated_from(self.default_layout)

        # A missing or empty <Layout> means the default layout is used.
        layout = find_last_element_by_tag(element, "Layout")
        if layout is None or not _has_child_nodes(layout):
            layout = self.default_layout
        self.layout = layout
        self._result = Element("Result")

    def run(self) -> None:
        """Lay out this menu and, first, all of its sub-menus."""
        element = self.element
        self._result = SubElement(element, "Result")

        for menu in child_elements(element, "Menu"):
            MenuLayoutProcessor(menu, self).run()

        for item in child_elements(self.layout):
            if item.tag == "Filename":
                self._process_filename(item)
            elif item.tag == "Menuname":
                self._process_menuname(item)
            elif item.tag == "Separator":
                SubElement(self._result, "Separator")
            elif item.tag == "Merge":
                SubElement(self._result, "Merge", {"type": item.get("type", "")})

        for merge in child_elements(self._result, "Merge"):
            self._process_merge(merge)

        for child in child_elements(self._result):
            self._result.remove(child)
            element.append(child)

        element.remove(self._result)
        if _is_child(element, self.layout):
            element.remove(self.layout)
        if _is_child(element, self.default_layout):
            element.remove(self.default_layout)

    def _search_element(self, tag_name: str, attribute: str, value: str) -> Element | None:
        for child in child_elements(self.element, tag_name):
            if child.get(attribute, "") == value:
                return child
        return None

    def _take(self, child: Element) -> None:
        self.element.remove(child)
        self._result.append(child)

    def _process_filename(self, item: Element) -> None:
        app_link = self._search_element("AppLink", "id", item.text or "")
        if app_link is not None:
            self._take(app_link)

    def _process_menuname(self, item: Element) -> None:
        menu = self._search_element("Menu", "name", item.text or "")
        if menu is None:
            return

        params = self.default_params.updated_from(item)
        count = childs_count(menu)

        if count == 0:
            if params.show_empty:
                menu.set("keep", "true")
                self._take(menu)
            return

        do_inline = params.inline and (
            not params.inline_limit or params.inline_limit > count
        )
        do_alias = params.inline_alias and do_inline and count == 1
        do_header = params.inline_header and do_inline and not do_alias

        if not do_inline:
            self._take(menu)
            return

        if do_header:
            SubElement(self._result, "Header", dict(menu.attrib))

        if do_alias and not (menu.text and menu.text.strip()) and len(menu):
            first = menu[0]
            if isinstance(first.tag, str):
                first.set("title", menu.get("title", ""))

        for child in child_elements(menu):
            menu.remove(child)
            self._result.append(child)

    def _process_merge(self, merge: Element) -> None:
        merge_type = merge.get("type", "")
        wanted = set()
        if merge_type in ("menus", "all"):
            wanted.add("Menu")
        if merge_type in ("files", "all"):
            wanted.add("AppLink")

        by_title: dict[str, Element] = {}
        for child in child_elements(self.element):
            if child.tag in wanted:
                by_title[child.get("title", "")] = child

        index = next(i for i, child in enumerate(self._result) if child is merge)
        for title in sorted(by_title):
            child = by_title[title]
            self.element.remove(child)
            self._result.insert(index, child)
            index += 1

        self._result.remove(merge)