import os
import stat
from dataclasses import dataclass, field
from xml.etree import ElementTree

import pytest

from xdgmenu.applink import AppFileInfo, MenuApplinkProcessor, check_try_exec
from xdgmenu.context import MenuContext


@dataclass
class FakeEntry:
    file_name: str
    categories: list = field(default_factory=list)
    values: dict = field(default_factory=dict)
    shown_in: tuple = ("LXQt",)

    def is_shown(self, environment):
        return environment in self.shown_in

    def value(self, key):
        return self.values.get(key)

    def localized_value(self, key):
        return self.values.get(key)


def make_loader(specs):
    def load(path):
        spec = specs.get(os.path.basename(path))
        if spec is None:
            return None
        return FakeEntry(file_name=path, **spec)

    return load


def write_files(directory, names):
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text("[Desktop Entry]\n")


def app_links(element):
    return [e for e in element if e.tag == "AppLink"]


def run(xml, specs, environments=("LXQt",)):
    root = ElementTree.fromstring(xml)
    context = MenuContext(environments=list(environments))
    MenuApplinkProcessor(root, context, make_loader(specs)).run()
    return root, context


def test_category_include_creates_app_link(tmp_path):
    write_files(tmp_path, ["edit.desktop", "game.desktop"])
    specs = {
        "edit.desktop": {
            "categories": ["Utility"],
            "values": {"Name": "Editor", "Exec": "edit %f", "Terminal": "false",
                       "StartupNotify": "true", "Icon": "accessories"},
        },
        "game.desktop": {"categories": ["Game"]},
    }
    xml = (f"<Menu><AppDir>{tmp_path}</AppDir>"
           "<Include><Category>Utility</Category></Include></Menu>")
    root, _ = run(xml, specs)

    links = app_links(root)
    assert [link.get("id") for link in links] == ["edit.desktop"]
    link = links[0]
    assert link.get("title") == "Editor"
    assert link.get("exec") == "edit %f"
    assert link.get("icon") == "accessories"
    assert link.get("terminal") == "0"
    assert link.get("startupNoify") == "1"
    assert link.get("desktopFile") == os.path.realpath(tmp_path / "edit.desktop")
    assert root.find("AppDir") is None
    assert root.find("Include") is None


def test_exclude_removes_matching_entry(tmp_path):
    write_files(tmp_path, ["a.desktop", "b.desktop"])
    specs = {"a.desktop": {}, "b.desktop": {}}
    xml = (f"<Menu><AppDir>{tmp_path}</AppDir><Include><All/></Include>"
           "<Exclude><Filename>a.desktop</Filename></Exclude></Menu>")
    root, _ = run(xml, specs)
    assert [link.get("id") for link in app_links(root)] == ["b.desktop"]
    assert root.find("Exclude") is None


def test_entries_not_shown_in_environment_are_skipped(tmp_path):
    write_files(tmp_path, ["a.desktop", "b.desktop"])
    specs = {"a.desktop": {"shown_in": ("GNOME",)}, "b.desktop": {}}
    xml = f"<Menu><AppDir>{tmp_path}</AppDir><Include><All/></Include></Menu>"
    root, _ = run(xml, specs)
    assert [link.get("id") for link in app_links(root)] == ["b.desktop"]


def test_no_environments_shows_nothing(tmp_path):
    write_files(tmp_path, ["a.desktop"])
    xml = f"<Menu><AppDir>{tmp_path}</AppDir><Include><All/></Include></Menu>"
    root, _ = run(xml, {"a.desktop": {}}, environments=())
    assert app_links(root) == []


def test_invalid_desktop_files_are_ignored(tmp_path):
    write_files(tmp_path, ["good.desktop", "bad.desktop", "note.txt"])
    xml = f"<Menu><AppDir>{tmp_path}</AppDir><Include><All/></Include></Menu>"
    root, _ = run(xml, {"good.desktop": {}, "note.txt": {}})
    assert [link.get("id") for link in app_links(root)] == ["good.desktop"]


def test_subdirectory_entries_get_prefixed_ids(tmp_path):
    write_files(tmp_path, ["top.desktop"])
    write_files(tmp_path / "kde", ["konsole.desktop"])
    specs = {"top.desktop": {}, "konsole.desktop": {}}
    xml = f"<Menu><AppDir>{tmp_path}</AppDir><Include><All/></Include></Menu>"
    root, context = run(xml, specs)
    ids = sorted(link.get("id") for link in app_links(root))
    assert ids == ["kde-konsole.desktop", "top.desktop"]
    assert os.path.abspath(str(tmp_path)) in context.watch_paths
    assert os.path.realpath(tmp_path / "kde") in context.watch_paths


def test_child_menu_uses_parent_app_dirs(tmp_path):
    write_files(tmp_path, ["a.desktop"])
    specs = {"a.desktop": {"categories": ["Office"]}}
    xml = (f"<Menu><AppDir>{tmp_path}</AppDir>"
           "<Menu><Name>Office</Name><Include><Category>Office</Category></Include></Menu>"
           "</Menu>")
    root, _ = run(xml, specs)
    child = root.find("Menu")
    assert app_links(root) == []
    assert [link.get("id") for link in app_links(child)] == ["a.desktop"]


def test_only_unallocated_skips_allocated_entries(tmp_path):
    write_files(tmp_path, ["a.desktop", "b.desktop"])
    specs = {"a.desktop": {}, "b.desktop": {}}
    xml = (f"<Menu><AppDir>{tmp_path}</AppDir>"
           "<Menu><Name>Used</Name><Include><Filename>a.desktop</Filename></Include></Menu>"
           "<Menu onlyUnallocated=\"1\"><Name>Other</Name><Include><All/></Include></Menu>"
           "</Menu>")
    root, _ = run(xml, specs)
    used, other = root.findall("Menu")
    assert [link.get("id") for link in app_links(used)] == ["a.desktop"]
    assert [link.get("id") for link in app_links(other)] == ["b.desktop"]


def test_app_file_info_starts_unallocated():
    entry = FakeEntry(file_name="/x/a.desktop")
    info = AppFileInfo(entry, "a.desktop")
    assert info.allocated is False
    assert info.id == "a.desktop"
    assert info.desktop_file is entry


def test_check_try_exec_absolute_path(tmp_path):
    prog = tmp_path / "tool"
    prog.write_text("#!/bin/sh\n")
    prog.chmod(prog.stat().st_mode | stat.S_IXUSR)
    assert check_try_exec(str(prog)) is True
    assert check_try_exec(str(tmp_path / "missing")) is False


def test_check_try_exec_searches_path(tmp_path, monkeypatch):
    prog = tmp_path / "mytool"
    prog.write_text("#!/bin/sh\n")
    prog.chmod(prog.stat().st_mode | stat.S_IXUSR)
    monkeypatch.setenv("PATH", f"/nonexistent:{tmp_path}")
    assert check_try_exec("mytool") is True
    assert check_try_exec("othertool") is False


@pytest.mark.parametrize("mode", [0o644])
def test_check_try_exec_requires_execute_permission(tmp_path, mode):
    prog = tmp_path / "plain"
    prog.write_text("data")
    prog.chmod(mode)
    if os.access(prog, os.X_OK):
        expected = True
    else:
        expected = False
    assert check_try_exec(str(prog)) is expected