# xdgmenu

Building blocks for reading and processing menu files that follow the
freedesktop.org Desktop Menu Specification. Everything works on
`xml.etree.ElementTree` elements and uses only the standard library.

## Modules

### `xdgmenu.reader`

`MenuReader(context, parent_reader=None)` loads a `.menu` file with
`load(file_name, base_dir="")`. The method returns the root element. It
stores the element as `reader.xml`, and the canonical path as
`reader.file_name`. While loading, it:

- inserts a `<FileInfo file="...">` element at the start of the root. For
  merged files, the element also gets a `parent` attribute.
- resolves `<MergeFile>` (including `type="parent"`), `<MergeDir>` and
  `<DefaultMergeDirs>`, working from the last element to the first. In a
  merged file, the root's `<Name>` is dropped and a file is merged only once.
- replaces `<AppDir>`, `<DefaultAppDirs>`, `<DirectoryDir>` and
  `<DefaultDirectoryDirs>` with elements that hold canonical directory paths.
  Only directories that exist are kept. The default directories come from
  `XDG_DATA_HOME` and `XDG_DATA_DIRS`.
- records every file it reads through `MenuContext.add_watch_path`.

`load` raises `MenuLoadError` in these cases:

- the file name is empty;
- a merge would load a file again in the same merge branch;
- the file cannot be opened;
- the XML does not parse.

The message is also kept in `reader.error_string`. A merged file that fails
to load is skipped.

### `xdgmenu.rules`

This module evaluates `<Include>` and `<Exclude>` matching rules:

- `OrRule`, `AndRule`, `NotRule`, `FilenameRule`, `CategoryRule` and
  `AllRule` are subclasses of `MenuRule`.
- `build_rule(element)` builds the rule for one element. For an unknown tag
  it logs a warning and returns `None`.
- `MenuRules` collects include and exclude rules with `add_include` and
  `add_exclude`, and tests them with `check_include` and `check_exclude`.

An empty `<And>` never matches. Rules look at a desktop entry only through
its `categories`.

### `xdgmenu.applink`

`MenuApplinkProcessor(element, context, load_desktop_file)` works on a
`<Menu>` tree and its sub-menus. `run()` does the following:

1. It scans each `<AppDir>` recursively for `*.desktop` files. A file in a
   sub-directory gets an id prefixed with `subdir-`.
2. It adds the entries of ancestor menus, then applies the menu's
   `<Include>` and `<Exclude>` rules. It honours `onlyUnallocated="1"`.
3. It appends one `<AppLink>` element for each selected entry that is shown
   in at least one of `context.environments`. If that list is empty, no
   links are created.

The `<AppDir>`, `<Include>` and `<Exclude>` elements are removed as they are
consumed.

`load_desktop_file` is a callable that takes a path. It returns an object
matching the `DesktopFile` protocol, or `None` for an invalid file. The
object needs:

- `file_name`
- `categories`
- `is_shown(environment)`
- `value(key)`
- `localized_value(key)`

`AppFileInfo` pairs a loaded entry with its id and allocation flag.
`check_try_exec(prog_name)` tells whether a program is executable, given as
an absolute path or found on `PATH`.

### `xdgmenu.layout`

`MenuLayoutProcessor(element).run()` reorders a menu tree (with its
`<AppLink>` elements) according to `<Layout>` and `<DefaultLayout>`. It
handles:

- `<Filename>`, `<Menuname>`, `<Separator>` and `<Merge type="menus|files|all">`;
- inlining, inline headers and aliases;
- `show_empty` and `inline_limit`.

Merged items are sorted by their `title`. `LayoutParams` holds the layout
attributes. Its defaults are `show_empty=False`, `inline=False`,
`inline_limit=4`, `inline_header=True` and `inline_alias=False`.
`find_last_element_by_tag` and `childs_count` are the helpers it uses.

### `xdgmenu.context` and `xdgmenu.xmlhelper`

`MenuContext` holds the state shared by the stages:

- `menu_file_name`
- `environments`
- `log_dir`
- `error_string`
- `outdated`
- `watch_paths`

`add_watch_path(path)` returns `True` when the path is new. The module also
defines `REBUILD_DELAY_MS`.

`xmlhelper` provides:

- `child_elements` and `reversed_child_elements`, which iterate over a
  snapshot, so elements may be moved during iteration;
- `first_child_element` and `last_child_element`;
- `element_text`;
- `describe_element`.

## Example

```python
from xdgmenu.applink import MenuApplinkProcessor
from xdgmenu.context import MenuContext
from xdgmenu.layout import MenuLayoutProcessor
from xdgmenu.reader import MenuReader

context = MenuContext(menu_file_name="applications.menu", environments=["LXQt"])
root = MenuReader(context).load("/etc/xdg/menus/applications.menu")
MenuApplinkProcessor(root, context, load_desktop_file).run()
MenuLayoutProcessor(root).run()
```

Here `load_desktop_file` is your own function that parses a `.desktop` file.

## What it does not do

- It does not parse `.desktop` or `.directory` files. The caller supplies the
  desktop-file loader.
- No single object runs all stages for you.
- It does not simplify, move or delete menus (`<Move>`, `<Deleted>`), remove
  empty menus, or tidy separators.
- It records paths to watch but does not watch them or rebuild the menu.
- It provides no widgets, icons, MIME associations and no command-line tool.

## Installation

```
pip install .
pip install .[test]   # with pytest
```

## Running the tests

```
pytest
```