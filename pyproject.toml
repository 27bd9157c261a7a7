[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xdgmenu"
version = "0.1.0"
description = "Reader and processor for freedesktop.org XDG menu files"
requires-python = ">=3.10"
dependencies = []
keywords = ["xdg", "freedesktop", "menu", "desktop-entry", "applications"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xdgmenu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
