[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "finderkit"
version = "0.1.0"
description = "Building blocks for an interactive fuzzy finder: field tokenizing, key decoding, an inline ANSI renderer and text-width utilities"
requires-python = ">=3.10"
keywords = ["fuzzy", "finder", "terminal", "tui", "tokenizer", "ansi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
    "Topic :: Terminals",
]
dependencies = [
    "regex",
    "wcwidth",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["finderkit"]

[tool.pytest.ini_options]
addopts = "-ra"
