"""Building blocks for an interactive fuzzy finder: text items, tokenizing, utilities and terminal UI parts."""

__version__ = "0.1.0"