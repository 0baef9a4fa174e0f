"""Quoting of entries for the shell that runs commands."""

from __future__ import annotations

import os
import re

_CMD_SPECIAL = re.compile(r'[&|<>()@^%!"]')


def quote_entry(entry: str, shell: str | None = None) -> str:
    """Quote ``entry`` for ``shell`` (by default ``$SHELL``, or ``cmd`` if unset)."""
    if shell is None:
        shell = os.environ.get("SHELL", "")
    if not shell:
        shell = "cmd"

    if "cmd" in shell:
        escaped = entry.replace("\\", "\\\\")
        escaped = '"' + escaped.replace('"', '\\"') + '"'
        # The caret escapes special characters for cmd.
        return _CMD_SPECIAL.sub(lambda m: "^" + m.group(0), escaped)
    if "pwsh" in shell or "powershell" in shell:
        escaped = entry.replace('"', '\\"')
        return "'" + escaped.replace("'", "''") + "'"
    return "'" + entry.replace("'", "'\\''") + "'"