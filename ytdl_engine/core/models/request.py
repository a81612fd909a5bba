"""
Request model — the options of one yt-dlp invocation.

A request is an ordered, mutable set of command-line options plus the
URLs to act on.  ``build_command()`` turns it into the argument list
that follows the interpreter and script paths.

Flags keep their insertion order.  ``add_option`` never deduplicates:
adding the same flag twice yields it twice on the command line.
``set_option`` is the replacing variant.
"""

from __future__ import annotations

import copy
from typing import Iterable

OptionValue = str | int | float | None


def _as_text(value: OptionValue) -> str | None:
    if value is None:
        return None
    return str(value)


class YoutubeDLRequest:
    """URLs plus an ordered ``flag → values`` mapping."""

    def __init__(self, urls: str | Iterable[str] | None = None):
        if urls is None:
            self.urls: list[str] = []
        elif isinstance(urls, str):
            self.urls = [urls]
        else:
            self.urls = list(urls)
        self._options: dict[str, list[str | None]] = {}
        self._commands: list[str] = []

    # ── Mutation ────────────────────────────────────────────────

    def add_option(self, name: str, value: OptionValue = None) -> YoutubeDLRequest:
        """Append a flag (with an optional value)."""
        self._options.setdefault(name, []).append(_as_text(value))
        return self

    def set_option(self, name: str, value: OptionValue = None) -> YoutubeDLRequest:
        """Replace every value of a flag with a single one."""
        self._options.pop(name, None)
        self._options[name] = [_as_text(value)]
        return self

    def remove_option(self, name: str) -> YoutubeDLRequest:
        self._options.pop(name, None)
        return self

    def add_commands(self, commands: Iterable[str]) -> YoutubeDLRequest:
        """Append raw arguments, emitted after the options."""
        self._commands.extend(commands)
        return self

    # ── Queries ─────────────────────────────────────────────────

    def has_option(self, name: str) -> bool:
        return name in self._options

    def get_option(self, name: str) -> str | None:
        """First value given for ``name``, or None."""
        values = self._options.get(name)
        return values[0] if values else None

    def get_arguments(self, name: str) -> list[str | None]:
        return list(self._options.get(name, []))

    @property
    def options(self) -> dict[str, list[str | None]]:
        return {name: list(values) for name, values in self._options.items()}

    def copy(self) -> YoutubeDLRequest:
        return copy.deepcopy(self)

    # ── Command building ────────────────────────────────────────

    def build_command(self) -> list[str]:
        """Arguments in insertion order: options, raw commands, then URLs."""
        command: list[str] = []
        for name, values in self._options.items():
            for value in values:
                command.append(name)
                if value:
                    command.append(value)
        command.extend(self._commands)
        command.extend(self.urls)
        return command

    def __repr__(self) -> str:
        return f"YoutubeDLRequest(urls={self.urls!r}, options={self._options!r})"
