"""Diagnostic output on stderr.

gqlclient is a library, so it never writes to stdout. Diagnostics (cache
hits, retries, rendered cache statistics) go to stderr through a
:class:`OutputManager` holding a Rich console. ``NO_COLOR`` and
``TERM=dumb`` disable colour.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding the quiet/verbose
   flags and the Rich console. Install a configured one with
   :func:`set_output`.
2. Module-level helpers (:func:`debug`, :func:`render_cache_stats`) that
   delegate to the global instance so callers do not need to pass the
   manager around.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputManager:
    """Routes diagnostics to stderr.

    Args:
        no_color: Disable all colour and Rich markup.
        quiet: Suppress rendered tables (cache statistics).
        verbose: Enable debug-level messages.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    def debug(self, message: str) -> None:
        """Print a debug message. Only shown in verbose mode."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape('[debug] ' + message)}[/dim]")

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print a table. Tab-separated when colour is disabled, nothing in quiet mode."""
        if self._quiet:
            return
        if self._no_color:
            if title:
                print(title, file=sys.stderr)
            print("\t".join(headers), file=sys.stderr)
            for row in rows:
                print("\t".join(row), file=sys.stderr)
            sys.stderr.flush()
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for h in headers:
            table.add_column(h)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stderr.print(table)


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager`."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global :class:`OutputManager` (mainly for test isolation)."""
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def debug(message: str) -> None:
    """Print debug message via the global OutputManager."""
    get_output().debug(message)


def render_cache_stats(stats: dict[str, Any], title: Optional[str] = None) -> None:
    """Render a :meth:`~gqlclient.cache.QueryCache.get_stats` snapshot as a table.

    One row per entry (key, hit count, age in seconds); the title carries
    the size, capacity and lifetime of the cache.
    """
    heading = (
        f"{title or 'cache'}: {stats['size']}/{stats['max_size']} entries, "
        f"max age {stats['max_age']:g}s"
    )
    if not stats.get("enabled", True):
        heading += " (disabled)"
    rows = [
        [_shorten(entry["key"]), str(entry["hit_count"]), f"{entry['age']:.1f}"]
        for entry in stats["entries"]
    ]
    get_output().print_table(["key", "hits", "age (s)"], rows, title=heading)


def _shorten(text: str, limit: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
