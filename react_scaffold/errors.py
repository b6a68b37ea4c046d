"""Exception hierarchy shared by every react-scaffold component."""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for every fatal error raised by react-scaffold.

    ``step`` names the scaffold step that was running when the error
    surfaced (``"generate"``, ``"augment"``, ``"install"``); it stays
    ``None`` when a component is used on its own.
    """

    step: str | None = None
