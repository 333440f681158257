"""
Exception taxonomy for liquidrods.

All expected errors that should be displayed to the user as clean messages
(without stack traces) inherit from LiquidrodsError. Parse errors carry the
position of the offending token so the message can point at it with a caret.

Programming errors and bugs should NOT inherit from LiquidrodsError:
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class LiquidrodsError(Exception):
    """
    Base class for all user-facing errors.

    These errors indicate problems the template author can fix:
    malformed templates, invalid inheritance, missing templates, etc.
    """
    pass


class ParseError(LiquidrodsError):
    """Template syntax error with caret-style position information."""

    def __init__(
            self,
            message: str,
            filename: str,
            line: Optional[str],
            row: int,
            column: int,
    ):
        self.message = message
        self.filename = filename
        self.line = line
        self.row = row
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.message} in {self.filename} @ {self.row}:{self.column}"
        if self.line is not None:
            text += f"\n{self.line}\n{' ' * self.column}^"
        return text


class PathSyntaxError(LiquidrodsError):
    """Malformed path expression such as an unterminated quoted segment."""

    def __init__(self, message: str, path: str):
        super().__init__(f"Invalid path '{path}': {message}")
        self.path = path


class CompositionError(LiquidrodsError):
    """Invalid include/extends/block structure."""
    pass


class RenderError(LiquidrodsError):
    """Fatal failure while rendering a composed template."""
    pass


class NullPathError(RenderError):
    """A path tried to access a member of a None intermediate value."""

    def __init__(self, path: str, segment: str):
        super().__init__(
            f"Trying to access the property '{segment}' on a null object (path '{path}')"
        )
        self.path = path
        self.segment = segment


class TemplateNotFoundError(LiquidrodsError):
    """The configured loader could not find the named template."""

    def __init__(self, name: str, searched: str = ""):
        message = f"Template not found: {name}"
        if searched:
            message += f" (searched: {searched})"
        super().__init__(message)
        self.name = name


__all__ = [
    "LiquidrodsError",
    "ParseError",
    "PathSyntaxError",
    "CompositionError",
    "RenderError",
    "NullPathError",
    "TemplateNotFoundError",
]
