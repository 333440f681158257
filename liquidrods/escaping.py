"""
Escapers applied to {{ }} variable output.

An escaper is any callable ``(text: str) -> str``. {{{ }}} output bypasses it.
"""

from __future__ import annotations

import html
from typing import Callable, Dict

Escaper = Callable[[str], str]


def html_escape(text: str) -> str:
    """Escapes & < > " ' as HTML entities."""
    return html.escape(text, quote=True)


def no_escape(text: str) -> str:
    return text


ESCAPERS: Dict[str, Escaper] = {
    "html": html_escape,
    "none": no_escape,
}


__all__ = ["Escaper", "html_escape", "no_escape", "ESCAPERS"]
