"""
Liquidrods - шаблонизатор с наследованием шаблонов.

Конвейер: лексер -> парсер -> композиция (include / extends / block / super)
-> рендеринг с разрешением путей через цепочку контекстов.
"""

from __future__ import annotations

from .config import Config
from .context import Context, Entry
from .errors import (
    CompositionError,
    LiquidrodsError,
    NullPathError,
    ParseError,
    PathSyntaxError,
    RenderError,
    TemplateNotFoundError,
)
from .escaping import html_escape, no_escape
from .handlers import BlockHandler, render_children
from .lexer import tokenize
from .loaders import DictLoader, FileSystemLoader, TemplateLoader
from .nodes import BlockNode, TextNode, VariableNode
from .template import Template, load, parse

__all__ = [
    "Config",
    "Context",
    "Entry",
    "Template",
    "parse",
    "load",
    "tokenize",
    "BlockHandler",
    "render_children",
    "TemplateLoader",
    "FileSystemLoader",
    "DictLoader",
    "html_escape",
    "no_escape",
    "TextNode",
    "VariableNode",
    "BlockNode",
    "LiquidrodsError",
    "ParseError",
    "PathSyntaxError",
    "CompositionError",
    "RenderError",
    "NullPathError",
    "TemplateNotFoundError",
]
