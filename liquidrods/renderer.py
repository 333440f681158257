"""
Рендерер AST.

Единая функция диспетчеризации по типу узла: текст выводится как есть,
переменные разрешаются в контексте и экранируются, блоки передаются
зарегистрированным обработчикам.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, TextIO

from .context import Context
from .errors import RenderError
from .nodes import BlockNode, TemplateNode, TextNode, VariableNode

if TYPE_CHECKING:
    from .config import Config


def render_node(node: TemplateNode, context: Context, config: Config, out: TextIO) -> None:
    """
    Рендерит один узел AST в выходной поток.

    Raises:
        RenderError: Для тега не зарегистрирован обработчик
    """
    if isinstance(node, TextNode):
        out.write(node.value)
    elif isinstance(node, VariableNode):
        value = context.resolve(node.name)
        if value is not None:
            text = to_display(value)
            out.write(text if node.raw else config.escaper(text))
    elif isinstance(node, BlockNode):
        handler = config.handlers.get(node.name)
        if handler is None:
            raise RenderError(f"No handler for block '{node.name}' (at {node.origin})")
        handler.render(node, context, config, out)
    else:
        raise RenderError(f"Unsupported node type: {type(node).__name__}")


def render_nodes(nodes: Iterable[TemplateNode], context: Context, config: Config, out: TextIO) -> None:
    """Рендерит последовательность узлов через рендерер конфигурации."""
    for node in nodes:
        config.renderer(node, context, config, out)


def to_display(value: Any) -> str:
    """Строковое представление значения для вывода."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["render_node", "render_nodes", "to_display"]
