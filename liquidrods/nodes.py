"""
AST-узлы шаблона.

Определяет неизменяемую иерархию узлов: текст, переменная и блок (тег
с аргументом и телом). Каждый узел хранит позицию в исходнике, которая
используется только для диагностики.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Origin:
    """Позиция узла в исходном шаблоне."""
    filename: str
    row: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.row}:{self.column}"


UNKNOWN_ORIGIN = Origin("<unknown>", 0, 0)


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть.
    """
    value: str
    origin: Origin = field(default=UNKNOWN_ORIGIN, compare=False)


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """
    Подстановка переменной {{path}} или {{{path}}}.

    Сырые (raw) переменные выводятся без экранирования.
    """
    name: str
    raw: bool = False
    origin: Origin = field(default=UNKNOWN_ORIGIN, compare=False)


@dataclass(frozen=True)
class BlockNode(TemplateNode):
    """
    Экземпляр тега {% name arg %}...{% end %}.

    Для тегов без закрывающей пары children пуст. При композиции список
    детей заменяется целиком через dataclasses.replace, но никогда не
    мутируется на месте.
    """
    name: str
    arg: Optional[str] = None
    children: Tuple[TemplateNode, ...] = ()
    origin: Origin = field(default=UNKNOWN_ORIGIN, compare=False)


def is_block(node: TemplateNode, name: str) -> bool:
    """Проверяет, что узел является блоком с указанным именем."""
    return isinstance(node, BlockNode) and node.name == name


# Алиас для списка узлов (AST)
TemplateAST = List[TemplateNode]


__all__ = [
    "Origin",
    "UNKNOWN_ORIGIN",
    "TemplateNode",
    "TextNode",
    "VariableNode",
    "BlockNode",
    "TemplateAST",
    "is_block",
]
