"""
Обработчики тегов.

Каждый тег {% name %} диспетчеризуется в зарегистрированный обработчик.
Обработчик сообщает парсеру, нужен ли тегу закрывающий {% end %}, и сам
решает, как и с каким контекстом рендерить дочерние узлы.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Dict, Iterator, TextIO

from .accessors import NOT_FOUND
from .context import Context, Entry
from .errors import RenderError
from .nodes import BlockNode, is_block

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)


class BlockHandler(ABC):
    """
    Базовый интерфейс обработчика тега.
    """

    def wants_close_tag(self) -> bool:
        """Требует ли тег парного {% end %}. По умолчанию - да."""
        return True

    @abstractmethod
    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        """
        Рендерит блок в выходной поток.

        Args:
            block: Узел тега с аргументом и дочерними узлами
            context: Текущий контекст разрешения переменных
            config: Конфигурация (реестр обработчиков, экранирование, рендерер)
            out: Приёмник вывода
        """
        pass


def render_children(block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
    """Рендерит все дочерние узлы блока через рендерер конфигурации."""
    for child in block.children:
        config.renderer(child, context, config, out)


def is_truthy(value: Any) -> bool:
    """
    Истинность значения для {% if %}.

    None - ложь, bool - само значение, список или множество - непустота.
    Отображения и всё остальное - истина.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, Collection) and not isinstance(value, (str, bytes, Mapping)):
        return len(value) > 0
    return True


def _required_arg(block: BlockNode) -> str:
    if block.arg is None:
        raise RenderError(f"Tag '{block.name}' requires an argument (at {block.origin})")
    return block.arg


class IfHandler(BlockHandler):
    """
    {% if path %}...{% else %}...{% end %} и инвертированный {% ifnot path %}.
    """

    def __init__(self, inverted: bool = False):
        self.inverted = inverted

    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        active = is_truthy(context.resolve(_required_arg(block)))
        if self.inverted:
            active = not active

        for child in block.children:
            if is_block(child, "else"):
                if active:
                    return
                active = True
            elif active:
                config.renderer(child, context, config, out)


class ElseHandler(BlockHandler):
    """Структурный маркер {% else %}; обрабатывается родительским if."""

    def wants_close_tag(self) -> bool:
        return False

    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        pass


class ForHandler(BlockHandler):
    """
    {% for path %}...{% end %}

    Итерирует последовательность, отображение (пары Entry) или одиночное
    значение. В теле доступны синтетические переменные #, ##, #first, #last.
    """

    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        value = context.resolve(_required_arg(block))
        if value is None:
            return

        iterator = _iterate(value)
        index = 0
        current = next(iterator, NOT_FOUND)
        while current is not NOT_FOUND:
            following = next(iterator, NOT_FOUND)
            sub_context = context.child(current, _loop_extension(index, following is NOT_FOUND))
            render_children(block, sub_context, config, out)
            current = following
            index += 1


def _iterate(value: Any) -> Iterator[Any]:
    if isinstance(value, Mapping):
        return (Entry(key, item) for key, item in value.items())
    if isinstance(value, (str, bytes)):
        return iter((value,))
    if isinstance(value, Iterable):
        return iter(value)
    return iter((value,))


def _loop_extension(index: int, last: bool):
    def extension(key: str) -> Any:
        if key == "#":
            return index
        if key == "##":
            return index + 1
        if key == "#first":
            return index == 0
        if key == "#last":
            return last
        return NOT_FOUND
    return extension


class BlockTagHandler(BlockHandler):
    """
    {% block name %}...{% end %}

    Рендерит своё тело в неизменённом контексте. Используется для
    непереопределённых блоков родителя и явно вложенных блоков.
    """

    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        render_children(block, context, config, out)


class CompositionMarkerHandler(BlockHandler):
    """
    Маркеры include / extends / super, полностью разрешаемые композицией.

    На этапе рендеринга ничего не выводят.
    """

    def __init__(self, warn: bool = False):
        self.warn = warn

    def wants_close_tag(self) -> bool:
        return False

    def render(self, block: BlockNode, context: Context, config: Config, out: TextIO) -> None:
        if self.warn:
            logger.warning(
                f"Unresolved '{block.name} {block.arg or ''}' at {block.origin} reached the renderer; ignored"
            )


def default_handlers() -> Dict[str, BlockHandler]:
    """Создаёт новый реестр встроенных обработчиков."""
    return {
        "if": IfHandler(),
        "ifnot": IfHandler(inverted=True),
        "else": ElseHandler(),
        "for": ForHandler(),
        "block": BlockTagHandler(),
        "include": CompositionMarkerHandler(warn=True),
        "extends": CompositionMarkerHandler(warn=True),
        "super": CompositionMarkerHandler(),
    }


__all__ = [
    "BlockHandler",
    "IfHandler",
    "ElseHandler",
    "ForHandler",
    "BlockTagHandler",
    "CompositionMarkerHandler",
    "default_handlers",
    "render_children",
    "is_truthy",
]
