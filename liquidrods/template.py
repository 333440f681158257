"""
Скомпонованный шаблон и точки входа API.

Конвейер: исходный текст -> лексер -> парсер -> композиция -> Template.
Template неизменяем и может рендериться параллельно из нескольких
потоков; для каждого вызова render создаётся свежая цепочка контекстов.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Optional, Sequence, TextIO, Tuple, Union

from .composer import compose, load_composed
from .config import Config
from .context import Context
from .nodes import TemplateNode
from .parser import DEFAULT_FILENAME, parse_nodes
from .renderer import render_nodes

logger = logging.getLogger(__name__)


class Template:
    """
    Уже скомпонованная последовательность корневых узлов, связанная с конфигурацией.
    """

    def __init__(self, nodes: Sequence[TemplateNode], config: Config, name: str = DEFAULT_FILENAME):
        self._nodes: Tuple[TemplateNode, ...] = tuple(nodes)
        self.config = config
        self.name = name

    @property
    def nodes(self) -> Tuple[TemplateNode, ...]:
        return self._nodes

    def render(self, model: Any, out: TextIO) -> None:
        """
        Рендерит шаблон в приёмник вывода.

        При ошибке уже записанный вывод остаётся в приёмнике.

        Args:
            model: Данные модели (значение "." корневого контекста и хелпер)
            out: Любой объект с методом write(str)
        """
        render_nodes(self._nodes, Context(model), self.config, out)

    def render_to_string(self, model: Any) -> str:
        """Рендерит шаблон и возвращает результат строкой."""
        buffer = io.StringIO()
        self.render(model, buffer)
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"Template({self.name!r}, nodes={len(self._nodes)})"


def parse(source: Union[str, TextIO], config: Optional[Config] = None, name: str = DEFAULT_FILENAME) -> Template:
    """
    Парсит и компонует шаблон из текста или потока.

    Args:
        source: Текст шаблона или текстовый поток
        config: Конфигурация (по умолчанию - новая Config())
        name: Имя шаблона для диагностики

    Returns:
        Скомпонованный шаблон

    Raises:
        ParseError: Синтаксическая ошибка
        CompositionError: Ошибка включения/наследования
        TemplateNotFoundError: Включаемый или родительский шаблон не найден
    """
    config = config if config is not None else Config()
    nodes = parse_nodes(source, config.handlers, filename=name, max_depth=config.max_depth)
    return Template(compose(nodes, config), config, name)


def load(name: str, config: Optional[Config] = None) -> Template:
    """
    Загружает шаблон по имени через загрузчик конфигурации.
    """
    config = config if config is not None else Config()
    template = Template(load_composed(name, config), config, name)
    logger.debug(f"Loaded {template!r}")
    return template


__all__ = ["Template", "parse", "load"]
