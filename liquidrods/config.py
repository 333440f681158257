"""
Конфигурация шаблонизатора.

Config - явное значение, передаваемое во все вызовы парсинга, композиции
и рендеринга (глобального экземпляра по умолчанию нет). Хранит реестр
обработчиков тегов, загрузчик шаблонов, функцию экранирования и точку
входа рендерера. Мутаторы возвращают саму конфигурацию для цепочек
вызовов; во время рендеринга конфигурация считается неизменной.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, TextIO

from .escaping import Escaper, html_escape
from .handlers import BlockHandler, default_handlers
from .loaders import TemplateLoader, classpath_loader
from .parser import DEFAULT_MAX_DEPTH
from .renderer import render_node

if TYPE_CHECKING:
    from .context import Context
    from .nodes import TemplateNode

logger = logging.getLogger(__name__)

Renderer = Callable[["TemplateNode", "Context", "Config", TextIO], None]


class Config:
    """
    Настройки шаблонизатора.
    """

    def __init__(
            self,
            loader: Optional[TemplateLoader] = None,
            escaper: Optional[Escaper] = None,
            renderer: Optional[Renderer] = None,
            handlers: Optional[Mapping[str, BlockHandler]] = None,
            max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """
        Args:
            loader: Загрузчик шаблонов (по умолчанию - поиск по sys.path)
            escaper: Экранирование {{ }} (по умолчанию - HTML)
            renderer: Точка входа рендеринга узла
            handlers: Реестр обработчиков (по умолчанию - встроенные теги)
            max_depth: Максимальная глубина вложенности тегов при парсинге
        """
        self._handlers: Dict[str, BlockHandler] = dict(handlers) if handlers is not None else default_handlers()
        self._loader: TemplateLoader = loader if loader is not None else classpath_loader()
        self._escaper: Escaper = escaper or html_escape
        self._renderer: Renderer = renderer or render_node
        self.max_depth = max_depth

    @property
    def handlers(self) -> Mapping[str, BlockHandler]:
        """Реестр обработчиков (только для чтения)."""
        return MappingProxyType(self._handlers)

    @property
    def loader(self) -> TemplateLoader:
        return self._loader

    @property
    def escaper(self) -> Escaper:
        return self._escaper

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    def register_handler(self, name: str, handler: BlockHandler) -> Config:
        """
        Регистрирует (или переопределяет) обработчик тега.

        Args:
            name: Имя тега
            handler: Обработчик

        Returns:
            Эта же конфигурация
        """
        if name in self._handlers:
            logger.warning(f"Handler for tag '{name}' overwrites existing handler")
        self._handlers[name] = handler
        return self

    def set_loader(self, loader: TemplateLoader) -> Config:
        self._loader = loader
        return self

    def set_escaper(self, escaper: Escaper) -> Config:
        self._escaper = escaper
        return self

    def set_renderer(self, renderer: Renderer) -> Config:
        self._renderer = renderer
        return self

    def copy(self, **overrides: Any) -> Config:
        """
        Создаёт независимую копию с переопределёнными полями.

        Args:
            **overrides: loader, escaper, renderer, handlers, max_depth

        Returns:
            Новая конфигурация с собственным реестром обработчиков
        """
        params: Dict[str, Any] = {
            "loader": self._loader,
            "escaper": self._escaper,
            "renderer": self._renderer,
            "handlers": self._handlers,
            "max_depth": self.max_depth,
        }
        unknown = set(overrides) - set(params)
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        params.update(overrides)
        return Config(**params)

    def __repr__(self) -> str:
        return f"Config(tags={sorted(self._handlers)!r}, loader={self._loader!r})"


__all__ = ["Config", "Renderer"]
