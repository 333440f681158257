from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import pytest

from liquidrods import Config, DictLoader, load, parse
from liquidrods.accessors import clear_accessor_cache


@pytest.fixture(autouse=True)
def _fresh_accessor_cache():
    # кэш стратегий общий на процесс: тесты не должны видеть чужие записи
    clear_accessor_cache()
    yield
    clear_accessor_cache()


@pytest.fixture
def config() -> Config:
    """Конфигурация со встроенными тегами и пустым загрузчиком в памяти."""
    return Config(loader=DictLoader({}))


@pytest.fixture
def dict_config() -> Callable[..., Config]:
    """Фабрика конфигураций с шаблонами в памяти."""
    def _make(**templates: str) -> Config:
        return Config(loader=DictLoader(templates))
    return _make


def render(source: str, model: Any = None, config: Optional[Config] = None) -> str:
    """Парсит, компонует и рендерит шаблон в строку."""
    cfg = config if config is not None else Config(loader=DictLoader({}))
    return parse(source, cfg).render_to_string(model)


def render_named(name: str, templates: Dict[str, str], model: Any = None) -> str:
    """Загружает шаблон name из набора templates и рендерит его."""
    return load(name, Config(loader=DictLoader(templates))).render_to_string(model)


__all__ = ["render", "render_named"]
