"""
Контекст разрешения переменных.

Context - неизменяемое звено цепочки областей видимости. Каждое звено
хранит ссылку на родителя (только для делегирования поиска), собственные
данные (значение "." / "this") и хелпер - данные корня цепочки, которые
используются для поиска методов-хелперов.

Синтетические переменные (например, метаданные цикла) подключаются не
через наследование, а через функцию-расширение, переданную при создании.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .accessors import NOT_FOUND, accessor_for
from .errors import NullPathError
from .paths import SELF_PATHS, parse_path

# Функция-расширение: имя первого сегмента -> значение или NOT_FOUND
Extension = Callable[[str], Any]


@dataclass(frozen=True)
class Entry:
    """Пара ключ/значение при итерации по отображению."""
    key: Any
    value: Any

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


class Context:
    """
    Звено цепочки контекстов.

    Создаётся на каждый вызов рендеринга и на каждый шаг итерации,
    после создания не изменяется, поэтому может безопасно читаться
    из нескольких потоков.
    """

    __slots__ = ("parent", "data", "helper", "_extension")

    def __init__(self, data: Any, parent: Optional[Context] = None, extension: Optional[Extension] = None):
        """
        Args:
            data: Значение, связанное с этим звеном
            parent: Родительский контекст для делегирования поиска
            extension: Поставщик синтетических переменных для первого сегмента пути
        """
        self.parent = parent
        self.data = data
        self.helper = data if parent is None else parent.helper
        self._extension = extension

    def child(self, data: Any, extension: Optional[Extension] = None) -> Context:
        """Создаёт дочерний контекст, связанный с data."""
        return Context(data, parent=self, extension=extension)

    def extend(self, key: str) -> Any:
        """Синтетическое значение для первого сегмента пути или NOT_FOUND."""
        if self._extension is None:
            return NOT_FOUND
        return self._extension(key)

    def resolve(self, path: str) -> Any:
        """
        Разрешает путь вида a.b.'c.d' в значение.

        Первый сегмент сначала ищется в расширении, затем в данных этого
        звена; если не найден - весь путь целиком делегируется родителю.
        Последующие сегменты ищутся только в результате предыдущего.

        Returns:
            Найденное значение или None

        Raises:
            PathSyntaxError: Некорректный путь
            NullPathError: Обращение к члену None после первого сегмента
        """
        if path in SELF_PATHS:
            return self.data

        segments = parse_path(path)
        if not segments:
            return self.data

        value = self._resolve_first(segments[0])
        if value is NOT_FOUND:
            if self.parent is not None:
                return self.parent.resolve(path)
            return None

        for segment in segments[1:]:
            if segment in SELF_PATHS:
                continue
            if value is None:
                raise NullPathError(path, segment)
            value = resolve_member(value, segment, self.helper)
            if value is NOT_FOUND:
                return None

        return value

    def _resolve_first(self, segment: str) -> Any:
        value = self.extend(segment)
        if value is not NOT_FOUND:
            return value
        if segment in SELF_PATHS:
            return self.data
        if self.data is None:
            return NOT_FOUND
        return resolve_member(self.data, segment, self.helper)

    def __repr__(self) -> str:
        return f"Context(data={self.data!r}, parent={'yes' if self.parent else 'no'})"


def resolve_member(base: Any, name: str, helper: Any) -> Any:
    """
    Разрешает один сегмент пути относительно base.

    У отображения видны только ключи (включая явно сохранённый None):
    методы dict не участвуют в поиске. Для остальных объектов
    используется закэшированная стратегия доступа.

    Returns:
        Значение или NOT_FOUND
    """
    if isinstance(base, Mapping):
        return base[name] if name in base else NOT_FOUND
    return accessor_for(base, name, helper).get(base, name, helper)


__all__ = ["Context", "Entry", "Extension", "resolve_member", "NOT_FOUND"]
