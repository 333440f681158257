"""
Разбор путей к переменным.

Путь состоит из сегментов, разделённых точками. Сегмент может быть
заключён в апострофы, чтобы содержать точки: 'a.b'.x.'y.z'.
Результаты разбора кэшируются по исходной строке.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .errors import PathSyntaxError

# Специальные пути, ссылающиеся на текущее значение контекста
SELF_PATHS = frozenset({".", "this"})

_segments_cache: Dict[str, Tuple[str, ...]] = {}


def _split(path: str) -> Tuple[str, ...]:
    segments: List[str] = []
    part: List[str] = []
    in_quotes = False
    closed_quote = False

    for char in path:
        if in_quotes:
            if char == "'":
                segments.append("".join(part))
                part = []
                in_quotes = False
                closed_quote = True
            else:
                part.append(char)
        elif char == ".":
            if part:
                segments.append("".join(part))
                part = []
            closed_quote = False
        elif char == "'":
            if part or closed_quote:
                raise PathSyntaxError("an apostrophe may only open a segment", path)
            in_quotes = True
        else:
            if closed_quote:
                raise PathSyntaxError("expected '.' after a quoted segment", path)
            part.append(char)

    if in_quotes:
        raise PathSyntaxError("unclosed quote", path)
    if part:
        segments.append("".join(part))

    return tuple(segments)


def parse_path(path: str) -> Tuple[str, ...]:
    """
    Разбивает путь на сегменты с кэшированием.

    Args:
        path: Путь вида a.b или 'a.b'.c

    Returns:
        Кортеж сегментов

    Raises:
        PathSyntaxError: Апостроф не в начале сегмента или незакрытая кавычка
    """
    segments = _segments_cache.get(path)
    if segments is None:
        segments = _split(path)
        _segments_cache[path] = segments
    return segments


__all__ = ["parse_path", "SELF_PATHS"]
