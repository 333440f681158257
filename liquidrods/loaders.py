"""
Загрузчики шаблонов.

Загрузчик получает логическое имя шаблона и возвращает текстовый поток.
Отсутствующий шаблон - всегда фатальная ошибка TemplateNotFoundError.
"""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol, TextIO, Union, runtime_checkable

from .errors import TemplateNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class TemplateLoader(Protocol):
    """Протокол загрузчика шаблонов."""

    def load(self, name: str) -> TextIO:
        """
        Загружает шаблон по имени.

        Raises:
            TemplateNotFoundError: Если шаблон не найден
        """
        ...


class FileSystemLoader:
    """
    Ищет шаблон по относительному имени в списке каталогов.

    Побеждает первый каталог, в котором файл существует. Имена,
    выходящие за пределы каталога (../), отвергаются.
    """

    def __init__(self, search_path: Union[str, Path, Iterable[Union[str, Path]]], encoding: str = "utf-8"):
        if isinstance(search_path, (str, Path)):
            search_path = [search_path]
        self.search_path = [Path(p) for p in search_path]
        self.encoding = encoding

    def load(self, name: str) -> TextIO:
        path = self.find(name)
        if path is None:
            raise TemplateNotFoundError(name, ", ".join(str(p) for p in self.search_path))
        logger.debug(f"Loading template '{name}' from {path}")
        return path.open("r", encoding=self.encoding, newline="")

    def find(self, name: str) -> Optional[Path]:
        """Возвращает путь к первому найденному файлу или None."""
        for base in self.search_path:
            base = base.resolve()
            candidate = (base / name).resolve()
            try:
                candidate.relative_to(base)
            except ValueError:
                continue
            if candidate.is_file():
                return candidate
        return None

    def __repr__(self) -> str:
        return f"FileSystemLoader({[str(p) for p in self.search_path]!r})"


class DictLoader:
    """Шаблоны в памяти: имя -> текст."""

    def __init__(self, templates: Mapping[str, str]):
        self.templates = dict(templates)

    def load(self, name: str) -> TextIO:
        try:
            return io.StringIO(self.templates[name])
        except KeyError:
            raise TemplateNotFoundError(name) from None


def classpath_loader(encoding: str = "utf-8") -> FileSystemLoader:
    """Загрузчик по умолчанию: поиск относительно каталогов sys.path."""
    return FileSystemLoader([p or "." for p in sys.path], encoding=encoding)


__all__ = ["TemplateLoader", "FileSystemLoader", "DictLoader", "classpath_loader"]
