"""
Загрузка конфигурации из YAML-файла.

Формат (все ключи необязательны):

    search_path: [templates, shared]   # относительно каталога файла
    encoding: utf-8
    escape: html                       # html | none
    max_depth: 256
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .config import Config
from .errors import LiquidrodsError
from .escaping import ESCAPERS
from .loaders import FileSystemLoader
from .parser import DEFAULT_MAX_DEPTH

_yaml = YAML(typ="safe")

_KNOWN_KEYS = {"search_path", "encoding", "escape", "max_depth"}


def _read_yaml_map(path: Path) -> Dict[str, Any]:
    """Читает YAML файл и возвращает словарь."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise LiquidrodsError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise LiquidrodsError(f"YAML must be a mapping: {path}")
    return raw


def load_settings(path: Path, extra_search_path: Optional[Iterable[Path]] = None) -> Config:
    """
    Создаёт Config по файлу настроек.

    Args:
        path: Путь к YAML-файлу
        extra_search_path: Каталоги, добавляемые перед каталогами из файла

    Returns:
        Новая конфигурация

    Raises:
        LiquidrodsError: Файл не найден, не является отображением или содержит неизвестные ключи
    """
    if not path.is_file():
        raise LiquidrodsError(f"Settings file not found: {path}")

    raw = _read_yaml_map(path)
    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise LiquidrodsError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")

    base = path.parent
    search_path = raw.get("search_path") or ["."]
    if isinstance(search_path, str):
        search_path = [search_path]
    directories = list(extra_search_path or []) + [base / str(p) for p in search_path]

    escape = str(raw.get("escape", "html"))
    if escape not in ESCAPERS:
        raise LiquidrodsError(f"Unknown escape mode '{escape}' (expected one of: {', '.join(ESCAPERS)})")

    try:
        max_depth = int(raw.get("max_depth", DEFAULT_MAX_DEPTH))
    except (TypeError, ValueError):
        raise LiquidrodsError(f"max_depth must be an integer, got {raw.get('max_depth')!r}")

    return Config(
        loader=FileSystemLoader(directories, encoding=str(raw.get("encoding", "utf-8"))),
        escaper=ESCAPERS[escape],
        max_depth=max_depth,
    )


__all__ = ["load_settings"]
