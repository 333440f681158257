"""
Лексические типы.

Определяет типы токенов шаблона и сам токен с позиционной информацией.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    # Текстовый контент
    TEXT = "TEXT"

    # Разделители переменных
    OPEN_VAR = "OPEN_VAR"            # {{
    CLOSE_VAR = "CLOSE_VAR"          # }}
    OPEN_RAW_VAR = "OPEN_RAW_VAR"    # {{{
    CLOSE_RAW_VAR = "CLOSE_RAW_VAR"  # }}}

    # Разделители тегов
    OPEN_TAG = "OPEN_TAG"            # {%
    CLOSE_TAG = "CLOSE_TAG"          # %}

    EOF = "EOF"


# Разделители в порядке "самый длинный первым"
DELIMITERS = {
    "{{{": TokenType.OPEN_RAW_VAR,
    "}}}": TokenType.CLOSE_RAW_VAR,
    "{{": TokenType.OPEN_VAR,
    "}}": TokenType.CLOSE_VAR,
    "{%": TokenType.OPEN_TAG,
    "%}": TokenType.CLOSE_TAG,
}


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.
    """
    type: TokenType
    value: str
    row: int              # Номер строки (начиная с 1)
    column: int           # Номер колонки (начиная с 0)
    line: str = ""        # Исходная строка, в которой начинается токен

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.row}:{self.column})"


__all__ = ["TokenType", "Token", "DELIMITERS"]
