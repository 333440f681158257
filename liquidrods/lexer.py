"""
Лексический анализатор шаблонов.

Читает исходный поток построчно и лениво выдаёт токены: текст,
разделители переменных {{ }}, сырых переменных {{{ }}}, тегов {% %}
и финальный EOF.
"""

from __future__ import annotations

import io
import re
from typing import Iterator, List, Optional, TextIO, Union

from .tokens import DELIMITERS, Token, TokenType

# Альтернативы упорядочены так, что более длинный разделитель проверяется первым
_DELIMITER_RE = re.compile("|".join(re.escape(d) for d in DELIMITERS))


class TemplateLexer:
    """
    Построчный лексер шаблонов.

    Текст между разделителями накапливается в буфере, который может
    охватывать несколько строк; TEXT-токен выдаётся только когда
    накопление прерывается разделителем или концом ввода. Переводы строк
    сохраняются в тексте как есть.

    После достижения конца ввода каждый следующий вызов next_token()
    возвращает один и тот же EOF-токен.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._line: Optional[str] = None
        self._row = 0
        self._column = 0
        self._eof: Optional[Token] = None

    def next_token(self) -> Token:
        """Извлекает следующий токен из входного потока."""
        parts: List[str] = []
        start: Optional[tuple] = None

        while True:
            if self._eof is not None:
                return self._eof

            if self._line is None or self._column >= len(self._line):
                self._next_line()
                if self._eof is not None:
                    if parts:
                        return self._text_token(parts, start)
                    return self._eof

            match = _DELIMITER_RE.search(self._line, self._column)
            if match is None:
                # Разделителя в строке нет: остаток строки уходит в буфер
                if start is None:
                    start = (self._row, self._column, self._line)
                parts.append(self._line[self._column:])
                self._column = len(self._line)
                continue

            if match.start() > self._column or parts:
                if start is None:
                    start = (self._row, self._column, self._line)
                parts.append(self._line[self._column:match.start()])
                self._column = match.start()
                return self._text_token(parts, start)

            self._column = match.end()
            delimiter = match.group(0)
            return Token(
                DELIMITERS[delimiter], delimiter, self._row, match.start(), _strip_eol(self._line)
            )

    def __iter__(self) -> Iterator[Token]:
        """Выдаёт токены до EOF включительно."""
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    @property
    def at_eof(self) -> bool:
        return self._eof is not None

    def _next_line(self) -> None:
        previous = self._line
        line = self._stream.readline()
        if line:
            self._line = line
            self._row += 1
            self._column = 0
            return

        # Конец ввода: EOF ставится сразу за последним символом
        if previous is None or previous.endswith("\n"):
            row, column, last = self._row + 1, 0, ""
        else:
            row, column, last = self._row, len(previous), previous
        self._line = None
        self._eof = Token(TokenType.EOF, "", row, column, _strip_eol(last))

    @staticmethod
    def _text_token(parts: List[str], start: tuple) -> Token:
        row, column, line = start
        return Token(TokenType.TEXT, "".join(parts), row, column, _strip_eol(line))


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def tokenize(source: Union[str, TextIO]) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        source: Текст шаблона или текстовый поток

    Returns:
        Список токенов, заканчивающийся EOF
    """
    stream = io.StringIO(source) if isinstance(source, str) else source
    return list(TemplateLexer(stream))


__all__ = ["TemplateLexer", "tokenize"]
