"""
Парсер шаблонов.

Рекурсивный спуск по потоку токенов со стеком открытых тегов. Каждый
открывающий тег, которому нужен {% end %}, увеличивает глубину рекурсии
на один уровень; {% end %} сворачивает накопленные узлы в BlockNode и
возвращает его на уровень выше.

Реестр обработчиков используется только для того, чтобы узнать, нужен ли
тегу закрывающий {% end %}. Неизвестные теги по умолчанию его требуют.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Mapping, Optional, TextIO, Tuple, Union

from .errors import ParseError, PathSyntaxError
from .lexer import TemplateLexer
from .nodes import BlockNode, Origin, TemplateAST, TemplateNode, TextNode, VariableNode
from .paths import parse_path
from .tokens import Token, TokenType

if TYPE_CHECKING:
    from .handlers import BlockHandler

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "<template>"
DEFAULT_MAX_DEPTH = 256

END_TAG = "end"

_CLOSERS = {
    TokenType.CLOSE_VAR: "}}",
    TokenType.CLOSE_RAW_VAR: "}}}",
    TokenType.CLOSE_TAG: "%}",
}


@dataclass(frozen=True)
class _OpenTag:
    name: str
    arg: Optional[str]
    origin: Origin


class TemplateParser:
    """
    Рекурсивный парсер шаблонов.

    Строит лес AST-узлов из потока токенов лексера.
    """

    def __init__(
            self,
            lexer: TemplateLexer,
            handlers: Mapping[str, BlockHandler],
            filename: str = DEFAULT_FILENAME,
            max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """
        Args:
            lexer: Источник токенов
            handlers: Реестр обработчиков тегов (имя -> обработчик)
            filename: Имя шаблона для диагностики
            max_depth: Максимальная глубина вложенности тегов
        """
        self.lexer = lexer
        self.handlers = handlers
        self.filename = filename
        self.max_depth = max_depth
        self._current: Optional[Token] = None
        self._stack: List[_OpenTag] = []

    def parse(self) -> TemplateAST:
        """
        Парсит весь шаблон в список корневых узлов.

        Raises:
            ParseError: При ошибке синтаксического анализа
        """
        nodes: List[TemplateNode] = []
        self._parse_level(nodes)
        if not self.lexer.at_eof:
            raise self._error("Was expecting end of input", self._current)
        return nodes

    def _parse_level(self, nodes: List[TemplateNode]) -> Optional[BlockNode]:
        """
        Заполняет nodes узлами текущего уровня вложенности.

        Returns:
            BlockNode, если уровень закрыт тегом {% end %};
            None, если достигнут конец ввода
        """
        while True:
            token = self._advance()

            if token.type is TokenType.TEXT:
                nodes.append(TextNode(token.value, self._origin(token)))
            elif token.type is TokenType.OPEN_RAW_VAR:
                nodes.append(self._parse_variable(token, TokenType.CLOSE_RAW_VAR, raw=True))
            elif token.type is TokenType.OPEN_VAR:
                nodes.append(self._parse_variable(token, TokenType.CLOSE_VAR, raw=False))
            elif token.type is TokenType.OPEN_TAG:
                name, arg = self._parse_tag_header(token)
                if name == END_TAG:
                    return self._close_tag(token, arg, nodes)

                handler = self.handlers.get(name)
                if handler is not None and not handler.wants_close_tag():
                    nodes.append(BlockNode(name, arg, (), self._origin(token)))
                else:
                    nodes.append(self._parse_block(token, name, arg))
            elif token.type is TokenType.EOF:
                if self._stack:
                    open_tag = self._stack[-1]
                    raise self._error(
                        f"Unexpected end of input: tag '{open_tag.name}' opened at "
                        f"{open_tag.origin} was never closed",
                        token,
                    )
                return None
            else:
                raise self._error(f"Unexpected '{_CLOSERS[token.type]}' outside of a variable or tag", token)

    def _parse_block(self, token: Token, name: str, arg: Optional[str]) -> BlockNode:
        """Открывает тег и рекурсивно парсит его тело до {% end %}."""
        if len(self._stack) >= self.max_depth:
            raise self._error(f"Tags are nested deeper than {self.max_depth} levels", token)

        self._stack.append(_OpenTag(name, arg, self._origin(token)))
        children: List[TemplateNode] = []
        block = self._parse_level(children)
        # EOF с открытым тегом уже обработан в _parse_level
        assert block is not None
        return block

    def _close_tag(self, token: Token, arg: Optional[str], children: List[TemplateNode]) -> BlockNode:
        if not self._stack:
            raise self._error("Unexpected end tag: no open tag", token)

        open_tag = self._stack.pop()
        if arg is not None and arg != open_tag.name:
            raise self._error(
                f"Unbalanced close tag '{END_TAG} {arg}': was expecting close tag for "
                f"'{open_tag.name}' opened at {open_tag.origin}",
                token,
            )
        return BlockNode(open_tag.name, open_tag.arg, tuple(children), open_tag.origin)

    def _parse_variable(self, opener: Token, closer: TokenType, raw: bool) -> VariableNode:
        token = self._advance()
        if token.type is not TokenType.TEXT:
            raise self._error(f"Was expecting a variable name after '{opener.value}'", token)

        name = token.value.strip()
        if not name:
            raise self._error("Empty variable name", token)
        try:
            parse_path(name)
        except PathSyntaxError as e:
            raise self._error(str(e), token) from e

        self._expect(closer)
        return VariableNode(name, raw, self._origin(opener))

    def _parse_tag_header(self, opener: Token) -> Tuple[str, Optional[str]]:
        token = self._advance()
        if token.type is not TokenType.TEXT:
            raise self._error("Was expecting a tag name after '{%'", token)

        words = token.value.split()
        if not words:
            raise self._error("Empty tag name", token)
        if len(words) > 2:
            raise self._error(
                f"Tags can have a name and an optional argument, got '{token.value.strip()}'", token
            )

        self._expect(TokenType.CLOSE_TAG)
        return words[0], (words[1] if len(words) == 2 else None)

    def _expect(self, expected: TokenType) -> Token:
        token = self._advance()
        if token.type is not expected:
            raise self._error(f"Was expecting '{_CLOSERS[expected]}'", token)
        return token

    def _advance(self) -> Token:
        self._current = self.lexer.next_token()
        return self._current

    def _origin(self, token: Token) -> Origin:
        return Origin(self.filename, token.row, token.column)

    def _error(self, message: str, token: Optional[Token]) -> ParseError:
        if token is None:
            return ParseError(message, self.filename, None, 0, 0)
        if token.type is not TokenType.EOF:
            message = f"{message}, got {token.type.name} '{token.value}'"
        return ParseError(message, self.filename, token.line or None, token.row, token.column)


def parse_nodes(
        source: Union[str, TextIO],
        handlers: Mapping[str, BlockHandler],
        filename: str = DEFAULT_FILENAME,
        max_depth: int = DEFAULT_MAX_DEPTH,
) -> TemplateAST:
    """
    Удобная функция: лексический и синтаксический анализ шаблона.

    Args:
        source: Текст шаблона или текстовый поток
        handlers: Реестр обработчиков тегов
        filename: Имя шаблона для диагностики
        max_depth: Максимальная глубина вложенности тегов

    Returns:
        Список корневых узлов (без композиции)
    """
    stream = io.StringIO(source) if isinstance(source, str) else source
    nodes = TemplateParser(TemplateLexer(stream), handlers, filename, max_depth).parse()
    logger.debug(f"Parsed template '{filename}' -> {len(nodes)} root nodes")
    return nodes


__all__ = ["TemplateParser", "parse_nodes", "DEFAULT_FILENAME", "DEFAULT_MAX_DEPTH"]
