"""Тесты пользовательских обработчиков тегов и точек расширения конфигурации."""

import io
import logging

import pytest

from liquidrods import BlockHandler, Config, DictLoader, render_children
from liquidrods.accessors import NOT_FOUND
from liquidrods.handlers import default_handlers
from liquidrods.renderer import render_node

from tests.conftest import render


class NowHandler(BlockHandler):
    """Тег без тела."""

    def wants_close_tag(self):
        return False

    def render(self, block, context, config, out):
        out.write(f"NOW({block.arg or ''})")


class UpperHandler(BlockHandler):
    """Тег с телом, переводящий вывод тела в верхний регистр."""

    def render(self, block, context, config, out):
        buffer = io.StringIO()
        render_children(block, context, config, buffer)
        out.write(buffer.getvalue().upper())


class WithHandler(BlockHandler):
    """Рендерит тело в дочернем контексте с синтетической переменной."""

    def render(self, block, context, config, out):
        value = context.resolve(block.arg)
        extension = lambda key: "W" if key == "#with" else NOT_FOUND
        render_children(block, context.child(value, extension), config, out)


class TestCustomHandlers:
    """Регистрация и использование пользовательских тегов."""

    def test_handler_without_close_tag(self, config):
        """Тег без {% end %}."""
        config.register_handler("now", NowHandler())

        assert render("[{% now %}][{% now x %}]", {}, config) == "[NOW()][NOW(x)]"

    def test_handler_with_close_tag(self, config):
        """Тег с телом."""
        config.register_handler("upper", UpperHandler())

        assert render("{% upper %}ab{{x}}{% end upper %}!", {"x": "c"}, config) == "ABC!"

    def test_handler_with_extension_context(self, config):
        """Обработчик создаёт дочерний контекст с расширением."""
        config.register_handler("with", WithHandler())
        source = "{% with user %}{{name}}-{{#with}}-{{site}}{% end %}"

        assert render(source, {"user": {"name": "ann"}, "site": "s"}, config) == "ann-W-s"

    def test_register_returns_config(self, config):
        """register_handler возвращает саму конфигурацию."""
        assert config.register_handler("now", NowHandler()) is config

    def test_overwrite_warns(self, config, caplog):
        """Переопределение существующего тега логируется."""
        with caplog.at_level(logging.WARNING, logger="liquidrods"):
            config.register_handler("if", NowHandler())

        assert "overwrites existing handler" in caplog.text
        assert render("{% if x %}", {}, config) == "NOW(x)"


class TestConfig:
    """Настройки шаблонизатора."""

    def test_builtin_tags(self):
        """Встроенные теги регистрируются в каждой новой конфигурации."""
        assert set(Config().handlers) == {
            "if", "ifnot", "else", "for", "include", "extends", "block", "super"
        }

    def test_handlers_view_is_read_only(self, config):
        """Реестр доступен только для чтения."""
        with pytest.raises(TypeError):
            config.handlers["x"] = NowHandler()
        assert "x" not in config.handlers

    def test_fresh_registries_are_independent(self):
        """default_handlers() создаёт новый реестр на каждый вызов."""
        assert default_handlers() is not default_handlers()
        first, second = Config(), Config()
        first.register_handler("now", NowHandler())

        assert "now" not in second.handlers

    def test_chained_setters(self, config):
        """Мутаторы возвращают конфигурацию."""
        loader = DictLoader({"a": "A"})

        result = config.set_loader(loader).set_escaper(str.lower).set_renderer(render_node)
        assert result is config
        assert config.loader is loader
        assert config.escaper is str.lower
        assert config.renderer is render_node

    def test_copy(self, config):
        """Копия имеет собственный реестр и переопределённые поля."""
        copy = config.copy(max_depth=5)
        copy.register_handler("now", NowHandler())

        assert copy.max_depth == 5
        assert config.max_depth == 256
        assert copy.loader is config.loader
        assert "now" not in config.handlers

    def test_copy_unknown_field(self, config):
        """Неизвестное поле копии - TypeError."""
        with pytest.raises(TypeError, match="colour"):
            config.copy(colour="red")

    def test_custom_renderer(self, config):
        """Точка входа рендерера используется для всех узлов, включая детей блоков."""
        seen = []

        def tracing(node, context, cfg, out):
            seen.append(type(node).__name__)
            render_node(node, context, cfg, out)

        config.set_renderer(tracing)

        assert render("a{% if x %}{{x}}{% end %}", {"x": 1}, config) == "a1"
        assert seen == ["TextNode", "BlockNode", "VariableNode"]
