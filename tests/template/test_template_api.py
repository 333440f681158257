"""Тесты публичного API: parse / load / Template."""

import io
import threading

import liquidrods
from liquidrods import Config, DictLoader, Template, load, parse, tokenize
from liquidrods.nodes import TextNode, VariableNode
from liquidrods.tokens import TokenType


class ListSink:
    """Приёмник вывода с одним методом write."""

    def __init__(self):
        self.parts = []

    def write(self, text):
        self.parts.append(text)


class TestTemplateApi:
    """Точки входа и объект Template."""

    def test_parse_from_stream(self, config):
        """parse принимает текстовый поток."""
        template = parse(io.StringIO("a{{b}}"), config)

        assert template.nodes == (TextNode("a"), VariableNode("b"))
        assert template.render_to_string({"b": 1}) == "a1"

    def test_render_to_any_sink(self, config):
        """render пишет в любой объект с методом write."""
        sink = ListSink()

        parse("x{{y}}z", config).render({"y": "-"}, sink)
        assert "".join(sink.parts) == "x-z"

    def test_parse_name_in_errors(self, config):
        """Имя шаблона используется в позициях узлов."""
        template = parse("{{a}}", config, name="page.html")

        assert template.name == "page.html"
        assert str(template.nodes[0].origin) == "page.html:1:0"

    def test_load(self):
        """load находит шаблон через загрузчик конфигурации."""
        config = Config(loader=DictLoader({"hello": "Hello {{name}}!"}))
        template = load("hello", config)

        assert isinstance(template, Template)
        assert template.config is config
        assert repr(template) == "Template('hello', nodes=3)"
        assert template.render_to_string({"name": "Ann"}) == "Hello Ann!"

    def test_default_config(self):
        """Без конфигурации используются встроенные теги."""
        assert parse("{% if x %}y{% end %}").render_to_string({"x": True}) == "y"

    def test_tokenize_exported(self):
        """tokenize доступна из пакета для диагностики."""
        assert [t.type for t in tokenize("{{a}}")][-1] is TokenType.EOF

    def test_public_names(self):
        """Основные имена экспортируются из пакета."""
        for name in ("Config", "Template", "parse", "load", "ParseError", "BlockHandler"):
            assert name in liquidrods.__all__

    def test_concurrent_rendering(self, config):
        """Один шаблон можно рендерить параллельно с разными моделями."""
        template = parse("{% for xs %}{{.}}{% end %}", config)
        results = {}

        def worker(n):
            results[n] = template.render_to_string({"xs": list(range(n))})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {n: "".join(str(i) for i in range(n)) for n in range(1, 9)}
