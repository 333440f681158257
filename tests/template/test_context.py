"""
Тесты контекста разрешения переменных.

Проверяет порядок поиска членов (ключ отображения, геттер, метод, поле,
метод хелпера), делегирование родителю, расширения и обработку None.
"""

from dataclasses import dataclass

import pytest

from liquidrods.accessors import NOT_FOUND
from liquidrods.context import Context, Entry
from liquidrods.errors import NullPathError


class Bean:
    kind = "bean"

    def __init__(self):
        self.value = 7
        self._secret = "hidden"

    def get_name(self):
        return "getter-name"

    def getTitle(self):
        return "camel-title"

    def is_active(self):
        return True

    def size(self):
        return 3

    def greet(self, who):
        return f"hello {who}"

    @property
    def label(self):
        return "property-label"


class Shadowed:
    name = "field"

    def get_name(self):
        return "getter"


class Slotted:
    __slots__ = ("n",)

    def __init__(self, n):
        self.n = n


@dataclass
class User:
    name: str
    friend: "User" = None


class Shouter:
    def __init__(self):
        self.greeting = "hi"
        self.count = 3

    def shout(self, value: str) -> str:
        return value.upper() + "!"

    def log(self, value) -> None:
        pass


class Whisperer:
    def __init__(self):
        self.greeting = "HI"

    def shout(self, value: str) -> str:
        return value.lower() + "..."


class Incrementer:
    def inc(self, value: int) -> int:
        return value + 1


class TestMappingResolution:
    """Разрешение по ключам отображений."""

    def test_nested_keys(self):
        """Путь из нескольких сегментов по вложенным словарям."""
        assert Context({"a": {"b": 1}}).resolve("a.b") == 1

    def test_quoted_segments(self):
        """Сегменты в апострофах ищутся как ключи с точками."""
        ctx = Context({"a.b": {"y.z": True}})

        assert ctx.resolve("'a.b'.'y.z'") is True

    def test_stored_none_is_found(self):
        """Явно сохранённый None - найденное значение, родитель не опрашивается."""
        ctx = Context({"a": 1}).child({"a": None})

        assert ctx.resolve("a") is None

    def test_missing_returns_none(self):
        """Отсутствующий ключ без родителя даёт None."""
        assert Context({}).resolve("missing") is None

    def test_self_paths(self):
        """Пути . и this возвращают данные контекста."""
        ctx = Context({"x": 1}).child(42)

        assert ctx.resolve(".") == 42
        assert ctx.resolve("this") == 42

    def test_quoted_self_segment(self):
        """Сегмент '.' оставляет текущее значение без изменений."""
        assert Context({"key": 3}).resolve("'.'.key") == 3
        assert Context({"key": {"x": 1}}).resolve("key.this.x") == 1


class TestObjectResolution:
    """Разрешение членов объектов."""

    def test_getter(self):
        """get_<name>() и get<Name>()."""
        ctx = Context(Bean())

        assert ctx.resolve("name") == "getter-name"
        assert ctx.resolve("title") == "camel-title"

    def test_boolean_getter(self):
        """is_<name>()."""
        assert Context(Bean()).resolve("active") is True

    def test_bare_method(self):
        """Метод без аргументов с именем сегмента."""
        assert Context(Bean()).resolve("size") == 3

    def test_method_with_arguments_is_not_accessor(self):
        """Метод, требующий аргументы, не вызывается."""
        assert Context({"bean": Bean()}).resolve("bean.greet") is None

    def test_class_field_and_property(self):
        """Атрибут класса и свойство."""
        ctx = Context(Bean())

        assert ctx.resolve("kind") == "bean"
        assert ctx.resolve("label") == "property-label"

    def test_instance_field(self):
        """Атрибут экземпляра."""
        assert Context(Bean()).resolve("value") == 7

    def test_private_members_hidden(self):
        """Имена, начинающиеся с подчёркивания, не разрешаются."""
        assert Context(Bean()).resolve("_secret") is None

    def test_getter_wins_over_field(self):
        """Геттер приоритетнее одноимённого поля."""
        assert Context(Shadowed()).resolve("name") == "getter"

    def test_slots(self):
        """Слоты читаются как поля."""
        assert Context(Slotted(5)).resolve("n") == 5

    def test_dataclass_chain(self):
        """Поля dataclass и цепочка объектов."""
        user = User("ann", friend=User("bob"))

        assert Context(user).resolve("friend.name") == "bob"

    def test_entry(self):
        """Entry отдаёт key и value."""
        ctx = Context(Entry("k", 1))

        assert ctx.resolve("key") == "k"
        assert ctx.resolve("value") == 1

    def test_method_on_builtin(self):
        """Методы встроенных типов без аргументов."""
        assert Context({"s": "abc"}).resolve("s.upper") == "ABC"


class TestDelegation:
    """Делегирование поиска родительскому контексту."""

    def test_first_segment_delegates(self):
        """Не найденный первый сегмент ищется у родителя."""
        ctx = Context({"x": 1}).child({"y": 2})

        assert ctx.resolve("x") == 1
        assert ctx.resolve("y") == 2

    def test_full_path_delegated(self):
        """Родителю передаётся весь путь целиком."""
        ctx = Context({"a": {"b": 5}}).child({"c": 1})

        assert ctx.resolve("a.b") == 5

    def test_no_redelegation_mid_path(self):
        """Отсутствующий член после первого сегмента не делегируется."""
        ctx = Context({"a": {"b": 5}}).child({"a": {}})

        assert ctx.resolve("a.b") is None

    def test_none_data_delegates(self):
        """Контекст с данными None делегирует первый сегмент."""
        assert Context({"x": 1}).child(None).resolve("x") == 1
        assert Context(None).resolve("x") is None

    def test_null_intermediate_fails(self):
        """Обращение к члену None после первого сегмента - ошибка."""
        with pytest.raises(NullPathError) as exc_info:
            Context({"a": None}).resolve("a.b")

        assert exc_info.value.segment == "b"
        assert exc_info.value.path == "a.b"
        assert "on a null object" in str(exc_info.value)


class TestHelper:
    """Методы хелпера (данные корневого контекста)."""

    def test_helper_method(self):
        """Метод хелпера, принимающий значение подходящего типа."""
        assert Context(Shouter()).resolve("greeting.shout") == "HI!"

    def test_helper_type_mismatch(self):
        """Тип аргумента хелпера должен подходить к значению."""
        assert Context(Shouter()).resolve("count.shout") is None

    def test_void_helper_ignored(self):
        """Метод хелпера, возвращающий None по аннотации, не используется."""
        assert Context(Shouter()).resolve("greeting.log") is None

    def test_helper_is_root_data(self):
        """Хелпер наследуется от корня цепочки."""
        ctx = Context(Shouter()).child({"word": "yo"})

        assert ctx.helper is ctx.parent.data
        assert ctx.resolve("word.shout") == "YO!"

    def test_cache_distinguishes_helper_types(self):
        """Один и тот же член с разными хелперами разрешается независимо."""
        assert Context(Shouter()).resolve("greeting.shout") == "HI!"
        assert Context(Whisperer()).resolve("greeting.shout") == "hi..."


class TestExtension:
    """Синтетические переменные через расширение."""

    @staticmethod
    def _answer(key):
        return 42 if key == "answer" else NOT_FOUND

    def test_extension_first_segment(self):
        """Расширение опрашивается для первого сегмента раньше данных."""
        ctx = Context({"a": 1, "answer": 0}, extension=self._answer)

        assert ctx.resolve("answer") == 42
        assert ctx.resolve("a") == 1

    def test_extension_not_used_for_later_segments(self):
        """Расширение не применяется к последующим сегментам."""
        ctx = Context({"a": {"answer": 1}}, extension=self._answer)

        assert ctx.resolve("a.answer") == 1

    def test_extension_with_helper(self):
        """Значение расширения может быть аргументом хелпера."""
        extension = lambda key: 42 if key == "#" else NOT_FOUND
        ctx = Context(Incrementer()).child("item", extension=extension)

        assert ctx.resolve("#.inc") == 43

    def test_child_extension_shadows_parent_data(self):
        """Расширение дочернего контекста видно вложенным контекстам через делегирование."""
        outer = Context({}).child("x", extension=lambda key: "outer" if key == "tag" else NOT_FOUND)
        inner = outer.child("y")

        assert inner.resolve("tag") == "outer"
