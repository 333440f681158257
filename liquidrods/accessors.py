"""
Стратегии доступа к членам объектов модели.

Для каждой тройки (имя члена, класс объекта, класс хелпера) один раз
определяется стратегия доступа из фиксированного набора и кэшируется
на уровне процесса:

- GETTER: метод без аргументов get_<name> / get<Name> / is_<name> / is<Name>
- METHOD: метод без аргументов с именем ровно <name>
- FIELD:  атрибут класса, свойство или слот с именем <name>
- HELPER: метод хелпера <name>(value), принимающий объект и возвращающий значение
- NONE:   ничего не найдено на уровне класса

Кэш хранит только метаданные о форме классов, никогда данные, поэтому
его повторное использование между рендерами безопасно. Конкурентное
заполнение безвредно: повторное определение одной и той же записи даёт
эквивалентный результат.

Атрибуты экземпляра (__dict__) не видны на уровне класса, поэтому для
стратегий HELPER и NONE они проверяются при каждом вызове: поле
экземпляра имеет приоритет над хелпером.
"""

from __future__ import annotations

import enum
import inspect
import logging
import types
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class _NotFound:
    """Маркер "значение не найдено" (в отличие от найденного None)."""

    _instance: Optional[_NotFound] = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Any = _NotFound()


class AccessorKind(enum.Enum):
    GETTER = "getter"
    METHOD = "method"
    FIELD = "field"
    HELPER = "helper"
    NONE = "none"


@dataclass(frozen=True)
class Accessor:
    """Найденная стратегия доступа к члену."""
    kind: AccessorKind
    attribute: str = ""

    def get(self, base: Any, name: str, helper: Any) -> Any:
        """
        Применяет стратегию к объекту.

        Returns:
            Значение члена или NOT_FOUND
        """
        if self.kind in (AccessorKind.GETTER, AccessorKind.METHOD):
            return getattr(base, self.attribute)()
        if self.kind is AccessorKind.FIELD:
            return getattr(base, self.attribute, NOT_FOUND)

        value = _instance_field(base, name)
        if value is not NOT_FOUND:
            return value
        if self.kind is AccessorKind.HELPER:
            return getattr(helper, self.attribute)(base)
        return NOT_FOUND


NO_ACCESSOR = Accessor(AccessorKind.NONE)

AccessorKey = Tuple[str, type, Optional[type]]

_accessor_cache: Dict[AccessorKey, Accessor] = {}

_MISSING = object()

# Типы, которые при статическом поиске по классу означают метод, а не поле
_METHOD_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    types.ClassMethodDescriptorType,
    staticmethod,
    classmethod,
)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def accessor_for(base: Any, name: str, helper: Any) -> Accessor:
    """
    Возвращает стратегию доступа к члену name объекта base.

    Args:
        base: Объект, у которого ищется член (не None)
        name: Имя сегмента пути
        helper: Объект-хелпер корня цепочки контекстов (может быть None)

    Returns:
        Закэшированная или только что найденная стратегия
    """
    key = (name, type(base), None if helper is None else type(helper))
    accessor = _accessor_cache.get(key)
    if accessor is None:
        accessor = _discover(type(base), name, helper)
        _accessor_cache[key] = accessor
        logger.debug(f"Accessor for {type(base).__name__}.{name}: {accessor.kind.value}")
    return accessor


def clear_accessor_cache() -> None:
    """Очищает кэш стратегий (используется в тестах)."""
    _accessor_cache.clear()


def _discover(cls: type, name: str, helper: Any) -> Accessor:
    # Непубличные и синтетические имена (#, ##, #first) не ищутся
    if not name.isidentifier() or name.startswith("_"):
        return NO_ACCESSOR

    for getter in _getter_names(name):
        params = _method_params(cls, getter)
        if params is not None and _accepts(params, 0):
            return Accessor(AccessorKind.GETTER, getter)

    static = inspect.getattr_static(cls, name, _MISSING)
    if isinstance(static, _METHOD_TYPES):
        params = _method_params(cls, name)
        # Часть C-методов (dict.items) не имеет сигнатуры: вызываются без аргументов
        if params is None or _accepts(params, 0):
            return Accessor(AccessorKind.METHOD, name)
    elif static is not _MISSING:
        return Accessor(AccessorKind.FIELD, name)

    if helper is not None and _is_helper_method(type(helper), name, cls):
        return Accessor(AccessorKind.HELPER, name)

    return NO_ACCESSOR


def _getter_names(name: str) -> List[str]:
    capitalized = name[0].upper() + name[1:]
    return [f"get_{name}", f"get{capitalized}", f"is_{name}", f"is{capitalized}"]


def _method_params(cls: type, attribute: str) -> Optional[List[inspect.Parameter]]:
    """
    Параметры метода так, как они видны при вызове на экземпляре (без self).

    Returns:
        Список параметров или None, если атрибут не является методом
    """
    static = inspect.getattr_static(cls, attribute, _MISSING)
    if not isinstance(static, _METHOD_TYPES):
        return None
    try:
        signature = _signature(getattr(cls, attribute))
    except (TypeError, ValueError):
        return None

    params = list(signature.parameters.values())
    if not isinstance(static, (staticmethod, classmethod, types.ClassMethodDescriptorType)) and params:
        params = params[1:]
    return params


def _accepts(params: List[inspect.Parameter], count: int) -> bool:
    """Проверяет, что метод можно вызвать ровно с count позиционными аргументами."""
    required = [
        p for p in params
        if p.default is p.empty and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    if any(p.kind is p.KEYWORD_ONLY for p in required):
        return False
    positional = [p for p in params if p.kind in _POSITIONAL]
    has_varargs = any(p.kind is p.VAR_POSITIONAL for p in params)
    return len(required) <= count and (len(positional) >= count or has_varargs)


def _is_helper_method(helper_cls: type, name: str, value_cls: type) -> bool:
    """Метод хелпера с одним аргументом, совместимым с value_cls, и не-void результатом."""
    params = _method_params(helper_cls, name)
    if params is None or not _accepts(params, 1):
        return False

    positional = [p for p in params if p.kind in _POSITIONAL]
    if positional:
        annotation = positional[0].annotation
        if annotation is inspect.Parameter.empty:
            annotation = object
        if isinstance(annotation, type) and not issubclass(value_cls, annotation):
            return False

    # Сигнатура уже успешно получена в _method_params
    returns = _signature(getattr(helper_cls, name)).return_annotation
    return returns is not None and returns is not type(None) and returns != "None"


def _signature(func: Any) -> inspect.Signature:
    try:
        return inspect.signature(func, eval_str=True)
    except (NameError, SyntaxError):
        # Аннотации, которые нельзя вычислить, остаются строками
        return inspect.signature(func)


def _instance_field(base: Any, name: str) -> Any:
    if name.startswith("_"):
        return NOT_FOUND
    try:
        attributes = vars(base)
    except TypeError:
        return NOT_FOUND
    return attributes.get(name, NOT_FOUND)


__all__ = [
    "NOT_FOUND",
    "AccessorKind",
    "Accessor",
    "NO_ACCESSOR",
    "accessor_for",
    "clear_accessor_cache",
]
