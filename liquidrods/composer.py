"""
Композиция шаблонов.

Пост-парсинговый проход, выполняемый один раз на шаблон:

1. Включения: каждый {% include name %} верхнего уровня заменяется
   полностью скомпонованными корневыми узлами шаблона name.
2. Наследование: при наличии {% extends name %} результатом становится
   скомпонованный родитель, в котором блоки {% block x %} верхнего уровня
   заменены одноимёнными переопределениями потомка, а {% super %} внутри
   переопределений - телом заменяемого родительского блока.

После композиции в корневом списке нет ни include, ни extends, поэтому
повторная композиция ничего не меняет.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .errors import CompositionError
from .nodes import BlockNode, TemplateAST, TemplateNode, VariableNode, is_block
from .parser import parse_nodes

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

INCLUDE_TAG = "include"
EXTENDS_TAG = "extends"
BLOCK_TAG = "block"
SUPER_TAG = "super"


def compose(nodes: Sequence[TemplateNode], config: Config, chain: Tuple[str, ...] = ()) -> TemplateAST:
    """
    Выполняет включения и наследование для корневых узлов шаблона.

    Args:
        nodes: Корневые узлы после парсинга
        config: Конфигурация (загрузчик и реестр обработчиков)
        chain: Имена шаблонов, загружаемых выше по стеку (для обнаружения циклов)

    Returns:
        Скомпонованный список корневых узлов

    Raises:
        CompositionError: Некорректная структура наследования или цикл
    """
    included = _inline_includes(nodes, config, chain)
    return _resolve_extends(included, config, chain)


def load_composed(name: str, config: Config, chain: Tuple[str, ...] = ()) -> TemplateAST:
    """
    Загружает шаблон через загрузчик конфигурации, парсит и компонует его.
    """
    if name in chain:
        cycle = " -> ".join(chain + (name,))
        raise CompositionError(f"Circular template reference: {cycle}")

    with config.loader.load(name) as stream:
        nodes = parse_nodes(stream, config.handlers, filename=name, max_depth=config.max_depth)
    return compose(nodes, config, chain + (name,))


def _inline_includes(nodes: Sequence[TemplateNode], config: Config, chain: Tuple[str, ...]) -> TemplateAST:
    result: List[TemplateNode] = []
    for node in nodes:
        if is_block(node, INCLUDE_TAG):
            name = _target(node)
            logger.debug(f"Including '{name}' at {node.origin}")
            result.extend(load_composed(name, config, chain))
        else:
            result.append(node)
    return result


def _resolve_extends(nodes: TemplateAST, config: Config, chain: Tuple[str, ...]) -> TemplateAST:
    extends: Optional[BlockNode] = None
    overrides: Dict[Optional[str], BlockNode] = {}
    offending: Optional[TemplateNode] = None

    for node in nodes:
        if is_block(node, EXTENDS_TAG):
            if extends is not None:
                raise CompositionError(
                    f"Invalid template: multiple extends directives: found one at {node.origin} "
                    f"while one at {extends.origin} was already defined"
                )
            extends = node
        elif is_block(node, BLOCK_TAG):
            if node.arg in overrides:
                logger.warning(f"Block '{node.arg}' at {node.origin} is defined twice; the last one wins")
            overrides[node.arg] = node
        elif offending is None and isinstance(node, (VariableNode, BlockNode)):
            offending = node

    if extends is None:
        return nodes

    if offending is not None:
        kind = "variable" if isinstance(offending, VariableNode) else f"tag '{offending.name}'"
        raise CompositionError(
            f"Invalid template: it extends another template yet it defines a top level "
            f"{kind} at {offending.origin}"
        )

    parent_name = _target(extends)
    logger.debug(f"Extending '{parent_name}' with blocks {sorted(str(k) for k in overrides)}")
    parent_nodes = load_composed(parent_name, config, chain)

    merged: List[TemplateNode] = []
    for node in parent_nodes:
        if is_block(node, BLOCK_TAG) and node.arg in overrides:
            override = overrides[node.arg]
            merged.append(replace(override, children=_splice_super(override.children, node)))
        else:
            merged.append(node)
    return merged


def _splice_super(children: Sequence[TemplateNode], parent_block: BlockNode) -> Tuple[TemplateNode, ...]:
    """
    Заменяет {% super %} телом родительского блока.

    Вложенный {% block %} получает собственную область: одноимённый блок
    внутри родительского, если он есть, иначе - объемлющий родительский блок.
    """
    result: List[TemplateNode] = []
    for child in children:
        if is_block(child, SUPER_TAG):
            result.extend(parent_block.children)
        elif is_block(child, BLOCK_TAG):
            scope = _find_block(parent_block.children, child.arg) or parent_block
            result.append(replace(child, children=_splice_super(child.children, scope)))
        elif isinstance(child, BlockNode) and child.children:
            result.append(replace(child, children=_splice_super(child.children, parent_block)))
        else:
            result.append(child)
    return tuple(result)


def _find_block(nodes: Sequence[TemplateNode], name: Optional[str]) -> Optional[BlockNode]:
    for node in nodes:
        if not isinstance(node, BlockNode):
            continue
        if node.name == BLOCK_TAG and node.arg == name:
            return node
        found = _find_block(node.children, name)
        if found is not None:
            return found
    return None


def _target(node: BlockNode) -> str:
    if not node.arg:
        raise CompositionError(f"Tag '{node.name}' at {node.origin} requires a template name")
    return node.arg


__all__ = ["compose", "load_composed"]
