from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional, Set

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .config import Config
from .errors import LiquidrodsError
from .escaping import no_escape
from .lexer import tokenize
from .loaders import FileSystemLoader
from .nodes import BlockNode, TemplateNode
from .settings import load_settings
from .template import load
from .version import tool_version

_yaml = YAML(typ="safe")


def _dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="liquidrods",
        description="Liquidrods template engine",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="подробный лог (DEBUG) в stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы для render/check
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("name", help="имя шаблона относительно каталогов поиска")
        sp.add_argument(
            "-I", "--include-dir",
            action="append",
            metavar="DIR",
            help="каталог поиска шаблонов (можно указать несколько; по умолчанию - текущий)",
        )
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="YAML-файл настроек (search_path, encoding, escape, max_depth)",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон")
    add_common(sp_render)
    sp_render.add_argument(
        "-m", "--model",
        metavar="FILE|-",
        help="данные модели: .json / .yaml / .yml файл или - для JSON из stdin",
    )
    sp_render.add_argument("--raw", action="store_true", help="не экранировать вывод {{ }}")
    sp_render.add_argument("-o", "--output", metavar="FILE", help="записать результат в файл")

    sp_check = sub.add_parser("check", help="Проверить шаблон (JSON-отчёт)")
    add_common(sp_check)

    sp_tokens = sub.add_parser("tokens", help="Поток токенов файла шаблона")
    sp_tokens.add_argument("file", help="путь к файлу шаблона")

    return p


def _make_config(ns: argparse.Namespace) -> Config:
    include_dirs = [Path(d) for d in (ns.include_dir or [])]
    if ns.config:
        cfg = load_settings(Path(ns.config), extra_search_path=include_dirs)
    else:
        cfg = Config(loader=FileSystemLoader(include_dirs or [Path.cwd()]))
    if getattr(ns, "raw", False):
        cfg.set_escaper(no_escape)
    return cfg


def _load_model(model_arg: Optional[str]) -> Any:
    """
    Загружает данные модели.

    Поддерживает три формата:
    - JSON из stdin: -
    - JSON-файл: *.json
    - YAML-файл: *.yaml, *.yml

    Returns:
        Данные модели (пустой словарь, если аргумент не задан)
    """
    if not model_arg:
        return {}

    if model_arg == "-":
        try:
            return json.loads(sys.stdin.read() or "{}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON model on stdin: {e}")

    path = Path(model_arg)
    if not path.is_file():
        raise ValueError(f"Model file not found: {path}")

    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix in (".yaml", ".yml"):
            return _yaml.load(text)
    except (json.JSONDecodeError, YAMLError) as e:
        raise ValueError(f"Failed to parse model file {path}: {e}")
    raise ValueError(f"Unsupported model format '{suffix}'. Expected .json, .yaml or .yml")


def _collect_tags(nodes: Iterable[TemplateNode], acc: Set[str]) -> Set[str]:
    for node in nodes:
        if isinstance(node, BlockNode):
            acc.add(node.name)
            _collect_tags(node.children, acc)
    return acc


def _format_tokens(path: Path) -> List[str]:
    with path.open("r", encoding="utf-8", newline="") as stream:
        return [
            f"{token.row}:{token.column}\t{token.type.name}\t{_dumps(token.value)}"
            for token in tokenize(stream)
        ]


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    if ns.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if ns.cmd == "render":
            cfg = _make_config(ns)
            model = _load_model(ns.model)
            template = load(ns.name, cfg)
            if ns.output:
                with open(ns.output, "w", encoding="utf-8", newline="") as out:
                    template.render(model, out)
            else:
                template.render(model, sys.stdout)
            return 0

        if ns.cmd == "check":
            template = load(ns.name, _make_config(ns))
            report = {
                "template": ns.name,
                "nodes": len(template.nodes),
                "tags": sorted(_collect_tags(template.nodes, set())),
            }
            sys.stdout.write(_dumps(report) + "\n")
            return 0

        if ns.cmd == "tokens":
            path = Path(ns.file)
            if not path.is_file():
                raise ValueError(f"Template file not found: {path}")
            sys.stdout.write("".join(line + "\n" for line in _format_tokens(path)))
            return 0

    except LiquidrodsError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
