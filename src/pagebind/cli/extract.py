"""CLI command mapping an HTML file into a record class and printing it as JSON."""

from __future__ import annotations

import argparse
from dataclasses import asdict, replace
import importlib
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from pagebind.config import EngineConfig
from pagebind.engine import Engine
from pagebind.errors import ConfigurationError, PagebindError
from pagebind.fields import is_record_type, new_record


load_dotenv()

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_record_type(target: str) -> type:
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Record must be given as `package.module:ClassName`, got {target!r}")
    module = importlib.import_module(module_name)
    record_type = module
    for part in attribute.split("."):
        record_type = getattr(record_type, part)
    if not is_record_type(record_type):
        raise ValueError(f"{target} is not a dataclass record type")
    return record_type  # type: ignore[return-value]


def _build_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_env()
    overrides: dict[str, object] = {}
    if args.tag_key is not None:
        overrides["tag_key"] = args.tag_key
    if args.separator is not None:
        overrides["function_separator"] = args.separator
    if args.strict:
        overrides["strict"] = True
    return replace(config, **overrides) if overrides else config


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Map an HTML document into a dataclass record and print JSON")
    parser.add_argument("--record", required=True, help="Record class as package.module:ClassName")
    parser.add_argument("--input", required=True, help="HTML file to parse")
    parser.add_argument("--parser", default="lxml", help="BeautifulSoup tree builder")
    parser.add_argument("--tag-key", default=None, help="Field metadata key holding expressions")
    parser.add_argument("--separator", default=None, help="Selector/function separator, default `->`")
    parser.add_argument("--strict", action="store_true", help="Fail on values that cannot be converted")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Logging level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        config = _build_config(args)
        record_type = _load_record_type(args.record)
    except (ConfigurationError, ImportError, AttributeError, ValueError) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=True, indent=2))
        return 2

    engine = Engine(config)
    source = Path(args.input)
    try:
        record = engine.parse_file(new_record(record_type, config.tag_key), source, parser=args.parser)
    except (PagebindError, OSError) as exc:
        LOGGER.error("Extraction from %s failed: %s", source, exc)
        print(json.dumps({"input": str(source), "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    payload = {
        "input": str(source),
        "record": f"{record_type.__module__}.{record_type.__qualname__}",
        "data": asdict(record),
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
