"""Runtime configuration for the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from pagebind.errors import ConfigurationError


DEFAULT_TAG_KEY = "pagebind"
DEFAULT_FUNCTION_SEPARATOR = "->"
DEFAULT_IGNORE_SYMBOL = "-"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_flag(*, name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw_value!r}")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Validated engine settings, consumed once at construction."""

    tag_key: str = DEFAULT_TAG_KEY
    function_separator: str = DEFAULT_FUNCTION_SEPARATOR
    ignore_symbol: str = DEFAULT_IGNORE_SYMBOL
    strict: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.tag_key:
            raise ConfigurationError("tag_key must not be empty")
        if not self.function_separator:
            raise ConfigurationError("function_separator must not be empty")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineConfig":
        source: Mapping[str, str] = os.environ if environ is None else environ

        tag_key = source.get("PAGEBIND_TAG_KEY", DEFAULT_TAG_KEY).strip()
        separator = source.get("PAGEBIND_FUNCTION_SEPARATOR", DEFAULT_FUNCTION_SEPARATOR).strip()
        ignore_symbol = source.get("PAGEBIND_IGNORE_SYMBOL", DEFAULT_IGNORE_SYMBOL).strip()

        if not tag_key:
            raise ConfigurationError("PAGEBIND_TAG_KEY cannot be empty")
        if not separator:
            raise ConfigurationError("PAGEBIND_FUNCTION_SEPARATOR cannot be empty")

        return cls(
            tag_key=tag_key,
            function_separator=separator,
            ignore_symbol=ignore_symbol,
            strict=_parse_flag(name="PAGEBIND_STRICT", raw_value=source.get("PAGEBIND_STRICT", "false")),
            debug=_parse_flag(name="PAGEBIND_DEBUG", raw_value=source.get("PAGEBIND_DEBUG", "false")),
        )
