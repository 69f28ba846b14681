"""
Settings shared by the reader and the writer.

Settings can be built in code or loaded from the ``[tool.typedyaml]`` table
of a TOML file (usually the project's ``pyproject.toml``).
"""

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class YamlSettings(BaseModel):
    """Formatting and diagnostics options."""

    model_config = ConfigDict(frozen=True)

    indent_width: int = Field(default=2, ge=1, description="Spaces per indentation level")
    quote: Literal["'", '"'] = Field(default="'", description="Quote used when writing strings")
    trace: bool = Field(default=False, description="Log every token at DEBUG level")


DEFAULT_SETTINGS = YamlSettings()


def load_settings(path: Path) -> YamlSettings:
    data = tomllib.loads(path.read_text(encoding="utf-8"))

    table = data.get("tool", {}).get("typedyaml", {})
    if not table:
        return DEFAULT_SETTINGS

    return YamlSettings(
        indent_width=table.get("indent_width", 2),
        quote=table.get("quote", "'"),
        trace=table.get("trace", False),
    )
