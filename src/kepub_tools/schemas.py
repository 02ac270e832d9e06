"""Pydantic schemas for runtime validation of run configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kepub_tools.types import Replacement

REPLACEMENT_SEPARATOR = "|"


def parse_replacement(raw: str) -> Replacement:
    """Split a ``FIND|REPLACE`` entry into a replacement pair.

    Raises
    ------
    ValueError
        If the separator is missing or the find string is empty.
    """
    if REPLACEMENT_SEPARATOR not in raw:
        raise ValueError(
            f"Invalid replacement '{raw}'. Use FIND{REPLACEMENT_SEPARATOR}REPLACE format."
        )
    find, replace = raw.split(REPLACEMENT_SEPARATOR, 1)
    if not find:
        raise ValueError(f"Invalid replacement '{raw}'. Find string cannot be empty.")
    return find, replace


class ConversionConfig(BaseModel):
    """Validated conversion settings gathered from the CLI or API."""

    model_config = ConfigDict(extra="forbid")

    css: str = ""
    hyphenate: bool = False
    no_hyphenate: bool = False
    inline_styles: bool = False
    fullscreen_fixes: bool = False
    replacements: list[tuple[str, str]] = Field(default_factory=list)

    @field_validator("replacements", mode="before")
    @classmethod
    def _parse_replacements(cls, value: object) -> object:
        if not isinstance(value, (list, tuple)):
            return value
        return [parse_replacement(item) if isinstance(item, str) else item for item in value]

    @field_validator("replacements")
    @classmethod
    def _validate_replacements(cls, value: list[tuple[str, str]]) -> list[tuple[str, str]]:
        if any(not find for find, _ in value):
            raise ValueError("replacement find strings cannot be empty.")
        return value

    @model_validator(mode="after")
    def _validate_hyphenation(self) -> ConversionConfig:
        if self.hyphenate and self.no_hyphenate:
            raise ValueError("hyphenate and no_hyphenate are mutually exclusive.")
        return self

    @property
    def hyphenation(self) -> bool | None:
        if self.hyphenate:
            return True
        if self.no_hyphenate:
            return False
        return None


class BatchConfig(BaseModel):
    """Validated batch conversion request."""

    model_config = ConfigDict(extra="forbid")

    paths: list[str] = Field(min_length=1)
    output_dir: Path = Path(".")
    update_only: bool = False

    @field_validator("paths")
    @classmethod
    def _validate_paths(cls, value: list[str]) -> list[str]:
        if any(not item.strip() for item in value):
            raise ValueError("paths cannot contain empty entries.")
        return value
