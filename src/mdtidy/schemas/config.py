"""Formatter configuration model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mdtidy.config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE_PATTERNS,
    MDTIDY_LINE_WIDTH,
    MDTIDY_MAX_BLANK_LINES,
)


class HeadingConfig(BaseModel):
    """Heading formatting options.

    Attributes:
        style: ``"atx"`` (``#`` prefixes) or ``"setext"`` (underlines, levels 1-2 only).
        normalize_levels: Clamp heading levels into the 1-6 range.
    """

    model_config = ConfigDict(extra="forbid")

    style: Literal["atx", "setext"] = "atx"
    normalize_levels: bool = True


class ListConfig(BaseModel):
    """List formatting options.

    Attributes:
        bullet_style: Marker used for every unordered list item.
        number_style: Delimiter placed after ordered list numbers.
        consistent_indentation: Trim and collapse whitespace in item text.
    """

    model_config = ConfigDict(extra="forbid")

    bullet_style: Literal["-", "*", "+"] = "-"
    number_style: Literal[".", ")"] = "."
    consistent_indentation: bool = True


class CodeConfig(BaseModel):
    """Code block formatting options."""

    model_config = ConfigDict(extra="forbid")

    fence_style: Literal["```", "~~~"] = "```"
    language_detection: bool = True


class WhitespaceConfig(BaseModel):
    """Whitespace handling options.

    A negative ``max_blank_lines`` disables blank-line collapsing.
    """

    model_config = ConfigDict(extra="forbid")

    max_blank_lines: int = MDTIDY_MAX_BLANK_LINES
    trim_trailing_spaces: bool = True
    ensure_final_newline: bool = True


class FilesConfig(BaseModel):
    """File discovery options used by the processor and CLI."""

    model_config = ConfigDict(extra="forbid")

    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    ignore_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and make sure each starts with a dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized


class FormatterConfig(BaseModel):
    """Complete configuration consumed by the formatter.

    The ``list`` section is exposed as ``lists`` in Python to avoid shadowing
    the builtin; it still reads and writes as ``list`` in config files.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    line_width: int = Field(default=MDTIDY_LINE_WIDTH, ge=0)
    heading: HeadingConfig = Field(default_factory=HeadingConfig)
    lists: ListConfig = Field(default_factory=ListConfig, alias="list")
    code: CodeConfig = Field(default_factory=CodeConfig)
    whitespace: WhitespaceConfig = Field(default_factory=WhitespaceConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)

    def to_dict(self) -> dict:
        """Dump using file-format keys."""
        return self.model_dump(by_alias=True, mode="json")
