"""Local configuration defaults for mdtidy."""

from __future__ import annotations

import os


DEFAULT_LINE_WIDTH = 80
DEFAULT_MAX_BLANK_LINES = 2
DEFAULT_MAX_WORKERS = 8
DEFAULT_EXTENSIONS = (".md", ".markdown", ".mdown")
DEFAULT_IGNORE_PATTERNS = ("node_modules/**", ".git/**", "vendor/**")

CONFIG_FILE_NAMES = (
    ".mdtidy.yaml",
    ".mdtidy.yml",
    ".mdtidy.json",
    "mdtidy.yaml",
    "mdtidy.yml",
    "mdtidy.json",
)
CONFIG_FILE_PERMISSIONS = 0o600
OUTPUT_FILE_PERMISSIONS = 0o600

MDTIDY_LINE_WIDTH = int(os.getenv("MDTIDY_LINE_WIDTH", str(DEFAULT_LINE_WIDTH)))
MDTIDY_MAX_BLANK_LINES = int(os.getenv("MDTIDY_MAX_BLANK_LINES", str(DEFAULT_MAX_BLANK_LINES)))
MDTIDY_MAX_WORKERS = int(os.getenv("MDTIDY_MAX_WORKERS", str(DEFAULT_MAX_WORKERS)))
