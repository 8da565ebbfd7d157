"""Markdown file discovery and batch processing."""

from __future__ import annotations

import asyncio
import fnmatch
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from mdtidy.config import MDTIDY_MAX_WORKERS
from mdtidy.exceptions import MdtidyError, ProcessingError
from mdtidy.file_utils import read_bytes_async, write_text_async
from mdtidy.pipeline import decode_markdown, format_and_render
from mdtidy.schemas import FormatterConfig

logger = logging.getLogger(__name__)


@dataclass
class FileInfo:
    """A Markdown file selected for processing."""

    path: Path
    relative_path: str
    size: int = 0


@dataclass
class ProcessingResult:
    """Outcome of formatting one file.

    Attributes:
        file: The processed file.
        success: False when reading, formatting or writing failed.
        changed: The formatted output differs from the input.
        original: The decoded input text (empty on read failure).
        formatted: The formatted text (empty on failure).
        error: The failure, if any.
        bytes_read: Size of the input in bytes.
        written: The formatted text was written back to the file.
    """

    file: FileInfo
    success: bool = True
    changed: bool = False
    original: str = ""
    formatted: str = ""
    error: Exception | None = None
    bytes_read: int = 0
    written: bool = False


def is_markdown_file(path: Path | str, extensions: Iterable[str]) -> bool:
    """Check the file extension against ``extensions`` (case-insensitive)."""
    return Path(path).suffix.lower() in {ext.lower() for ext in extensions}


def should_ignore(path: Path | str, patterns: Iterable[str]) -> bool:
    """Check a path against ignore patterns.

    ``dir/**`` ignores everything under ``dir``, patterns containing ``*``
    match the basename, anything else must equal the path or basename.
    """
    normalized = Path(os.path.normpath(str(path))).as_posix()
    parts = normalized.split("/")
    base = parts[-1]

    for pattern in patterns:
        if pattern.endswith("/**"):
            directory = pattern[: -len("/**")]
            if normalized == directory or normalized.startswith(directory + "/"):
                return True
            # Also match the directory anywhere below the search root.
            if "/" not in directory and directory in parts:
                return True
        elif "*" in pattern:
            if fnmatch.fnmatchcase(base, pattern):
                return True
        elif normalized == pattern or base == pattern:
            return True
    return False


def find_files(paths: Iterable[Path | str], config: FormatterConfig | None = None) -> list[FileInfo]:
    """Find Markdown files in ``paths``, walking directories recursively.

    Files reachable through several inputs are returned once.

    Raises:
        ProcessingError: A path does not exist.
    """
    cfg = config or FormatterConfig()
    extensions = cfg.files.extensions
    patterns = cfg.files.ignore_patterns
    files: list[FileInfo] = []
    seen: set[Path] = set()

    def _add(path: Path) -> None:
        resolved = path.resolve()
        if resolved in seen:
            return
        seen.add(resolved)
        files.append(FileInfo(path=path, relative_path=_relative(path), size=path.stat().st_size))

    for raw_path in paths:
        path = Path(raw_path)
        if not path.exists():
            raise ProcessingError(f"path does not exist: {path}")

        if path.is_file():
            if is_markdown_file(path, extensions) and not should_ignore(path, patterns):
                _add(path)
            continue

        for root, dirnames, filenames in os.walk(path):
            root_path = Path(root)
            dirnames[:] = sorted(
                name for name in dirnames if not should_ignore(_relative(root_path / name), patterns)
            )
            for name in sorted(filenames):
                candidate = root_path / name
                if not is_markdown_file(candidate, extensions):
                    continue
                if should_ignore(_relative(candidate), patterns):
                    continue
                try:
                    _add(candidate)
                except OSError as exc:
                    logger.warning("Skipping unreadable file", extra={"path": str(candidate), "error": str(exc)})
    return files


def _relative(path: Path) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        return str(path)


async def process_file(
    file: FileInfo,
    config: FormatterConfig | None = None,
    *,
    write: bool = False,
) -> ProcessingResult:
    """Format one file, optionally writing the result back.

    Failures are recorded on the result instead of raised.
    """
    cfg = config or FormatterConfig()
    result = ProcessingResult(file=file)
    try:
        raw = await read_bytes_async(file.path)
        result.bytes_read = len(raw)
        result.original = decode_markdown(raw)
        result.formatted = await asyncio.to_thread(format_and_render, result.original, cfg)
        result.changed = result.original.strip() != result.formatted.strip()
        if write and result.changed:
            await write_text_async(file.path, result.formatted)
            result.written = True
    except (MdtidyError, OSError) as exc:
        logger.error("Failed to process file", extra={"path": str(file.path), "error": str(exc)})
        result.success = False
        result.error = exc
        result.formatted = ""
    return result


async def process_files(
    files: Iterable[FileInfo],
    config: FormatterConfig | None = None,
    *,
    write: bool = False,
    max_workers: int = MDTIDY_MAX_WORKERS,
) -> list[ProcessingResult]:
    """Format many files concurrently; results keep the input order."""
    files = list(files)
    if not files:
        return []

    semaphore = asyncio.Semaphore(max(1, min(max_workers, len(files))))

    async def _run(file: FileInfo) -> ProcessingResult:
        async with semaphore:
            return await process_file(file, config, write=write)

    return list(await asyncio.gather(*(_run(file) for file in files)))


def backup_file(path: Path) -> Path:
    """Copy ``path`` to ``<path>.backup`` and return the backup path.

    Raises:
        ProcessingError: The copy failed.
    """
    path = Path(path)
    backup = path.with_name(path.name + ".backup")
    try:
        shutil.copyfile(path, backup)
    except OSError as exc:
        raise ProcessingError(f"failed to back up {path}: {exc}") from exc
    return backup
