"""Async file helpers running blocking I/O in a thread pool."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from mdtidy.config import OUTPUT_FILE_PERMISSIONS


async def read_bytes_async(path: Path) -> bytes:
    """Read a file's bytes asynchronously using a thread pool.

    Args:
        path: Path to the file to read.

    Returns:
        The raw file contents.
    """
    return await asyncio.to_thread(path.read_bytes)


async def write_text_async(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to a file asynchronously using a thread pool.

    Args:
        path: Path to the file to write.
        content: Text content to write.
        encoding: Text encoding to use.
    """
    await asyncio.to_thread(write_text, path, content, encoding)


def write_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text; files created here are restricted to owner read/write."""
    existed = path.exists()
    path.write_text(content, encoding=encoding)
    if not existed:
        os.chmod(path, OUTPUT_FILE_PERMISSIONS)
