"""
Filesystem capability used by the file sink.

The rotating sink never touches ``os`` directly; it goes through a
:class:`FileSystem` so tests can inject failures at rename, open or delete
time. Every method may raise ``OSError``; the sink wraps those into
``SinkError`` subclasses.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    def open_append(self, path: Path) -> BinaryIO:  # pragma: no cover - protocol
        ...

    def rename(self, src: Path, dst: Path) -> None:  # pragma: no cover - protocol
        ...

    def delete(self, path: Path) -> None:  # pragma: no cover - protocol
        ...

    def exists(self, path: Path) -> bool:  # pragma: no cover - protocol
        ...

    def is_dir(self, path: Path) -> bool:  # pragma: no cover - protocol
        ...

    def size(self, path: Path) -> int:  # pragma: no cover - protocol
        ...

    def makedirs(self, path: Path) -> None:  # pragma: no cover - protocol
        ...

    def list_dir(self, path: Path) -> list[str]:  # pragma: no cover - protocol
        ...


class OsFileSystem:
    """:class:`FileSystem` backed by the local operating system."""

    def open_append(self, path: Path) -> BinaryIO:
        if path.is_dir():
            raise IsADirectoryError(21, "Is a directory", str(path))
        return open(path, "ab")

    def rename(self, src: Path, dst: Path) -> None:
        # os.rename refuses to overwrite on Windows; callers pick unused names
        os.rename(src, dst)

    def delete(self, path: Path) -> None:
        os.remove(path)

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return 0

    def makedirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def list_dir(self, path: Path) -> list[str]:
        try:
            return os.listdir(path)
        except FileNotFoundError:
            return []
