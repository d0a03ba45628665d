from __future__ import annotations
import logging
import os
from pathlib import Path

from .model import ResourceNotFoundError

logger = logging.getLogger(__name__)


def list_files(directory: str | Path) -> list[str]:
    """Recursively list files under `directory` in filesystem traversal order.

    Subdirectory contents are spliced in where the subdirectory was met.
    Directory symlinks are not followed. Any OSError propagates.
    """
    files: list[str] = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                files.extend(list_files(entry.path))
            else:
                files.append(entry.path)
    return files


class Catalog:
    """Index-addressable view of the media root.

    In the default mode every call rescans the directory, so indices follow the
    live directory and can shift when files are added or removed. With
    ``snapshot=True`` the listing is taken once and only changes on
    :meth:`refresh`.
    """

    def __init__(self, root: str | Path, *, snapshot: bool = False) -> None:
        self.root = str(root)
        self.snapshot = snapshot
        self._files: list[str] | None = None
        if snapshot:
            self.refresh()

    def refresh(self) -> int:
        files = list_files(self.root)
        if self.snapshot:
            self._files = files          # swapped whole, readers keep their old list
        logger.info("Catalogued %d files under %s", len(files), self.root)
        return len(files)

    def files(self) -> list[str]:
        if self._files is not None:
            return self._files
        return list_files(self.root)

    def resolve(self, index: int) -> str:
        files = self.files()
        if index < 0 or index >= len(files):
            raise ResourceNotFoundError(index, len(files))
        return files[index]
