# src/scratchpad/storage/filesystem.py

from __future__ import annotations

import os
from pathlib import Path


class LocalFileSystem:
    """FileSystem port over the local disk."""

    def mkdir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def write_bytes(self, path: Path, data: bytes) -> None:
        # Write to a temp file first so a crash never leaves a truncated snapshot.
        path = Path(path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def list_names(self, path: Path) -> list[str]:
        return [p.name for p in Path(path).iterdir() if p.is_file()]

    def delete(self, path: Path) -> None:
        Path(path).unlink()
