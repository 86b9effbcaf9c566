"""
Size-based rotating file writer.

When the active file grows past ``rotate_size`` bytes it is renamed to
``<name>.<timestamp>`` (optionally gzip-compressed to ``<name>.<timestamp>.gz``)
and a fresh file is opened. Only the ``rotate_keep`` most recent rotated files
are retained.
"""

from __future__ import annotations

import gzip
import shutil
from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional, Union

from .errors import SinkError

DEFAULT_TIMESTAMP_TEMPLATE = "%Y%m%d_%H%M"
DEFAULT_ROTATE_SIZE = 9223372036854775807
DEFAULT_ROTATE_KEEP = 8


class RotatingFileWriter:
    """Append-only byte sink with rotation."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        truncate: bool = False,
        rotate_size: int = DEFAULT_ROTATE_SIZE,
        rotate_keep: int = DEFAULT_ROTATE_KEEP,
        rotate_compress: bool = False,
        timestamp_template: str = DEFAULT_TIMESTAMP_TEMPLATE,
    ) -> None:
        self._path = Path(path)
        self._rotate_size = rotate_size
        self._rotate_keep = rotate_keep
        self._rotate_compress = rotate_compress
        self._timestamp_template = timestamp_template
        self._rotated: List[Path] = self._existing_rotated_files()
        self._file: Optional[IO[bytes]] = None
        self._size = 0
        self._open("wb" if truncate else "ab")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def rotated_files(self) -> List[Path]:
        """Retained rotated files, oldest first."""
        return list(self._rotated)

    def _existing_rotated_files(self) -> List[Path]:
        parent = self._path.parent
        if not parent.is_dir():
            return []
        found = [
            p for p in parent.glob(f"{self._path.name}.*") if p.is_file() and self._is_rotated_name(p.name)
        ]
        return sorted(found, key=lambda p: (p.stat().st_mtime_ns, p.name))

    def _is_rotated_name(self, name: str) -> bool:
        """True for names produced by :meth:`rotate`: ``<name>.<stamp>[.N][.gz]``."""
        stem = name[len(self._path.name) + 1 :]
        if stem.endswith(".gz"):
            stem = stem[: -len(".gz")]
        candidates = [stem]
        head, _, counter = stem.rpartition(".")
        if head and counter.isdigit():
            candidates.append(head)
        for candidate in candidates:
            try:
                datetime.strptime(candidate, self._timestamp_template)
            except ValueError:
                continue
            return True
        return False

    def _open(self, mode: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self._path, mode)
        except OSError as exc:
            raise SinkError(operation="open", target=str(self._path), reason=str(exc)) from exc
        self._size = self._path.stat().st_size

    def write(self, data: bytes) -> int:
        if self._file is None:
            raise SinkError(operation="write", target=str(self._path), reason="writer is closed")
        written = self._file.write(data)
        self._size += written
        if self._size >= self._rotate_size:
            self.rotate()
        return written

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _rotated_name(self) -> Path:
        stamp = datetime.now().strftime(self._timestamp_template)
        base = self._path.with_name(f"{self._path.name}.{stamp}")
        candidate = base
        counter = 1
        while candidate.exists() or candidate.with_name(candidate.name + ".gz").exists():
            candidate = base.with_name(f"{base.name}.{counter}")
            counter += 1
        return candidate

    def rotate(self) -> None:
        """Move the active file aside and start a new one.

        The active file is reopened even when rotation fails (in append mode if
        it could not be moved), so a failed rotation is retried on a later write.
        """
        self.close()
        target = self._rotated_name()
        renamed = False
        try:
            self._path.rename(target)
            renamed = True
            self._rotated.append(target)
            if self._rotate_compress:
                self._rotated[-1] = self._compress(target)
            self._prune()
        except OSError as exc:
            raise SinkError(operation="rotate", target=str(self._path), reason=str(exc)) from exc
        finally:
            self._open("wb" if renamed else "ab")

    @staticmethod
    def _compress(path: Path) -> Path:
        compressed = path.with_name(path.name + ".gz")
        with open(path, "rb") as src, gzip.open(compressed, "wb") as dst:
            shutil.copyfileobj(src, dst)
        path.unlink()
        return compressed

    def _prune(self) -> None:
        while len(self._rotated) > self._rotate_keep:
            oldest = self._rotated.pop(0)
            oldest.unlink(missing_ok=True)
