import os
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Set

from ..exceptions import NotFoundError
from ..models import FileRecord


class DiskScanner:
    def list_files(self, root: Path, skip_dirs: Optional[Set[Path]] = None) -> List[FileRecord]:
        """
        Returns a FileRecord for every regular file under root.

        Unreadable subdirectories are logged and skipped, so a partial walk
        still returns everything collected up to that point.
        Symlinked directories are not followed; loops are not detected otherwise.

        Raises:
            NotFoundError: root does not exist or is not a directory. The
                optimizer treats this as fatal and aborts the run.
        """
        root = Path(root).resolve()
        if not root.exists():
            raise NotFoundError(f"Source directory does not exist: {root}")
        if not root.is_dir():
            raise NotFoundError(f"Source path is not a directory: {root}")

        skip = {Path(d).resolve() for d in (skip_dirs or set())}
        records = [FileRecord(path=p) for p in self._iter_files(root, skip)]
        logging.info(f"Found {len(records)} files under {root}")
        return records

    def _iter_files(self, root: Path, skip_dirs: Set[Path]) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()
            if current in skip_dirs:
                logging.debug(f"Skipping {current}")
                continue

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                if current == root:
                    raise NotFoundError(f"Cannot read source directory {root}: {e}") from e
                logging.warning(f"Cannot read directory {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                try:
                    if e.is_dir(follow_symlinks=False):
                        dirs.append(Path(e.path))
                    elif e.is_file():
                        files.append(Path(e.path))
                except OSError as err:
                    logging.warning(f"Cannot stat {e.path}: {err}")

            # Files of this directory come before its subdirectories
            for f in files:
                yield f

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)
