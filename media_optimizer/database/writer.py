import logging
import sqlite3
from pathlib import Path
from typing import Iterable

from ..exceptions import CatalogWriteError
from ..models import FileRecord, ConversionResult
from .db import DBManager
from .ops import DBOperations


class CatalogWriter:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def write(self, records: Iterable[FileRecord], results: Iterable[ConversionResult] = ()) -> Path:
        """
        Upserts one row per record (and one per conversion result) in a single
        transaction. Creates the database if it does not exist yet.

        Raises:
            CatalogWriteError: the database could not be created or written.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with DBManager(self.db_path) as conn:
                db_ops = DBOperations(conn)
                with conn:
                    count = 0
                    for rec in records:
                        db_ops.upsert_file_record(rec)
                        count += 1
                    for result in results:
                        db_ops.record_conversion(result)
        except (sqlite3.Error, OSError) as e:
            raise CatalogWriteError(f"Failed to write catalog {self.db_path}: {e}") from e

        logging.info(f"Catalog written: {count} files -> {self.db_path}")
        return self.db_path
