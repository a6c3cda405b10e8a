import sqlite3
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from ..models import ConversionResult, FileRecord

class DBOperations:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def upsert_file_record(self, rec: FileRecord) -> int:
        """
        Inserts or updates a catalog row keyed by the file's path.
        Re-running on an unchanged tree leaves the logical contents unchanged.
        """
        now_iso = datetime.now(UTC).isoformat()
        cur = self.conn.cursor()
        name = str(rec.path)

        cur.execute("SELECT id FROM files WHERE name = ?", (name,))
        row = cur.fetchone()

        if row is None:
            cur.execute("""
                INSERT INTO files (name, codec_or_mime, converted, category, first_seen_at, last_seen_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (name, rec.codec_or_mime, int(rec.converted), rec.category.value, now_iso, now_iso))

            if cur.lastrowid is None:
                raise RuntimeError("Database INSERT failed to return a row ID.")
            return cur.lastrowid

        file_id = int(row[0])
        cur.execute("""
            UPDATE files
            SET codec_or_mime = ?, converted = ?, category = ?, last_seen_at = ?
            WHERE id = ?
        """, (rec.codec_or_mime, int(rec.converted), rec.category.value, now_iso, file_id))
        return file_id

    def record_conversion(self, result: ConversionResult):
        """Keeps the latest conversion outcome per source path."""
        output = str(result.output_path) if result.output_path else None
        self.conn.execute(
            """
            INSERT OR REPLACE INTO conversions (source, output, kind, status, stderr, recorded_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (str(result.job.source), output, result.job.kind.value, result.status,
             result.stderr or None, datetime.now(UTC).isoformat()),
        )

    def fetch_catalog(self) -> List[Tuple[str, Optional[str], bool]]:
        """Returns (name, codec_or_mime, converted) in insertion order."""
        cur = self.conn.cursor()
        cur.execute("SELECT name, codec_or_mime, converted FROM files ORDER BY id")
        return [(name, value, bool(converted)) for name, value, converted in cur.fetchall()]

    def fetch_pending(self) -> List[Tuple[str, str, Optional[str]]]:
        """Returns (name, category, codec_or_mime) for media not yet converted."""
        cur = self.conn.cursor()
        cur.execute("""
            SELECT name, category, codec_or_mime FROM files
            WHERE converted = 0 AND category IN ('image', 'video')
            ORDER BY id
        """)
        return cur.fetchall()

    def fetch_failed_conversions(self) -> List[Tuple[str, str, Optional[str]]]:
        """Returns (source, kind, stderr) for conversions that failed."""
        cur = self.conn.cursor()
        cur.execute("SELECT source, kind, stderr FROM conversions WHERE status = 'failed' ORDER BY source")
        return cur.fetchall()
