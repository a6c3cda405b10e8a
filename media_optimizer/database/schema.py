"""
Database schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1

def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Catalog: one row per examined file, keyed by path
        conn.execute("""
        CREATE TABLE IF NOT EXISTS files (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            name            TEXT NOT NULL UNIQUE,  -- absolute path
            codec_or_mime   TEXT,                  -- codec if probed, else mime type
            converted       INTEGER NOT NULL DEFAULT 0,
            category        TEXT NOT NULL,
            first_seen_at   TEXT NOT NULL,
            last_seen_at    TEXT NOT NULL
        );
        """)

        # 3. Latest conversion outcome per source file
        conn.execute("""
        CREATE TABLE IF NOT EXISTS conversions (
            source          TEXT PRIMARY KEY,
            output          TEXT,
            kind            TEXT NOT NULL,
            status          TEXT NOT NULL,
            stderr          TEXT,
            recorded_at     TEXT NOT NULL
        );
        """)

        conn.execute("CREATE INDEX IF NOT EXISTS idx_files_category ON files(category);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_files_converted ON files(converted);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_conversions_status ON conversions(status);")

    logging.debug("Database schema initialized.")
