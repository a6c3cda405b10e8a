#!/usr/bin/env python

import argparse
import sqlite3
from pathlib import Path

from media_optimizer.database.ops import DBOperations


def connect_db(db_path: Path) -> sqlite3.Connection:
    if not db_path.exists():
        raise SystemExit(f"DB not found: {db_path}")
    return sqlite3.connect(db_path)


def list_files(conn: sqlite3.Connection):
    rows = DBOperations(conn).fetch_catalog()
    if not rows:
        print("Catalog is empty.")
        return

    print("converted | codec_or_mime        | name")
    print("----------+----------------------+-----")
    for name, value, converted in rows:
        print(f"{('yes' if converted else 'no').ljust(9)} | {(value or '').ljust(20)} | {name}")


def list_pending(conn: sqlite3.Connection):
    rows = DBOperations(conn).fetch_pending()
    if not rows:
        print("All media files are converted.")
        return

    print("Media files not yet converted:")
    print("category | codec_or_mime        | name")
    print("---------+----------------------+-----")
    for name, category, value in rows:
        print(f"{category.ljust(8)} | {(value or '').ljust(20)} | {name}")


def list_failed(conn: sqlite3.Connection):
    rows = DBOperations(conn).fetch_failed_conversions()
    if not rows:
        print("No failed conversions recorded.")
        return

    print("Failed conversions:")
    for source, kind, stderr in rows:
        print(f"- {source} ({kind})")
        if stderr:
            for line in stderr.splitlines()[-3:]:
                print(f"    {line}")


def show_file(conn: sqlite3.Connection, path: Path):
    cur = conn.cursor()
    candidates = {str(path), path.as_posix()}
    row = None
    for cand in candidates:
        cur.execute("""
            SELECT f.id, f.name, f.category, f.codec_or_mime, f.converted, f.first_seen_at, f.last_seen_at,
                   c.output, c.status
            FROM files f
            LEFT JOIN conversions c ON c.source = f.name
            WHERE f.name = ?
        """, (cand,))
        row = cur.fetchone()
        if row:
            break

    if not row:
        print(f"No catalog entry for path: {path}")
        return

    fid, name, category, value, converted, first_seen, last_seen, output, status = row
    print("File:")
    print(f"  id:             {fid}")
    print(f"  name:           {name}")
    print(f"  category:       {category}")
    print(f"  codec_or_mime:  {value}")
    print(f"  converted:      {'yes' if converted else 'no'}")
    print(f"  first_seen:     {first_seen}")
    print(f"  last_seen:      {last_seen}")
    if status:
        print(f"  conversion:     {status} -> {output or ''}")


def show_summary(conn: sqlite3.Connection):
    cur = conn.cursor()
    cur.execute("""
        SELECT category, SUM(converted), COUNT(*)
        FROM files
        GROUP BY category
        ORDER BY category
    """)
    rows = cur.fetchall()
    print("category | converted | total")
    print("---------+-----------+------")
    for category, converted, total in rows:
        print(f"{category.ljust(8)} | {str(converted or 0).rjust(9)} | {str(total).rjust(5)}")


def parse_args():
    p = argparse.ArgumentParser(description="Query helper for the media optimizer catalog (files.db).")
    p.add_argument("--db", required=True, help="Path to files.db (typically under your output directory)")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List every cataloged file")
    group.add_argument("--pending", action="store_true", help="List images/videos not yet converted")
    group.add_argument("--failed", action="store_true", help="List conversions that failed")
    group.add_argument("--path", help="Show the catalog entry for a path")
    group.add_argument("--summary", action="store_true", help="Counts per category")
    return p.parse_args()


def main():
    args = parse_args()
    db_path = Path(args.db).resolve()
    conn = connect_db(db_path)

    try:
        if args.list:
            list_files(conn)
        elif args.pending:
            list_pending(conn)
        elif args.failed:
            list_failed(conn)
        elif args.path:
            show_file(conn, Path(args.path).resolve())
        elif args.summary:
            show_summary(conn)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
