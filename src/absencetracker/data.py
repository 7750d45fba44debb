import os
import sqlite3
from typing import Optional, Protocol
import logging

from absencetracker.errors import PersistenceReadFailure, PersistenceWriteFailure

ABSENCES_KEY = 'work_absences'
REASONS_KEY = 'work_reasons'
SELECTED_REASON_KEY = 'work_selected_reason'


class PersistencePort(Protocol):
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, blob: str) -> None:
        raise NotImplementedError


class Database:
    """Key-Value-Speicher auf SQLite; jeder Schlüssel hält einen JSON-Blob."""

    def __init__(self, db_path: str = None):
        try:
            self.db_path = db_path or os.path.join(os.path.expanduser("~"), ".absencetracker", "absencetracker.db")
            if self.db_path != ':memory:':
                os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            self._ensure_tables()
        except Exception as e:
            logging.error(f"Database connection error: {e}")
            raise

    def _ensure_tables(self):
        cur = self._open_conn().cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
          key TEXT PRIMARY KEY,
          value TEXT NOT NULL
        )""")
        self.conn.commit()

    def _open_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self.conn

    def get(self, key: str) -> Optional[str]:
        cur = self._open_conn().cursor()
        try:
            cur.execute("SELECT value FROM kv_store WHERE key=?", (key,))
            row = cur.fetchone()
        finally:
            cur.close()
        return row['value'] if row else None

    def set(self, key: str, blob: str) -> None:
        try:
            conn = self._open_conn()
            # with conn: commit bei Erfolg, rollback bei Fehler
            with conn:
                cur = conn.cursor()
                try:
                    cur.execute("REPLACE INTO kv_store (key, value) VALUES (?,?)", (key, blob))
                finally:
                    cur.close()
        except sqlite3.Error as e:
            logging.error(f"Persistence write error for '{key}': {e}")
            raise PersistenceWriteFailure(key, e) from e

    # Export/Import
    def export_to_sql(self, filename: str):
        """Dump aller Tabellen als SQL-Statements"""
        with open(filename, 'w', encoding='utf-8') as f:
            for line in self._open_conn().iterdump():
                f.write(f"{line}\n")

    @staticmethod
    def _read_dump(filename: str, script: str):
        """Dump in einer Scratch-DB ausführen und die kv_store-Zeilen liefern."""
        scratch = sqlite3.connect(':memory:')
        try:
            scratch.executescript(script)
            cur = scratch.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='kv_store'"
            )
            if cur.fetchone() is None:
                raise sqlite3.DatabaseError("dump contains no kv_store table")
            return scratch.execute("SELECT key, value FROM kv_store").fetchall()
        except sqlite3.Error as e:
            logging.error(f"Restore from {filename} rejected: {e}")
            raise PersistenceReadFailure(filename, e) from e
        finally:
            scratch.close()

    def import_from_sql(self, filename: str):
        """
        Inhalt von kv_store durch den Dump ersetzen. Der Dump wird vorher
        geprüft; bei einem Fehler bleibt der alte Bestand unverändert.
        """
        with open(filename, 'r', encoding='utf-8') as f:
            script = f.read()
        rows = self._read_dump(filename, script)
        self._ensure_tables()
        conn = self._open_conn()
        try:
            # eine Transaktion: DELETE + INSERT oder gar nichts
            with conn:
                cur = conn.cursor()
                try:
                    cur.execute("DELETE FROM kv_store")
                    cur.executemany("INSERT INTO kv_store (key, value) VALUES (?,?)", rows)
                finally:
                    cur.close()
        except sqlite3.Error as e:
            logging.error(f"Restore from {filename} failed: {e}")
            raise PersistenceWriteFailure(filename, e) from e
        logging.info(f"[AbsenceTracker] {len(rows)} entries restored from {filename}.")

    def close(self):
        """Schließe die Datenbankverbindung sauber"""
        if self.conn:
            self.conn.close()
            self.conn = None


def persist(port: PersistencePort, key: str, blob: str, retries: int = 0) -> None:
    """
    Schreibt `blob` unter `key`; bei PersistenceWriteFailure bis zu `retries`
    weitere Versuche. Der letzte Fehler wird weitergereicht.
    """
    attempt = 0
    while True:
        try:
            port.set(key, blob)
            return
        except PersistenceWriteFailure as e:
            if attempt >= retries:
                raise
            attempt += 1
            logging.warning(f"Retrying write of '{key}' ({attempt}/{retries}): {e}")
