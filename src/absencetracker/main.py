# src/absencetracker/main.py

import logging
from dataclasses import dataclass
from datetime import date

from . import statistics
from .calendar_logic import Clock, calendar_day
from .categories import CategoryRegistry
from .config import load_config
from .data import Database
from .errors import InvalidReason, PersistenceReadFailure, PersistenceWriteFailure
from .export_utils import export_records_csv
from .store import AbsenceStore


@dataclass
class Tracker:
    db: Database
    store: AbsenceStore
    registry: CategoryRegistry
    clock: Clock


def open_tracker(cfg: dict = None, db: Database = None, clock: Clock = None) -> Tracker:
    """Öffnet die Datenbank und lädt Abwesenheiten und Kategorien."""
    cfg = cfg or load_config()
    keys = cfg['storage_keys']
    retries = cfg.get('write_retries', 0)
    db = db if db is not None else Database(cfg['db_path'])
    registry = CategoryRegistry(db, keys['reasons'], keys['selected_reason'], retries).load()
    store = AbsenceStore(db, keys['absences'], retries, registry=registry).load()
    return Tracker(db, store, registry, clock or Clock())


def input_day(clock: Clock) -> date:
    s = input("  Datum (YYYY-MM-DD) [leer=heute]: ").strip()
    return clock.today() if not s else calendar_day(s)


def choose_reason(registry: CategoryRegistry, prompt: str):
    """Nummerierte Auswahl; leere Eingabe = None."""
    labels = registry.list()
    for i, label in enumerate(labels, 1):
        marker = "*" if label == registry.current() else " "
        print(f"   {marker}{i}) {label}")
    s = input(prompt).strip()
    if not s:
        return None
    if not s.isdigit() or not 1 <= int(s) <= len(labels):
        raise ValueError(f"Keine Kategorie Nr. {s}")
    return labels[int(s) - 1]


def mark_day(t: Tracker):
    day = input_day(t.clock)
    rec = t.store.find(day)
    if rec:
        print(f"  Aktuell eingetragen: {rec.reason}")
    label = choose_reason(t.registry, "  Grund [leer=ausgewählt]: ")
    if label is not None:
        t.registry.select(label)
    t.store.upsert(day, t.registry.current())
    print(f"✅ {day.isoformat()}: {t.registry.current()}")


def clear_day(t: Tracker):
    day = input_day(t.clock)
    t.store.remove(day)
    print(f"✅ {day.isoformat()}: anwesend")


def show_day(t: Tracker):
    day = input_day(t.clock)
    rec = t.store.find(day)
    print(f"  {day.isoformat()}: {rec.reason if rec else 'anwesend'}")


def add_category(t: Tracker):
    label = input("  Neue Kategorie: ").strip()
    if t.registry.add(label):
        print(f"✅ Hinzugefügt und ausgewählt: {label}")
    else:
        print("  Kategorie ist leer oder existiert bereits.")


def remove_category(t: Tracker):
    label = choose_reason(t.registry, "  Kategorie löschen [leer=abbrechen]: ")
    if label is None:
        return
    if input(f"  Kategorie \"{label}\" löschen? (j/n) ").lower() != "j":
        return
    t.registry.remove(label)
    print(f"✅ Gelöscht: {label}")


def show_statistics(t: Tracker):
    this_year = t.clock.today().year
    s = input(f"  Jahr [{this_year}]: ").strip()
    year = int(s) if s else this_year
    summary = statistics.summarize(t.store.all(), year)
    print(f"\n📊 Abwesenheitstage gesamt: {summary['total']}")
    print(f"   Häufigster Grund: {summary['top_reason'] or '-'}")
    for reason, n in summary['reasons'].items():
        print(f"   {reason}: {n}")
    print(f"   Pro Monat {year}:")
    for entry in statistics.monthly_series(t.store.all(), year):
        print(f"   {entry['name']}: {entry['days']}")


def backup(t: Tracker):
    fn = input("  Backup-Datei (.sql): ").strip()
    t.db.export_to_sql(fn)
    print(f"✅ Datenbank exportiert nach {fn}")


def restore(t: Tracker):
    fn = input("  Backup-Datei (.sql): ").strip()
    if input("  Achtung: Alle aktuellen Einträge werden überschrieben. Weiter? (j/n) ").lower() != "j":
        return
    t.db.import_from_sql(fn)
    # Speicher an den wiederhergestellten Bestand angleichen
    t.registry.load()
    t.store.load()
    print(f"✅ Datenbank wiederhergestellt: {len(t.store)} Abwesenheiten")


def export_csv(t: Tracker):
    fn = input("  CSV-Datei: ").strip()
    n = export_records_csv(t.store.all(), fn)
    print(f"✅ {n} Abwesenheiten exportiert nach {fn}")


MENU = [
    ("1", "Abwesenheit eintragen", mark_day),
    ("2", "Abwesenheit löschen", clear_day),
    ("3", "Tag anzeigen", show_day),
    ("4", "Kategorie hinzufügen", add_category),
    ("5", "Kategorie löschen", remove_category),
    ("6", "Statistik", show_statistics),
    ("7", "DB Backup", backup),
    ("8", "CSV Export", export_csv),
    ("9", "DB Restore", restore),
]


def run_wizard(db: Database = None, cfg: dict = None, clock: Clock = None):
    logging.basicConfig(level=logging.WARNING)
    print("🎯 Absence Tracker 🎯")
    owns_db = db is None
    t = open_tracker(cfg, db, clock)
    actions = {key: fn for key, _, fn in MENU}
    try:
        while True:
            print()
            for key, text, _ in MENU:
                print(f"  [{key}] {text}")
            print("  [0] Beenden")
            choice = input("> ").strip()
            if choice == "0":
                break
            action = actions.get(choice)
            if action is None:
                continue
            try:
                action(t)
            except PersistenceWriteFailure as e:
                # Änderung bleibt im Speicher, ist aber nicht gesichert
                print(f"⚠️  Änderung übernommen, aber nicht gespeichert: {e}")
            except (InvalidReason, PersistenceReadFailure) as e:
                print(f"❌ {e}")
            except (ValueError, OSError) as e:
                logging.error(f"{action.__name__} failed: {e}")
                print(f"❌ {e}")
    finally:
        if owns_db:
            t.db.close()


if __name__ == "__main__":
    run_wizard()
