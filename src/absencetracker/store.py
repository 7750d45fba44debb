import json
import logging
from datetime import date
from typing import Dict, List, Optional

from absencetracker.calendar_logic import DayLike, calendar_day
from absencetracker.categories import CategoryRegistry
from absencetracker.data import ABSENCES_KEY, PersistencePort, persist
from absencetracker.errors import InvalidReason, PersistenceReadFailure
from absencetracker.models import AbsenceRecord


class AbsenceStore:
    """
    Hält alle Abwesenheitstage, höchstens einen Eintrag pro Kalendertag.
    Jede Änderung wird sofort über den PersistencePort geschrieben; schlägt das
    fehl, bleibt die Änderung im Speicher und PersistenceWriteFailure wird
    an den Aufrufer weitergereicht.
    """

    def __init__(self, port: PersistencePort, key: str = ABSENCES_KEY, retries: int = 0,
                 registry: Optional[CategoryRegistry] = None):
        self.port = port
        # nur zur Prüfung neuer Einträge; alte Gründe werden nie nachgeprüft
        self.registry = registry
        self.key = key
        self.retries = retries
        self._records: Dict[date, AbsenceRecord] = {}

    def load(self) -> "AbsenceStore":
        blob = self.port.get(self.key)
        records: Dict[date, AbsenceRecord] = {}
        if blob:
            try:
                entries = json.loads(blob)
                for entry in entries:
                    rec = AbsenceRecord.from_dict(entry)
                    if not rec.reason:
                        logging.warning(f"Skipping absence without reason on {rec.day.isoformat()}")
                        continue
                    # doppelte Tage (Altbestand): letzter Eintrag gewinnt
                    records.pop(rec.day, None)
                    records[rec.day] = rec
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logging.error(f"Could not decode '{self.key}': {e}")
                raise PersistenceReadFailure(self.key, e) from e
        self._records = records
        logging.info(f"[AbsenceTracker] {len(records)} absences loaded.")
        return self

    def save(self):
        blob = json.dumps([rec.to_dict() for rec in self._records.values()], ensure_ascii=False)
        persist(self.port, self.key, blob, self.retries)

    def upsert(self, day: DayLike, reason: str):
        if not reason:
            raise InvalidReason("An absence needs a reason")
        if self.registry is not None and reason not in self.registry:
            raise InvalidReason(f"Unknown reason: {reason}")
        d0 = calendar_day(day)
        # vorhandenen Eintrag entfernen, dann neu anhängen
        self._records.pop(d0, None)
        self._records[d0] = AbsenceRecord(d0, reason)
        self.save()

    def remove(self, day: DayLike):
        d0 = calendar_day(day)
        self._records.pop(d0, None)
        self.save()

    def clear(self):
        self._records.clear()
        self.save()

    def find(self, day: DayLike) -> Optional[AbsenceRecord]:
        return self._records.get(calendar_day(day))

    def all(self) -> List[AbsenceRecord]:
        return list(self._records.values())

    def records_for_year(self, year: int) -> List[AbsenceRecord]:
        return [rec for rec in self._records.values() if rec.year == year]

    def __len__(self):
        return len(self._records)

    def __contains__(self, day):
        return calendar_day(day) in self._records
