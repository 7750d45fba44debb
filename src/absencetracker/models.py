# src/absencetracker/models.py
from dataclasses import dataclass
from datetime import date
from typing import Dict, Any

from absencetracker.calendar_logic import calendar_day


@dataclass
class AbsenceRecord:
    """Ein Abwesenheitstag mit Grund (Kategorie-Label als Text)."""
    day: date                     # Kalendertag, ohne Uhrzeit
    reason: str

    @property
    def month_index(self) -> int:
        return self.day.month - 1     # 0=Januar … 11=Dezember

    @property
    def year(self) -> int:
        return self.day.year

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "reason": self.reason,
            "month": self.month_index,
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AbsenceRecord":
        # ältere Exporte speichern den Zeitpunkt unter 'date' (ISO mit Uhrzeit)
        raw = data.get("day") or data.get("date")
        if raw is None:
            raise KeyError("day")
        # month/year werden aus dem Tag neu abgeleitet
        return cls(day=calendar_day(raw), reason=data.get("reason") or "")
