from typing import Dict, Iterable, List, Optional, Any

from absencetracker.models import AbsenceRecord

MONTH_NAMES = ['ינואר', 'פברואר', 'מרץ', 'אפריל', 'מאי', 'יוני',
               'יולי', 'אוגוסט', 'ספטמבר', 'אוקטובר', 'נובמבר', 'דצמבר']


def reason_frequency(records: Iterable[AbsenceRecord]) -> Dict[str, int]:
    """
    Anzahl Tage je Grund, unabhängig vom Datum. Reihenfolge der Schlüssel =
    erstes Auftreten. Gelöschte Kategorien zählen mit ihrem gespeicherten Text.
    """
    stats: Dict[str, int] = {}
    for rec in records:
        stats[rec.reason] = stats.get(rec.reason, 0) + 1
    return stats


def monthly_counts(records: Iterable[AbsenceRecord], year: int) -> List[int]:
    """12 Zähler (Index 0=Januar … 11=Dezember); andere Jahre fallen raus."""
    counts = [0] * 12
    for rec in records:
        if rec.year == year:
            counts[rec.month_index] += 1
    return counts


def top_reason(records: Iterable[AbsenceRecord]) -> Optional[str]:
    """Häufigster Grund; bei Gleichstand gewinnt der zuerst aufgetretene."""
    best, best_count = None, 0
    for reason, count in reason_frequency(records).items():
        if count > best_count:
            best, best_count = reason, count
    return best


def total_absences(records: Iterable[AbsenceRecord]) -> int:
    return sum(1 for _ in records)


def reason_series(records: Iterable[AbsenceRecord]) -> List[Dict[str, Any]]:
    return [{'name': reason, 'value': n} for reason, n in reason_frequency(records).items()]


def monthly_series(records: Iterable[AbsenceRecord], year: int) -> List[Dict[str, Any]]:
    counts = monthly_counts(records, year)
    return [{'name': name, 'days': counts[i]} for i, name in enumerate(MONTH_NAMES)]


def summarize(records: Iterable[AbsenceRecord], year: int) -> Dict[str, Any]:
    """
    Gesamt-Zusammenfassung:
      total      : Anzahl Abwesenheitstage insgesamt
      top_reason : häufigster Grund (oder None)
      year       : Jahr der Monatsauswertung
      reasons    : Grund -> Anzahl
      months     : 12 Monatszähler für `year`
    """
    records = list(records)
    return {
        'total': total_absences(records),
        'top_reason': top_reason(records),
        'year': year,
        'reasons': reason_frequency(records),
        'months': monthly_counts(records, year),
    }
