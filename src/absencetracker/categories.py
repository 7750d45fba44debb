import json
import logging
from typing import List, Optional

from absencetracker.data import REASONS_KEY, SELECTED_REASON_KEY, PersistencePort, persist
from absencetracker.errors import PersistenceReadFailure

# Krankheit, Urlaub, Reservedienst, Besorgungen, Sonstiges
DEFAULT_REASONS = ['מחלה', 'חופש', 'מילואים', 'סידורים', 'אחר']


class CategoryRegistry:
    """Geordnete Liste der Abwesenheitsgründe plus aktuell gewählter Grund."""

    def __init__(self, port: PersistencePort, key: str = REASONS_KEY,
                 selected_key: str = SELECTED_REASON_KEY, retries: int = 0):
        self.port = port
        self.key = key
        self.selected_key = selected_key
        self.retries = retries
        self._labels: List[str] = list(DEFAULT_REASONS)
        self._selected = self._labels[0]

    def load(self) -> "CategoryRegistry":
        labels = self._read(self.key)
        if labels is None:
            labels = list(DEFAULT_REASONS)
        elif not isinstance(labels, list) or not all(isinstance(lbl, str) for lbl in labels):
            raise PersistenceReadFailure(self.key, TypeError("expected a list of labels"))
        selected = self._read(self.selected_key)

        self._labels = []
        for label in labels:
            if label and label not in self._labels:
                self._labels.append(label)
        # gespeicherte Auswahl nur übernehmen, wenn sie noch existiert
        if selected in self._labels:
            self._selected = selected
        else:
            self._selected = self._labels[0] if self._labels else ''
        return self

    def _read(self, key: str):
        blob = self.port.get(key)
        if blob is None:
            return None
        try:
            return json.loads(blob)
        except ValueError as e:
            logging.error(f"Could not decode '{key}': {e}")
            raise PersistenceReadFailure(key, e) from e

    def save(self):
        persist(self.port, self.key, json.dumps(self._labels, ensure_ascii=False), self.retries)
        persist(self.port, self.selected_key, json.dumps(self._selected, ensure_ascii=False), self.retries)

    def add(self, label: str) -> bool:
        if not label or label in self._labels:
            return False
        self._labels.append(label)
        # neuer Grund wird direkt ausgewählt
        self._selected = label
        self.save()
        return True

    def remove(self, label: str):
        if label in self._labels:
            self._labels.remove(label)
        if self._selected == label:
            self._selected = self._labels[0] if self._labels else ''
        self.save()

    def select(self, label: str):
        # ungeprüft: der Aufrufer bietet nur vorhandene Gründe an
        self._selected = label
        self.save()

    def list(self) -> List[str]:
        return list(self._labels)

    def current(self) -> Optional[str]:
        return self._selected or None

    def __contains__(self, label):
        return label in self._labels

    def __len__(self):
        return len(self._labels)
