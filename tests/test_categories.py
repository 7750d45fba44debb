import json

import pytest

from absencetracker.categories import DEFAULT_REASONS, CategoryRegistry
from absencetracker.data import Database
from absencetracker.errors import PersistenceReadFailure, PersistenceWriteFailure


@pytest.fixture
def db():
    db = Database(':memory:')
    yield db
    db.close()


@pytest.fixture
def registry(db):
    return CategoryRegistry(db).load()


def test_defaults_when_nothing_stored(registry):
    assert registry.list() == ['מחלה', 'חופש', 'מילואים', 'סידורים', 'אחר']
    assert registry.current() == 'מחלה'


def test_add_appends_and_selects(registry, db):
    assert registry.add('קורס') is True
    assert registry.list()[-1] == 'קורס'
    assert registry.current() == 'קורס'
    assert json.loads(db.get('work_reasons'))[-1] == 'קורס'
    assert json.loads(db.get('work_selected_reason')) == 'קורס'


def test_add_duplicate_rejected(registry):
    assert registry.add('Course') is True
    registry.select('חופש')
    assert registry.add('Course') is False
    assert registry.list().count('Course') == 1
    assert registry.current() == 'חופש'


def test_add_is_case_sensitive(registry):
    assert registry.add('course') is True
    assert registry.add('Course') is True


def test_add_empty_rejected(registry, db):
    assert registry.add('') is False
    assert registry.list() == DEFAULT_REASONS
    assert db.get('work_reasons') is None


def test_remove_selected_picks_first_remaining(registry):
    registry.select('מילואים')
    registry.remove('מילואים')
    assert 'מילואים' not in registry.list()
    assert registry.current() == 'מחלה'


def test_remove_first_while_selected(registry):
    registry.remove('מחלה')
    assert registry.current() == 'חופש'


def test_remove_other_keeps_selection(registry):
    registry.select('אחר')
    registry.remove('חופש')
    assert registry.current() == 'אחר'


def test_remove_last_label_clears_selection(registry):
    for label in registry.list():
        registry.remove(label)
    assert registry.list() == []
    assert registry.current() is None


def test_remove_unknown_label_is_noop(registry):
    registry.remove('nope')
    assert registry.list() == DEFAULT_REASONS
    assert registry.current() == 'מחלה'


def test_select_is_unchecked(registry):
    registry.select('whatever')
    assert registry.current() == 'whatever'


def test_state_survives_reload(db, registry):
    registry.add('קורס')
    registry.remove('אחר')
    registry.select('חופש')
    reloaded = CategoryRegistry(db).load()
    assert reloaded.list() == ['מחלה', 'חופש', 'מילואים', 'סידורים', 'קורס']
    assert reloaded.current() == 'חופש'


def test_empty_set_survives_reload(db, registry):
    for label in registry.list():
        registry.remove(label)
    reloaded = CategoryRegistry(db).load()
    assert reloaded.list() == []
    assert reloaded.current() is None


def test_stale_selection_falls_back_to_first(db):
    db.set('work_reasons', json.dumps(['A', 'B']))
    db.set('work_selected_reason', json.dumps('gone'))
    registry = CategoryRegistry(db).load()
    assert registry.current() == 'A'


def test_reasons_without_selection_key(db):
    # Altbestand: nur die Liste ist gespeichert
    db.set('work_reasons', json.dumps(['B', 'A', 'B']))
    registry = CategoryRegistry(db).load()
    assert registry.list() == ['B', 'A']
    assert registry.current() == 'B'


def test_garbage_raises(db):
    db.set('work_reasons', json.dumps({'not': 'a list'}))
    with pytest.raises(PersistenceReadFailure):
        CategoryRegistry(db).load()


def test_write_failure_keeps_change():
    class BrokenPort:
        def get(self, key):
            return None

        def set(self, key, blob):
            raise PersistenceWriteFailure(key)

    registry = CategoryRegistry(BrokenPort()).load()
    with pytest.raises(PersistenceWriteFailure):
        registry.add('X')
    assert 'X' in registry
    assert registry.current() == 'X'
