import json
import logging
import os

from absencetracker.data import ABSENCES_KEY, REASONS_KEY, SELECTED_REASON_KEY


def _base_dir():
    base = os.path.join(os.path.expanduser('~'), '.absencetracker')
    os.makedirs(base, exist_ok=True)
    return base


def _config_path():
    return os.path.join(_base_dir(), 'absencetracker_config.json')


def default_config() -> dict:
    return {
        'db_path': os.path.join(_base_dir(), 'absencetracker.db'),
        'write_retries': 1,
        'storage_keys': {
            'absences': ABSENCES_KEY,
            'reasons': REASONS_KEY,
            'selected_reason': SELECTED_REASON_KEY,
        },
    }


def load_config():
    cfg = default_config()
    path = _config_path()
    if not os.path.exists(path):
        return cfg
    try:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        logging.warning(f"Config file {path} unreadable, using defaults: {e}")
        return cfg
    if not isinstance(loaded, dict):
        logging.warning(f"Config file {path} is not a JSON object, using defaults")
        return cfg
    # storage_keys einzeln überschreibbar
    keys = dict(cfg['storage_keys'])
    keys.update(loaded.pop('storage_keys', None) or {})
    cfg.update(loaded)
    cfg['storage_keys'] = keys
    return cfg


def save_config(cfg: dict):
    path = _config_path()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
