"""
Key/value preference store.

Keeps the state restored between runs: the vault path, the camera, the UI
language and the navigation path (as node ids, re-resolved against the
next scan).
"""

import copy
import json
from typing import Any, Dict, Optional

import structlog

from .connection import Database
from .models import Preference

logger = structlog.get_logger()

DEFAULTS: Dict[str, Any] = {
    "vault_path": None,
    "camera": {"x": 0.0, "y": 0.0, "scale": 1.0},
    "language": "en",
    "navigation": [],
}


class PreferenceStore:
    """Typed access to the preferences table."""

    def __init__(self, database: Database):
        self.database = database

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        with self.database.get_session() as session:
            row = session.query(Preference).filter(Preference.key == key).first()
            if row is None:
                return copy.deepcopy(DEFAULTS.get(key)) if default is None else default
            return json.loads(row.value_json)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self.database.get_session() as session:
            row = session.query(Preference).filter(Preference.key == key).first()
            if row is None:
                session.add(Preference(key=key, value_json=payload))
            else:
                row.value_json = payload
        logger.debug("Preference saved", key=key)

    def load_all(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in DEFAULTS}

    def save_all(self, values: Dict[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)
