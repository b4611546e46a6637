from __future__ import annotations

from dataclasses import replace

from ..database.memory import InMemoryDatabase
from .model import SchoolSettings
from .repository import SettingsRepository


class InMemorySettingsRepository(SettingsRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def get(self) -> SchoolSettings:
        with self._db.session():
            return self._db.settings

    def update(self, **changes) -> SchoolSettings:
        with self._db.session():
            self._db.settings = replace(self._db.settings, **changes)
            return self._db.settings
