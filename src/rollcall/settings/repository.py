from __future__ import annotations

from typing import Protocol

from .model import SchoolSettings


class SettingsRepository(Protocol):
    def get(self) -> SchoolSettings:
        raise NotImplementedError

    def update(self, **changes) -> SchoolSettings:
        """Shallow-merge changes into the singleton record and return it."""

        raise NotImplementedError
