from __future__ import annotations

import time
import uuid
from typing import Callable

from clinic_booking.application.ports.wizard_store import WizardStorePort
from clinic_booking.application.use_cases.booking_wizard import BookingWizard


class MemoryWizardStore(WizardStorePort):
    def __init__(
        self,
        idle_timeout_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._wizards: dict[str, BookingWizard] = {}
        self._last_touched: dict[str, float] = {}
        self._idle_timeout = idle_timeout_seconds
        self._clock = clock

    def add(self, wizard: BookingWizard) -> str:
        session_id = uuid.uuid4().hex
        self._wizards[session_id] = wizard
        self._last_touched[session_id] = self._clock()
        return session_id

    def get(self, session_id: str) -> BookingWizard | None:
        wizard = self._wizards.get(session_id)
        if wizard is not None:
            self._last_touched[session_id] = self._clock()
        return wizard

    def remove(self, session_id: str) -> BookingWizard | None:
        self._last_touched.pop(session_id, None)
        return self._wizards.pop(session_id, None)

    def evict_idle(self) -> list[BookingWizard]:
        cutoff = self._clock() - self._idle_timeout
        expired = [sid for sid, touched in self._last_touched.items() if touched <= cutoff]
        return [wizard for wizard in (self.remove(sid) for sid in expired) if wizard is not None]

    def remove_all(self) -> list[BookingWizard]:
        wizards = list(self._wizards.values())
        self._wizards.clear()
        self._last_touched.clear()
        return wizards

    def session_ids(self) -> list[str]:
        return list(self._wizards)
