from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clinic_booking.application.use_cases.booking_wizard import BookingWizard


class WizardStorePort(ABC):
    @abstractmethod
    def add(self, wizard: "BookingWizard") -> str:
        """Register an open wizard. Returns its session id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "BookingWizard | None":
        """Look up a wizard; a hit counts as activity on the session."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, session_id: str) -> "BookingWizard | None":
        """Forget a wizard. The caller is responsible for closing it."""
        raise NotImplementedError

    @abstractmethod
    def evict_idle(self) -> list["BookingWizard"]:
        """Forget wizards idle past the timeout and return them for closing."""
        raise NotImplementedError

    @abstractmethod
    def remove_all(self) -> list["BookingWizard"]:
        raise NotImplementedError
