from __future__ import annotations

import asyncio
import logging

from clinic_booking.application.ports.wizard_store import WizardStorePort
from clinic_booking.application.use_cases.booking_wizard import BookingWizard

logger = logging.getLogger(__name__)


async def close_idle_sessions(store: WizardStorePort) -> int:
    """Evict idle wizards from the store and close them. Returns how many."""
    return await _close_all(store.evict_idle(), reason="idle")


async def close_all_sessions(store: WizardStorePort) -> int:
    return await _close_all(store.remove_all(), reason="shutdown")


async def sweep_sessions_periodically(store: WizardStorePort, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await close_idle_sessions(store)
        except Exception as e:
            logger.error("Session sweep failed", extra={"error": str(e)})


async def _close_all(wizards: list[BookingWizard], reason: str) -> int:
    for wizard in wizards:
        await wizard.close()
    if wizards:
        logger.info("Closed booking sessions", extra={"reason": reason, "sessions": len(wizards)})
    return len(wizards)
