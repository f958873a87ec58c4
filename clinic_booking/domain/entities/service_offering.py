from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ServiceKind(str, Enum):
    REGULAR_CHECKUP = "regular_checkup"
    FOLLOW_UP = "follow_up"

    @property
    def consultation_type(self) -> int:
        """Numeric consultation type understood by the booking service."""
        return _CONSULTATION_TYPES[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_CONSULTATION_TYPES = {
    ServiceKind.REGULAR_CHECKUP: 1,
    ServiceKind.FOLLOW_UP: 2,
}

_DISPLAY_NAMES = {
    ServiceKind.REGULAR_CHECKUP: "Regular checkup",
    ServiceKind.FOLLOW_UP: "Follow-up visit",
}


@dataclass(frozen=True)
class ServiceOffering:
    kind: ServiceKind
    price: Decimal
    duration_minutes: int


@dataclass(frozen=True)
class ServiceCatalog:
    regular_checkup: ServiceOffering | None = None
    follow_up: ServiceOffering | None = None

    def get(self, kind: ServiceKind) -> ServiceOffering | None:
        if kind is ServiceKind.REGULAR_CHECKUP:
            return self.regular_checkup
        return self.follow_up

    def offered_kinds(self) -> list[ServiceKind]:
        return [kind for kind in ServiceKind if self.get(kind) is not None]


@dataclass(frozen=True)
class ServiceDetails:
    type: int  # consultation type sent with the booking
    name: str
    price: Decimal
    duration: int  # minutes

    @classmethod
    def from_offering(cls, offering: ServiceOffering) -> ServiceDetails:
        return cls(
            type=offering.kind.consultation_type,
            name=offering.kind.display_name,
            price=offering.price,
            duration=offering.duration_minutes,
        )
