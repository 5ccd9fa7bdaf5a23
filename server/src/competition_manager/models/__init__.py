"""Database models for Competition Manager"""

from competition_manager.models.certificate import Certificate, EventPass
from competition_manager.models.competition import Competition, CompetitionLevel, Region
from competition_manager.models.registration import (
    PaymentStatus,
    Registration,
    RegistrationStatus,
)

__all__ = [
    "Competition",
    "CompetitionLevel",
    "Region",
    "Registration",
    "RegistrationStatus",
    "PaymentStatus",
    "Certificate",
    "EventPass",
]
