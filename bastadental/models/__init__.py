"""ORM models; importing this package registers every table on ``Base.metadata``."""

from bastadental.models.appointment import Appointment
from bastadental.models.availability import (
    DentistAvailability,
    DentistPermanentUnavailability,
    DentistTemporaryUnavailability,
)
from bastadental.models.base import Base
from bastadental.models.clinic import (
    ClinicPermanentUnavailability,
    ClinicTemporaryUnavailability,
)
from bastadental.models.dentist import Dentist
from bastadental.models.patient_note import PatientNote
from bastadental.models.user import User

__all__ = [
    "Appointment",
    "Base",
    "ClinicPermanentUnavailability",
    "ClinicTemporaryUnavailability",
    "Dentist",
    "DentistAvailability",
    "DentistPermanentUnavailability",
    "DentistTemporaryUnavailability",
    "PatientNote",
    "User",
]
