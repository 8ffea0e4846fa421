# Database models

from app.models.profile import Profile
from app.models.tariff import Tariff, TariffPrice
from app.models.student import Student, StudentPayment
from app.models import policies  # noqa: F401  attaches row-security DDL

__all__ = [
    "Profile",
    "Tariff",
    "TariffPrice",
    "Student",
    "StudentPayment",
]
