"""Infrastructure models package exports."""
from .base import Base, metadata
from .user import UserModel
from .contest import ContestModel
from .payment import PaymentModel
from .participation import ParticipationModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "ContestModel",
    "PaymentModel",
    "ParticipationModel",
]
