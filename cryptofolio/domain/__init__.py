"""Domain layer: canonical models and enums."""

from cryptofolio.domain.enums import Network
from cryptofolio.domain.models import AdminState, NormalizedBalance, Session, SessionUser

__all__ = ["AdminState", "Network", "NormalizedBalance", "Session", "SessionUser"]
