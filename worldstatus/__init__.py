from .models import WorldStatus, StatusRecord
from .core import StatusPublisher, StatusState

__all__ = ("WorldStatus", "StatusRecord", "StatusPublisher", "StatusState")
