from .base_unit import BaseUnit
from .timer import Timer

__all__ = ("BaseUnit", "Timer")
