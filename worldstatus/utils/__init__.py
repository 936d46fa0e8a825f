from .logger_adapters import PrefixLoggerAdapter

__all__ = ("PrefixLoggerAdapter",)
