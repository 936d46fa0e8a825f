import logging

class PrefixLoggerAdapter(logging.LoggerAdapter):
    """ A logger adapter that tags every message with the values in `extra`,
    e.g. `[websocket] Connected to ws://localhost:19131` """
    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        if not self.extra:
            return msg, kwargs
        prefix = " ".join(f"[{val}]" for val in self.extra.values())
        return super().process(f"{prefix} {msg}", kwargs)
