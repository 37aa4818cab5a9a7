from app.utils.clock import as_utc, utcnow
from app.utils.logger import setup_logging

__all__ = ["as_utc", "setup_logging", "utcnow"]
