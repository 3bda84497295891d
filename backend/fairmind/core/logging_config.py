"""
Logging setup
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger once per process"""
    global _configured
    if _configured:
        return

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    # uvicorn access lines duplicate our own request logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _configured = True

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
