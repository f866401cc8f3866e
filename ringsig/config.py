"""Runtime configuration read from the environment."""

from __future__ import annotations

import logging
import os
from typing import Optional

# ------------------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------------------
DEFAULT_GROUP = os.getenv("RINGSIG_GROUP", "ed25519")
LOG_LEVEL = os.getenv("RINGSIG_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler using *level* or ``RINGSIG_LOG_LEVEL``."""

    name = (level or LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {name}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


__all__ = ["DEFAULT_GROUP", "LOG_FORMAT", "LOG_LEVEL", "configure_logging"]
