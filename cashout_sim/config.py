# cashout_sim/config.py

import logging
import os

# --- Logging ---
LOG_LEVEL = os.getenv("CASHOUT_SIM_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = os.getenv("CASHOUT_SIM_LOG_FORMAT", "%(levelname)s %(name)s: %(message)s")

# --- Terminal output ---
# Longer timelines are truncated when printed to avoid flooding the terminal
MAX_ROWS = int(os.getenv("CASHOUT_SIM_MAX_ROWS", "120"))


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
