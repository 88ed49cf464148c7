import logging
import os
import sys


def get_logger():
    logger = logging.getLogger("digisig")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(os.getenv("DIGISIG_LOG_LEVEL", "INFO").upper())
    return logger
