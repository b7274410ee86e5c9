from __future__ import annotations
import math
import logging

def get_logger(name: str = "arbor") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def is_finite(*values: float) -> bool:
    return all(math.isfinite(float(v)) for v in values)
