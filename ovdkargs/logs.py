"""DPDK log verbosity ordinals and their mapping onto stdlib logging."""

import logging

# Ordinal -> (DPDK name, stdlib level). Higher ordinals include everything below.
_LEVELS = {
    1: ("EMERGENCY", logging.CRITICAL),
    2: ("ALERT", logging.CRITICAL),
    3: ("CRITICAL", logging.CRITICAL),
    4: ("ERROR", logging.ERROR),
    5: ("WARNING", logging.WARNING),
    6: ("NOTICE", logging.INFO),
    7: ("INFORMATION", logging.INFO),
    8: ("DEBUG", logging.DEBUG),
}


def level_name(ordinal: int) -> str:
    """DPDK name of a verbosity ordinal, e.g. 4 -> ``ERROR``."""
    return _LEVELS[ordinal][0]


def to_logging_level(ordinal: int) -> int:
    return _LEVELS[ordinal][1]


def setup_logging(log_level: int):
    """Configure root logging from the parsed ``-v`` ordinal."""
    logging.basicConfig(
        level=to_logging_level(log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
