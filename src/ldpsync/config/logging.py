"""Logging setup for ldpsync entry points."""

from __future__ import annotations

import logging

# httpx logs every request line at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(
    *,
    level: int = logging.INFO,
    transport_level: int = logging.WARNING,
    force: bool = False,
) -> None:
    """Initialise the root logger with the CLI format.

    ``transport_level`` applies to the HTTP stack loggers so repository calls stay
    quiet unless debugging. Pass ``force=True`` to reconfigure in tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, transport_level))
