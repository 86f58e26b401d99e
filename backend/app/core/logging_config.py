"""Logging setup for the PhysioDesk backend."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the ``backend`` logger namespace.

    Safe to call more than once; later calls only adjust the level.
    """
    global _configured
    root = logging.getLogger("backend")
    root.setLevel(level)
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        _configured = True
    return root
