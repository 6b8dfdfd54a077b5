"""Logger factory for gptbridge.

gptbridge is a library: it never configures handlers or levels.  The
package logger carries a ``NullHandler`` so records are dropped unless the
host application configures logging (for example with
``logging.basicConfig`` or handlers on the ``gptbridge`` logger).
"""

from __future__ import annotations

import logging

_ROOT_LOGGER = "gptbridge"

logging.getLogger(_ROOT_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a gptbridge module.

    Args:
        name: Module name (e.g., ``"request_builder"``, ``"providers"``).

    Returns:
        A logger instance under the ``gptbridge`` namespace.
    """
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")
