"""Logging utilities for genoprep.

loguru handles all package logging. setup_logging() installs the console
sink (and an optional JSON file sink); WarnOnce keeps likely-misuse
warnings from repeating once per marker in batch runs.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <8}</level> | {message}"


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
) -> None:
    """Replace every loguru sink with genoprep's console (and file) sinks.

    Args:
        verbose: Log DEBUG records to stdout instead of INFO and above.
        log_file: Also write every DEBUG-and-above record to this file,
            one JSON object per line.
    """
    logger.remove()
    logger.add(
        sys.stdout,
        level="DEBUG" if verbose else "INFO",
        format=CONSOLE_FORMAT,
        colorize=True,
    )
    if log_file is not None:
        logger.add(log_file, level="DEBUG", serialize=True)


class WarnOnce:
    """Registry of warning sites that each fire at most once.

    A site is any hashable key (typically a short string naming the call
    site). Once a site has warned, later calls for it are silent until
    reset() is called.

    Example:
        >>> warnings = WarnOnce()
        >>> warnings.warn_if(True, "dominant", "Encoding only uses the first variant")
        True
        >>> warnings.warn_if(True, "dominant", "Encoding only uses the first variant")
        False
    """

    def __init__(self) -> None:
        self._fired: set = set()

    def warn_if(self, cond: bool, site, message: str) -> bool:
        """Log ``message`` as a warning if ``cond`` holds and ``site`` has not fired.

        Returns:
            True if the warning was emitted by this call.
        """
        if not cond or site in self._fired:
            return False
        self._fired.add(site)
        logger.warning(message)
        return True

    def has_fired(self, site) -> bool:
        return site in self._fired

    def reset(self) -> None:
        """Re-arm every site."""
        self._fired.clear()


# Process-wide warning sites shared by consolidators unless one is injected
CODING_WARNINGS = WarnOnce()
