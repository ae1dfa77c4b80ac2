"""
Shared logging configuration for the build pipeline.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger("nes_icons")


def set_verbosity(verbose: bool = False, silent: bool = False) -> None:
    """
    Adjust progress reporting.

    Only the amount of output changes; control flow is unaffected.

    Args:
        verbose: Report task completion and timings as well as titles
        silent: Report errors only
    """
    if silent:
        logger.setLevel(logging.ERROR)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)
