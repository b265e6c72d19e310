"""Browser tab switcher client for the ShimTabs loopback protocol."""

import logging
import os
import sys
from datetime import datetime


# Set up logging
def setup_logging(log_file=None, level=logging.INFO, stream=None):
    """Set up logging for the application.

    Args:
        log_file (str, optional): Path to log file. If None, uses default location.
        level (int, optional): Root log level.
        stream (file, optional): Console stream. If None, uses stdout.
    """
    if log_file is None:
        # Default log file next to the package
        log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "logs")
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        timestamp = datetime.now().strftime("%Y%m%d")
        log_file = os.path.join(log_dir, f"shimtabs_{timestamp}.log")

    if stream is None:
        stream = sys.stdout

    # Configure logging
    log_format = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(stream)],
    )

    logger = logging.getLogger("ShimTabs")
    logger.info(f"Logging initialized to {log_file}")

    return logger


# Version information
__version__ = "1.0.0"
