"""
Logging configuration for scdensity.

Set the SCDENSITY_DEBUG environment variable to get per-feature timings and
bandwidth details from the engine:

    export SCDENSITY_DEBUG=1
    python your_script.py

Or in Python:
    import scdensity as scd
    scd.utils.enable_debug_logging()
"""

import logging
import os
import sys


def setup_logging(level: str = None) -> None:
    """
    Configure the ``scdensity`` logger.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR').
               If None, checks the SCDENSITY_DEBUG environment variable.
               If SCDENSITY_DEBUG is set to '1', 'true', or 'yes', enables DEBUG logging.
    """
    if level is None:
        debug_mode = os.getenv('SCDENSITY_DEBUG', '').lower() in ('1', 'true', 'yes')
        level = 'DEBUG' if debug_mode else 'INFO'

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger('scdensity')
    logger.setLevel(numeric_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric_level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(numeric_level)

    if numeric_level == logging.DEBUG:
        print(f"✓ scdensity debug logging enabled (level: {level})", file=sys.stderr)


def enable_debug_logging() -> None:
    """Enable DEBUG level logging for all scdensity components."""
    setup_logging('DEBUG')


def disable_debug_logging() -> None:
    """Disable debug logging (set to INFO level)."""
    setup_logging('INFO')


if os.getenv('SCDENSITY_DEBUG', '').lower() in ('1', 'true', 'yes'):
    setup_logging('DEBUG')
