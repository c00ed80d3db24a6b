r"""
Shared helpers: option enumerations and logging configuration.
"""

from ._enum import ModeEnum, BandwidthRule, Normalization, DensityMethod, Backend
from .logging_config import setup_logging, enable_debug_logging, disable_debug_logging
