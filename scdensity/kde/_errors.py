r"""
Errors raised by the density engine.

All of them are input-validation failures: they are raised synchronously at
the offending call and never leave partial results behind.
"""


class DensityError(ValueError):
    r"""Base class for density engine errors."""


class InvalidInput(DensityError):
    r"""Too few cells, no dimensions, invalid weights or feature count."""


class DimensionMismatch(DensityError):
    r"""A vector length disagrees with the embedding's cells or dimensions."""


class DegenerateBandwidth(DensityError):
    r"""A dimension has zero spread and no bandwidth floor is configured."""
