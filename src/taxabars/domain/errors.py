from __future__ import annotations

"""
Domain Exception Hierarchy.

Separates structural faults (broken invariants, unknown identifiers) from
malformed input. User-level validation failures are not exceptions; they
are reported through `OverrideResult` values.
"""


class TaxabarsError(Exception):
    """Base class for all errors raised by the taxonomy engine."""


class MalformedPathError(TaxabarsError):
    """A hierarchy row carried an empty lineage path."""


class InvalidDepthError(TaxabarsError):
    """A depth query targeted a level below the node itself."""


class NotFoundError(TaxabarsError):
    """A feature ID or lineage is not present in the hierarchy."""


class InvariantViolation(TaxabarsError):
    """
    The hierarchy or its override state is structurally inconsistent.

    Indicates a bug rather than bad user input and must not be swallowed.
    """


class EmptyDatasetError(TaxabarsError):
    """Cross-sample statistics were requested over zero samples."""


class MalformedTableError(TaxabarsError):
    """A feature table cell could not be read as a non-negative abundance."""
