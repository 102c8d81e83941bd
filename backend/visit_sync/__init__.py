"""Visit sync: visit lifecycle and visit-order balance engine."""

__version__ = "1.0.0"
