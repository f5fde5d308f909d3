"""Personal finance tracker with broker reconciliation."""

__version__ = "0.1.0"
