"""acltree — pluggable hierarchy engine for access-control collections."""

__version__ = "0.4.0"
