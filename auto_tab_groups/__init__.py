"""Auto Tab Groups: URL classification and tab-group reconciliation engine."""

__version__ = "1.0.0"
