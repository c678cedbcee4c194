"""Pod lifecycle agent: deduplicated lifecycle and metrics event log for a namespace."""

__version__ = "0.1.0"
