"""Local record keeping for a visa appointment intake workflow."""

__version__ = "0.1.0"
