"""Multi-client terminal chat over a shared, lock-protected message board file."""

__version__ = "0.1.0"