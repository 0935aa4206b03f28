"""Content-management tooling for the Rise Learning Provision website."""

__version__ = "0.3.0"
