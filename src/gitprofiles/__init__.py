"""Named git configuration profiles with drift detection."""

__version__ = "0.3.0"

__all__ = ["__version__"]
