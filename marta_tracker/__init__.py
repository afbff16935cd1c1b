"""Near-term MARTA arrivals logger."""

__version__ = "0.1.0"
