"""LeaseDesk - lease document lifecycle and digital signing engine."""

__version__ = "1.0.0"
