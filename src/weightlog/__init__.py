"""weightlog: personal body-weight tracking with trend and projection analytics."""

__version__ = "0.1.0"
