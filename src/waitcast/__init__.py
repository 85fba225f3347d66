"""Queue wait estimates from historical ticket-draw records."""

__version__ = "0.1.0"
