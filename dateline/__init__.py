"""dateline: multi-tier validation of "event on this date" claims."""

__version__ = "0.1.0"
