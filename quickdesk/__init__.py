"""QuickDesk help-desk ticketing API."""

__version__ = "0.1.0"
