"""Corkscrew - event staffing marketplace."""

__version__ = "0.1.0"
