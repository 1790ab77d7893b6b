"""Warlords: a turn-based strategy simulation kernel."""

__version__ = "0.1.0"
