"""Utility helpers shared across the Warlords packages."""
