"""Nolo - a gentle voice companion for the terminal."""

__version__ = "0.1.0"
