"""Mastery scheduling engine for collaborative exam practice."""

__version__ = "0.1.0"
