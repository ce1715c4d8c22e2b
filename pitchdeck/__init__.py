"""Prestige Foods pitch deck: AI-generated presentation with an export consultant."""

__version__ = "0.1.0"
