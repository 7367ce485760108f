"""Call Bridge scorekeeper and online trick engine."""

__version__ = "1.0.0"
