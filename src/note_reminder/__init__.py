"""note-reminder: one-time notifications for due task markers in markdown notes."""

__version__ = "0.1.0"
