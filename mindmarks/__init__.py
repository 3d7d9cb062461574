"""Mindmarks: AI analysis and search for notes and bookmarks."""

__version__ = "0.1.0"
