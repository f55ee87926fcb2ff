"""BookVerse: shelves, reviews, quotes and a social reading feed."""

__version__ = "1.0.0"
