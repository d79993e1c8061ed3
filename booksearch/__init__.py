"""Book search service: search a catalogue and save books to an account."""

__version__ = "1.0.0"
