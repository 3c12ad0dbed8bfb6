"""NoteZero: block-based notes workspace core."""

__version__ = "0.1.0"
