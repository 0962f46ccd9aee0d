"""StudentHub API: uniform response envelope and error translation for FastAPI."""

__version__ = "1.0.0"
