"""Lines of Action rules engine and AI service."""

__version__ = "1.0.0"
