"""patternsmith: ahead-of-time synthesis of structural design patterns."""

__version__ = "0.1.0"

__all__ = ["__version__"]
