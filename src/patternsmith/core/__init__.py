"""Core synthesis library (surface resolution, composition, generators)."""
