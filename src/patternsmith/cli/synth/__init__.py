"""Synthesis commands."""
