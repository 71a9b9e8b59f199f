"""Diagnostic catalog commands."""
