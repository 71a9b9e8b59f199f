"""Test helper modules for the patternsmith test suite.

- builders: contract, member and generation-context builders plus helpers
  that execute generated source as a module
- cache_utils: Cache reset utilities for test isolation
"""
from __future__ import annotations
