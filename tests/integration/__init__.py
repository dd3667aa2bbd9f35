"""Subprocess-level tests that drive ``python -m gitdeck`` against real repositories."""
