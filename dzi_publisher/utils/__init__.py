"""Shared helpers: object key layout and scratch workspace management."""
