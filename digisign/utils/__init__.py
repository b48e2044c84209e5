"""Utility helpers shared across digisign modules."""
