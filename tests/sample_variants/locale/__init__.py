"""Locale dimension."""
