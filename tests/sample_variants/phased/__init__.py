"""Providers cooperating through the initial and final phases."""
