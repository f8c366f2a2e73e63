"""A dimension whose provider fails."""
