"""Database driver dimension."""
