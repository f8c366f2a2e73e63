"""A dimension that never yields variants."""
