"""External services."""
