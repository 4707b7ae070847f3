"""Settings and transport payload helpers."""
