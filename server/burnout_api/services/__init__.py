"""Process-wide engine wiring."""
