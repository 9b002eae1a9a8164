"""Local persistence."""
