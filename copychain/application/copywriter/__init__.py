"""Client-side copy pipeline."""
