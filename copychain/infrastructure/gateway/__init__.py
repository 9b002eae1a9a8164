"""Client-side generation transport."""
