"""Identity, session and token verification."""
