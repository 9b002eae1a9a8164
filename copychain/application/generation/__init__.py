"""Backend generate-copy use case."""
