"""copychain - AI marketing copy step-chain generation."""
