"""Store-backed adapters."""
