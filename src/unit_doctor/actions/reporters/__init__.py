"""Output formats for diagnosis results."""
