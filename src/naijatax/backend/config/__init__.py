"""Year configuration loading and validation."""
