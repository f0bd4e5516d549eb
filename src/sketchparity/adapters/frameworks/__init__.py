"""Framework adapters for the fake intake."""
