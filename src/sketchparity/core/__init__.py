"""Core domain: models, normalization, sanity checks and comparison."""
