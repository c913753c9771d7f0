"""Configuration for foretell."""
