"""Configuration, authentication and security helpers."""
