"""Service layer for the voice relay."""
