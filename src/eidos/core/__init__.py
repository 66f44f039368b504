"""Command parsing and prompt synthesis."""
