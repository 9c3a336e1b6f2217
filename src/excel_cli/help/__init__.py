"""Command table, usage text, and tool manifest."""
