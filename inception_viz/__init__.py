"""Filter response visualization for a small Inception CNN."""
