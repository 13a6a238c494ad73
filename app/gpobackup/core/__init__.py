"""Core infrastructure: paths, configuration, theme, and run state."""
