"""Core infrastructure: paths, configuration, resolution and metadata storage."""
