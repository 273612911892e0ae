"""Read-only HTTP service for renderers."""
