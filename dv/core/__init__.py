"""Core project model: configuration, file sets, and metadata."""
