"""Cross-reference engine: resolution, indexing, impact and search."""
