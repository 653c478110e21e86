"""Domain models: documents and search value objects."""
