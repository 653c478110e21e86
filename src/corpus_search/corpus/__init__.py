"""Corpus sources: reading records from disk and splitting them into chunks."""
