"""
In-memory retrieval engine.

This package provides the pure-Python search core:
- analyzers: Tokenizer and filters used to build the token index
- index: Token index and the immutable corpus snapshot
- query: Keyword parsing into AND-of-OR groups
- candidates: Index-based pruning of the search space
- ranking: Occurrence counting and scoring
- snippet: Preview windows around the first match
- cache: TTL + LRU result cache
- pagination: Page slicing
- engine: The search engine tying everything together
"""
