"""Exception hierarchy for corpus-search-server."""


class CorpusSearchError(Exception):
    """Base class for all project errors."""


class CorpusLoadError(CorpusSearchError):
    """Raised when a corpus source is missing or malformed."""


class ChunkTooLargeError(CorpusSearchError):
    """Raised when a single record cannot fit in one corpus chunk."""
