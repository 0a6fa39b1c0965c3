"""Exception types raised by research-friend."""


class ResearchFriendError(Exception):
    """Base class for errors raised by this package."""


class MissingCapabilityError(ResearchFriendError):
    """A model-call capability is required but was not supplied."""


class HardLimitExceededError(ResearchFriendError):
    """The document is larger than the absolute ask-mode ceiling."""


class DocumentTooLargeError(ResearchFriendError):
    """The document does not fit a single model call and splitting is disabled."""


class NoStructuredResponseError(ResearchFriendError):
    """A model reply could not be turned into an answer or into JSON."""


class ChunkingError(ResearchFriendError, ValueError):
    """The chunking budget leaves no room for document text."""


class DocumentNotFoundError(ResearchFriendError, LookupError):
    """No stashed document has the requested id."""


class UnsupportedFileTypeError(ResearchFriendError):
    """The file extension is not one the stash can extract text from."""


class SearchToolError(ResearchFriendError):
    """The external line-oriented search tool failed."""
