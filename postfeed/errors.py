class PostfeedError(Exception):
    """Base class for everything postfeed raises on purpose."""


class SourceReadError(PostfeedError):
    """A content file or the content index could not be read or parsed."""


class AmbiguousEntryError(PostfeedError):
    """A raw record matched zero or more than one entry variant."""


class DuplicateEntryError(AmbiguousEntryError):
    """Two entries in one feed share the same rendering key."""


class NotFoundError(PostfeedError):
    """No entry matches a detail lookup."""


class ConfigError(PostfeedError):
    """The config file cannot be read or has the wrong shape."""
