class GitSeekError(Exception):
    """Base class for every error raised while answering a query."""


class RepositoryUnavailable(GitSeekError):
    """The repository could not be located or opened."""


class ReferenceResolutionFailed(GitSeekError):
    """A branch, tag or HEAD reference could not be dereferenced to a commit."""


class ObjectReadFailed(GitSeekError):
    """Reading or decoding an object from the object store failed."""


class InvalidParameter(GitSeekError):
    """A preset or edge parameter is missing or has the wrong type."""


class UnknownPreset(GitSeekError):
    pass


class UnknownField(GitSeekError):
    pass


class UnknownType(GitSeekError):
    pass
