"""Error taxonomy for the page tree engine.

Validation errors are raised before anything is written, so the caller can
retry with corrected input. ``PartialFailureError`` is the one fatal case: a
batched write committed some records and not others.
"""


class PageTreeError(Exception):
    """Base class for all page tree errors."""


class NotFoundError(PageTreeError):
    """An id, slug or path resolved to nothing."""


class InvalidQuery(PageTreeError):
    """Conflicting or malformed cursor configuration."""


class InvalidSlugError(PageTreeError, ValueError):
    """A slug is empty or contains the path separator."""


class InvalidPositionError(PageTreeError, ValueError):
    """A move position is unknown or has no meaning for the target."""


class CyclicMoveError(PageTreeError):
    """The move destination is the page itself or one of its descendants."""


class CannotMoveParkedError(PageTreeError):
    """Attempt to relocate a parked system fixture."""


class SlugConflictError(PageTreeError):
    """A sibling with the same slug already exists under the parent."""


class DuplicateIdError(PageTreeError):
    """A new page was given an id that is already in use."""


class PermissionDeniedError(PageTreeError):
    """The permission guard refused the operation."""


class StoreError(PageTreeError):
    """The underlying store is unavailable or rejected a read."""


class PartialFailureError(PageTreeError):
    """A batched write partially committed.

    The tree may be left with inconsistent paths, levels or ranks.
    ``written`` lists the page ids that were committed and ``failed`` maps
    the remaining ids to the reason they were rejected.
    """

    def __init__(
        self,
        message: str,
        *,
        written: tuple[str, ...] = (),
        failed: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.written = written
        self.failed = dict(failed or {})
