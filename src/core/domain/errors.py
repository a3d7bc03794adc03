"""Error taxonomy for the population engine.

Every failure the core can raise derives from `PopulateError` so the CLI can
catch one type, report it and abort without writing output.
"""

from __future__ import annotations


class PopulateError(Exception):
    """Base class for every error raised while populating a collection."""


class ContentAPIError(PopulateError):
    """Failure reported by (or while talking to) the remote content API."""


class NotFound(ContentAPIError):
    """The requested collection, item or option does not exist."""


class Unauthorized(ContentAPIError):
    """The API token is missing, invalid or lacks access to the resource."""


class RateLimited(ContentAPIError):
    """The API refused the request because of its rate limit."""

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TransportError(ContentAPIError):
    """Network failure or unexpected API response."""


class CollectionNotFound(NotFound):
    def __init__(self, name: str) -> None:
        super().__init__(f"Not found: Collection.name={name}")
        self.name = name


class OptionNotFound(NotFound):
    def __init__(self, option_id: object, field_slug: str) -> None:
        super().__init__(f"Could not find option.id={option_id} for field '{field_slug}'")
        self.option_id = option_id
        self.field_slug = field_slug


class SchemaMismatch(PopulateError):
    """A raw field value does not match the type declared by its schema."""

    def __init__(
        self,
        field_slug: str,
        field_type: str,
        value: object,
        *,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message
            or f"Field '{field_slug}' is declared as {field_type} "
            f"but holds {type(value).__name__}: {value!r}"
        )
        self.field_slug = field_slug
        self.field_type = field_type
        self.value = value


class DepthExceeded(PopulateError):
    """Reference chain nested deeper than the configured maximum."""

    def __init__(self, max_depth: int, collection_id: str) -> None:
        super().__init__(
            f"Reference chain exceeded max depth {max_depth} "
            f"while populating collection {collection_id}"
        )
        self.max_depth = max_depth
        self.collection_id = collection_id


class AmbiguousIndexKey(PopulateError):
    """The index key is missing on an item or is not unique across items."""


class FieldRuleConflict(PopulateError):
    """Two remapping rules write to overlapping destination paths."""


class StepFailed(PopulateError):
    """Wraps an error with the pipeline step that was in progress."""

    def __init__(self, step: str, error: PopulateError) -> None:
        super().__init__(f"{step}: {error}")
        self.step = step
        self.error = error
