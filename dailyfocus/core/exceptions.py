class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, entity: str, message: str | None = None, details: dict | None = None):
        code = f"NF_{entity.upper()}_001"
        msg = message or f"{entity} not found"
        super().__init__(code, msg, details)


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, details: dict | None = None):
        code = f"VAL_{field.upper()}_001"
        msg = f"Validation failed for {field}: {message}"
        super().__init__(code, msg, details or {"field": field})


class ConflictError(DomainError):
    def __init__(self, message: str, code: str = "CF_001", details: dict | None = None):
        super().__init__(code, message, details)


class ScoringUnavailableError(DomainError):
    """AI scoring failed, timed out or reported an unsuccessful response."""

    def __init__(self, message: str = "AI scoring unavailable", details: dict | None = None):
        super().__init__("SCORING_UNAVAILABLE", message, details)


class CatalogMismatchError(DomainError):
    """A scored exercise id is not present in the exercise catalog."""

    def __init__(self, exercise_id: str):
        super().__init__(
            "CATALOG_MISMATCH",
            f"Exercise not found in catalog: {exercise_id}",
            {"exercise_id": exercise_id},
        )


class SourceQueryError(DomainError):
    """A completion-log source could not be queried."""

    def __init__(self, source_id: str, message: str):
        super().__init__(
            f"SOURCE_{source_id.upper()}_QUERY",
            f"Completion source '{source_id}' failed: {message}",
            {"source_id": source_id},
        )


class PersistenceConflictError(ConflictError):
    """A favorite write failed; local state was reverted to reverted_state."""

    def __init__(self, exercise_id: str, reverted_state: bool, message: str | None = None):
        self.exercise_id = exercise_id
        self.reverted_state = reverted_state
        super().__init__(
            message or f"Could not update favorite for {exercise_id}",
            code="CF_FAVORITE_WRITE",
            details={"exercise_id": exercise_id, "reverted_state": reverted_state},
        )
