class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when a timetable candidate is malformed (e.g. start_time >= end_time)."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class EntityReferenceError(AppError):
    """Raised when a candidate points at sections, professors, rooms or subjects that do not exist."""
    def __init__(self, missing: list[tuple[str, int]]):
        labels = ", ".join(f"{entity} {entity_id}" for entity, entity_id in missing)
        super().__init__(
            f"Unknown references: {labels}",
            status_code=422,
            details={"missing": [{"entity": entity, "id": entity_id} for entity, entity_id in missing]},
        )
        self.missing = missing

class ConflictError(AppError):
    """Raised when a timetable write would double-book a section, professor or room."""
    def __init__(self, axis: str, entry_id: int, conflicts: list[dict] = None):
        super().__init__(
            f"Time slot conflicts with timetable entry {entry_id} on {axis}",
            status_code=409,
            details={"axis": axis, "entry_id": entry_id, "conflicts": conflicts or []},
        )
        self.axis = axis
        self.entry_id = entry_id

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class IntegrityViolationError(AppError):
    """Raised when a reference entity write breaks a uniqueness or child-existence rule."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class PersistenceError(AppError):
    """Raised when the underlying store fails; never retried here."""
    def __init__(self, message: str = "Timetable store is unavailable"):
        super().__init__(message, status_code=503)
