class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict:
        # Same "detail" key as HTTPException bodies.
        return {"detail": self.message, "message": self.message, "details": self.details}

class SchedulerError(AppError):
    """Raised when the exam scheduler is given unusable input: no courses, bad levels, or an empty horizon."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)

class ScheduleIntegrityError(AppError):
    """Raised when an auto-schedule run produced placements that break the timetable rules.

    Nothing is persisted when this is raised.
    """
    def __init__(self, violations: list[str]):
        super().__init__(
            "Auto-scheduling produced an invalid timetable",
            status_code=500,
            details={"violations": violations},
        )

class ConfigurationError(AppError):
    """Raised when scheduler settings are inconsistent."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
