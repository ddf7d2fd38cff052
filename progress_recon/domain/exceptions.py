"""
Domain Exceptions for the Progress Reconciliation engine.

The engine itself never raises on messy data. These exceptions cover the
edges around it:
- Lookups of a project that is not in the snapshot
- Unreadable ingestion sources
- Per-record write-back failures (collected, not propagated)
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Lookup Exceptions
# =============================================================================

class ProjectNotFoundError(DomainError):
    """Raised when a project code is not present in the snapshot."""

    def __init__(self, project_code: str):
        message = f"Project with code '{project_code}' not found"
        super().__init__(message, code="PROJECT_NOT_FOUND")
        self.project_code = project_code


# =============================================================================
# Ingestion Exceptions
# =============================================================================

class IngestionError(DomainError):
    """Raised when an input source cannot be read at all."""

    def __init__(self, source: str, reason: str):
        message = f"Cannot ingest '{source}': {reason}"
        super().__init__(message, code="INGESTION_ERROR")
        self.source = source
        self.reason = reason


# =============================================================================
# Write-back Exceptions
# =============================================================================

class WriteBackError(DomainError):
    """Raised when a single derived record cannot be persisted."""

    def __init__(self, record_key: str, reason: str):
        message = f"Write-back failed for '{record_key}': {reason}"
        super().__init__(message, code="WRITE_BACK_ERROR")
        self.record_key = record_key
        self.reason = reason
