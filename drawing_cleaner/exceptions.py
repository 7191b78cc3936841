"""Custom exceptions for Drawing Cleaner."""

from typing import Optional


class DrawingCleanerError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for programmatic handling
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ImageLoadError(DrawingCleanerError):
    """Source image could not be decoded.

    Attributes:
        source: Description of the source that failed to load
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message, error_code="IMAGE_LOAD_ERROR")
        self.source = source

    def __str__(self) -> str:
        if self.source:
            return f"{super().__str__()} (source: {self.source})"
        return super().__str__()


class ExtractionError(DrawingCleanerError):
    """Foreground extraction failed.

    Attributes:
        strategy: Name of the extraction strategy that failed
    """

    def __init__(self, message: str, strategy: Optional[str] = None):
        super().__init__(message, error_code="EXTRACTION_ERROR")
        self.strategy = strategy


class ModelError(DrawingCleanerError):
    """Error loading or running the background removal model.

    Attributes:
        model_id: The model ID that caused the error (if applicable)
    """

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message, error_code="MODEL_ERROR")
        self.model_id = model_id


class ValidationError(DrawingCleanerError):
    """Error validating inputs or parameters.

    Attributes:
        field: The field that failed validation (if applicable)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, error_code="VALIDATION_ERROR")
        self.field = field
