"""
Custom exception hierarchy for the waypath routing core.

Build-time problems are logged and skipped where possible; the exceptions
below cover the cases that must reach the caller explicitly.
"""

from typing import Any, Dict, List, Optional


class WaypathException(Exception):
    """
    Base exception for all waypath-specific errors.

    Attributes:
        error_code: String identifier for the error type
        message: User-friendly error message
        details: Technical details for logging/debugging
        suggestions: Optional list of resolution suggestions
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize WaypathException.

        Args:
            message: User-friendly error message
            error_code: String identifier for the error type
            details: Technical details for logging
            suggestions: List of suggestions for resolution
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for a serving layer.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "suggestions": self.suggestions,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"error_code='{self.error_code}', "
            f"message='{self.message}')"
        )


class ValidationError(WaypathException):
    """
    Raised when query input validation fails.

    Used for non-finite or out-of-range coordinates handed to the query API.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ValidationError.

        Args:
            message: User-friendly error message
            field: Name of the field that failed validation
            details: Technical details about the validation failure
            suggestions: List of suggestions for fixing the validation error
        """
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=error_details,
            suggestions=suggestions or ["Check the input format and try again"],
        )


class ParseError(WaypathException):
    """
    Raised when OSM XML parsing fails.

    Used for malformed XML that cannot be streamed into the graph.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ParseError.

        Args:
            message: User-friendly error message
            file_path: Path of the file being parsed
            line_number: Line number where parsing failed (if applicable)
            details: Technical details about the parsing failure
            suggestions: List of suggestions for fixing the file
        """
        error_details = details or {}
        if file_path:
            error_details["file_path"] = file_path
        if line_number:
            error_details["line_number"] = line_number

        default_suggestions = [
            "Verify the file is a valid OSM XML extract",
            "Check for XML syntax errors or a truncated download",
        ]

        super().__init__(
            message=message,
            error_code="PARSE_ERROR",
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )


class ConfigurationError(WaypathException):
    """
    Raised when routing configuration is invalid.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ConfigurationError.

        Args:
            message: User-friendly error message
            config_key: Configuration key that is invalid
            details: Technical details about the configuration error
            suggestions: List of suggestions for resolution
        """
        error_details = details or {}
        if config_key:
            error_details["config_key"] = config_key

        default_suggestions = [
            "Check WAYPATH_* environment variables are set correctly",
            "Verify .env file syntax",
        ]

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )


class EmptyIndexError(WaypathException):
    """
    Raised when a nearest-vertex query runs against an index with no points.
    """

    def __init__(self, message: str = "Spatial index contains no vertices"):
        super().__init__(
            message=message,
            error_code="EMPTY_INDEX",
            suggestions=[
                "Load road data before serving queries",
                "Check that pruning did not remove every vertex",
            ],
        )


class VertexNotFoundError(WaypathException, KeyError):
    """
    Raised when a vertex id is not present in the road graph.
    """

    def __init__(self, vertex_id: int):
        self.vertex_id = vertex_id
        super().__init__(
            message=f"Vertex {vertex_id} is not in the road graph",
            error_code="VERTEX_NOT_FOUND",
            details={"vertex_id": vertex_id},
        )

    def __str__(self) -> str:
        return WaypathException.__str__(self)


class GraphFrozenError(WaypathException):
    """
    Raised when the road graph is mutated after ingestion has finished.
    """

    def __init__(self, operation: str):
        super().__init__(
            message=f"Cannot {operation}: road graph is frozen",
            error_code="GRAPH_FROZEN",
            details={"operation": operation},
            suggestions=["Build a new RoadGraph to change the network"],
        )
