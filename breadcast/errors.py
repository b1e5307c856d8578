"""
Custom exceptions and error codes for the Breadcast application.

This module provides:
- Structured error codes for categorized error handling
- Custom exception classes for specific failure scenarios
- Error response schema for consistent responses
"""
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """
    Application-wide error codes for categorized error handling.

    Format: CATEGORY_SPECIFIC_ERROR
    Categories:
    - RECIPE_*: Recipe lookup errors
    - ASSET_*: Frame image resolution errors
    - OBJECT_STORE_*: IPFS / pinning provider errors
    - RENDER_*: Image rendering errors
    """

    # Recipe-related errors
    RECIPE_NOT_FOUND = "RECIPE_NOT_FOUND"
    RECIPE_INVALID_ID = "RECIPE_INVALID_ID"

    # Asset-related errors
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    ASSET_GENERATION_FAILED = "ASSET_GENERATION_FAILED"

    # Object store errors
    OBJECT_STORE_ERROR = "OBJECT_STORE_ERROR"
    OBJECT_STORE_NOT_CONFIGURED = "OBJECT_STORE_NOT_CONFIGURED"

    # Rendering errors
    RENDER_FAILED = "RENDER_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Structured error response."""
    error_code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    class Config:
        use_enum_values = True


class BreadcastError(Exception):
    """
    Base exception for all Breadcast application errors.

    Provides structured error information for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse for API output."""
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            details=self.details if self.details else None,
        )


# Recipe-related exceptions

class RecipeNotFoundError(BreadcastError):
    """Raised when a recipe is not part of the known recipe set."""

    def __init__(self, recipe_id: str):
        super().__init__(
            message=f"Recipe '{recipe_id}' not found",
            error_code=ErrorCode.RECIPE_NOT_FOUND,
            details={"recipe_id": recipe_id},
            status_code=404,
        )


class InvalidRecipeIdError(BreadcastError):
    """Raised when a recipe identifier is not a valid content identifier."""

    def __init__(self, recipe_id: str):
        super().__init__(
            message=f"Invalid recipe identifier '{recipe_id}'",
            error_code=ErrorCode.RECIPE_INVALID_ID,
            details={"recipe_id": recipe_id},
            status_code=404,
        )


# Asset-related exceptions

class AssetNotFoundError(BreadcastError):
    """Raised when a prerendered recipe has no asset for the requested key."""

    def __init__(self, recipe_id: str, asset_key: str):
        super().__init__(
            message=f"No rendered asset '{asset_key}' for recipe '{recipe_id}'",
            error_code=ErrorCode.ASSET_NOT_FOUND,
            details={"recipe_id": recipe_id, "asset_key": asset_key},
            status_code=502,
        )


class AssetGenerationError(BreadcastError):
    """Raised when rendering or uploading a frame image fails."""

    def __init__(self, asset_key: str, reason: str):
        super().__init__(
            message=f"Failed to generate asset '{asset_key}': {reason}",
            error_code=ErrorCode.ASSET_GENERATION_FAILED,
            details={"asset_key": asset_key, "reason": reason},
            status_code=502,
        )


# Object store exceptions

class ObjectStoreError(BreadcastError):
    """Raised when the pinning provider or gateway request fails."""

    def __init__(
        self,
        operation: str,
        reason: str,
        error_code: ErrorCode = ErrorCode.OBJECT_STORE_ERROR,
        details: Dict[str, Any] = None,
    ):
        base_details = {"operation": operation, "reason": reason}
        if details:
            base_details.update(details)
        super().__init__(
            message=f"Object store {operation} failed: {reason}",
            error_code=error_code,
            details=base_details,
            status_code=502,
        )


class ObjectStoreNotConfiguredError(ObjectStoreError):
    """Raised when pinning is attempted without credentials."""

    def __init__(self):
        super().__init__(
            operation="configure",
            reason="PINATA_JWT is not set",
            error_code=ErrorCode.OBJECT_STORE_NOT_CONFIGURED,
        )


# Rendering exceptions

class RenderError(BreadcastError):
    """Raised when a page description cannot be rendered."""

    def __init__(self, page_kind: str, reason: str):
        super().__init__(
            message=f"Failed to render {page_kind} page: {reason}",
            error_code=ErrorCode.RENDER_FAILED,
            details={"page_kind": page_kind, "reason": reason},
            status_code=500,
        )
