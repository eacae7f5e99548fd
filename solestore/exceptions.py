"""
Domain errors.

Every error is an HTTPException carrying its status code, so services can
raise them directly and the app renders them through one handler.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class SoleStoreError(HTTPException):
    """Base class for all domain errors."""

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, data: Optional[Any] = None):
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.data = data


class AuthorizationDenied(SoleStoreError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(detail)


class NotFoundError(SoleStoreError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class ValidationError(SoleStoreError):
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, detail: str = "Validation failed"):
        super().__init__(detail)


class DuplicateError(SoleStoreError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, detail: str = "Resource already exists", data: Optional[Any] = None):
        super().__init__(detail, data)


class DuplicateVariantError(DuplicateError):
    """One or more (size, color) pairs already exist for the product."""

    def __init__(self, pairs: list[tuple[str, str]]):
        self.pairs = list(pairs)
        listed = ", ".join(f"{size}/{color}" for size, color in self.pairs)
        super().__init__(
            f"The following size/color combinations already exist: {listed}",
            data={"duplicates": [{"size": s, "color": c} for s, c in self.pairs]},
        )


class DuplicateSkuError(DuplicateError):
    """A SKU is already used somewhere in the catalog."""

    def __init__(self, skus: list[str]):
        self.skus = list(skus)
        super().__init__(
            f"SKU already in use: {', '.join(self.skus)}",
            data={"skus": self.skus},
        )


class InvalidMatrixRequest(SoleStoreError):
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Invalid variant matrix request"):
        super().__init__(detail)


def duplicate_key_error(exc, resource: str) -> DuplicateError:
    """DuplicateError naming the field of a unique-index violation (pymongo DuplicateKeyError)."""
    details = getattr(exc, "details", None) or {}
    key_value = details.get("keyValue") or {}
    field = next(iter(details.get("keyPattern") or key_value), None)
    if field is None:
        return DuplicateError(f"{resource} already exists")
    return DuplicateError(
        f"{resource} with {field} '{key_value.get(field)}' already exists",
        data={"field": field},
    )
