"""
Admin Settings API.

Membership fees and trial configuration. Admin only.

GET   /membership-fees: fees per level (defaults fill missing rows)
PATCH /membership-fees: partial update, 400 with field errors on failure
GET   /trial-config:    trial config per level
PATCH /trial-config:    full replacement, 400 if any level is missing/invalid
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel

from src.api.deps import get_settings_service, require_admin
from src.components.membership import TrialConfig, ValidationError
from src.components.settings import SettingsService
from src.domain.entities import Member

router = APIRouter()


# --- Request/Response Models ---


class FeesResponse(BaseModel):
    fees: dict[str, float]
    currency: str


class TrialConfigItem(BaseModel):
    type: str
    months: int | None = None


class TrialConfigResponse(BaseModel):
    trial: dict[str, TrialConfigItem]


class ValidationErrorResponse(BaseModel):
    """Validation error response."""

    field: str
    code: str
    message: str


class ErrorDetail(BaseModel):
    message: str
    errors: list[ValidationErrorResponse]


class ErrorResponse(BaseModel):
    """Error response with validation errors."""

    detail: ErrorDetail


# --- Helper Functions ---


def validation_errors_to_response(errors: list[ValidationError]) -> list[dict[str, str]]:
    """Convert validation errors to response dicts."""
    return [
        ValidationErrorResponse(field=e.field, code=e.code, message=e.message).model_dump()
        for e in errors
    ]


def trial_to_response(trial: dict[str, TrialConfig]) -> TrialConfigResponse:
    return TrialConfigResponse(
        trial={level: TrialConfigItem(**config.to_dict()) for level, config in trial.items()}
    )


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid body",
        )
    return body


# --- Endpoints ---


@router.get("/membership-fees", response_model=FeesResponse)
def get_membership_fees(
    admin: Member = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> FeesResponse:
    out = service.get_fees()
    return FeesResponse(fees=dict(out.fees), currency=out.currency)


@router.patch(
    "/membership-fees",
    response_model=FeesResponse,
    responses={400: {"model": ErrorResponse, "description": "Validation errors"}},
)
def update_membership_fees(
    body: Any = Body(...),
    admin: Member = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> FeesResponse:
    """Update one or more level fees, e.g. {"Full": 50, "Student": 30}."""
    out = service.update_fees(_require_object(body))
    if not out.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Validation failed",
                "errors": validation_errors_to_response(out.errors),
            },
        )
    return FeesResponse(fees=dict(out.fees), currency=service.currency)


@router.get("/trial-config", response_model=TrialConfigResponse)
def get_trial_config(
    admin: Member = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> TrialConfigResponse:
    return trial_to_response(dict(service.get_trial_config()))


@router.patch(
    "/trial-config",
    response_model=TrialConfigResponse,
    responses={400: {"model": ErrorResponse, "description": "Incomplete or invalid config"}},
)
def update_trial_config(
    body: Any = Body(...),
    admin: Member = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> TrialConfigResponse:
    """Replace the trial config; every membership level must be present."""
    out = service.update_trial_config(_require_object(body))
    if not out.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Invalid trial config",
                "errors": validation_errors_to_response(out.errors),
            },
        )
    return trial_to_response(dict(out.trial))
