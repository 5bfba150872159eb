"""Dashboard and industry profile API endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, require_industry
from app.errors import AppError, ErrorCode
from app.models.profile import IndustryProfile
from app.models.user import IndustryType, User
from app.schemas.common import ApiResponse
from app.schemas.industry import (
    PROFILE_SCHEMAS,
    DashboardPayload,
    IndustryProfilePayload,
    NavigationPayload,
    ProfileUpdatePayload,
)
from app.services.industry import get_industry_service, parse_industry_type

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def _serialize_profile(industry_type: str, profile: IndustryProfile | None) -> dict[str, Any] | None:
    schemas = PROFILE_SCHEMAS[IndustryType(industry_type)]
    if profile is None or schemas is None:
        return None
    _, response_model = schemas
    return response_model.model_validate(profile).model_dump(by_alias=True, mode="json")


def _dashboard_payload(db: Session, user: User, industry: IndustryType, with_route: bool) -> DashboardPayload:
    service = get_industry_service()
    return DashboardPayload(
        dashboard=service.dashboard_data(db, user.id, industry),
        navigation=service.navigation_menu(industry),
        industry_type=industry.value,
        dashboard_route=service.dashboard_route(industry) if with_route else None,
    )


@router.get("", response_model=ApiResponse[DashboardPayload])
def get_dashboard(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[DashboardPayload]:
    """Dashboard for the current user's own industry."""
    industry = IndustryType(user.industry_type)
    return ApiResponse(data=_dashboard_payload(db, user, industry, with_route=True))


@router.get("/profile", response_model=ApiResponse[IndustryProfilePayload])
def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[IndustryProfilePayload]:
    """Get the current user's industry profile."""
    service = get_industry_service()
    profile = service.resolve_profile(db, user.id, user.industry_type)
    return ApiResponse(
        data=IndustryProfilePayload(
            industry_profile=_serialize_profile(user.industry_type, profile),
            industry_type=user.industry_type,
        )
    )


@router.put("/profile", response_model=ApiResponse[ProfileUpdatePayload])
def update_profile(
    body: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[ProfileUpdatePayload]:
    """Optionally switch industry type, then create or update the industry profile."""
    service = get_industry_service()
    data = dict(body)
    requested = data.pop("industryType", data.pop("industry_type", None))

    if requested is not None:
        industry = parse_industry_type(requested, ErrorCode.INVALID_INDUSTRY_TYPE)
        if industry.value != user.industry_type:
            service.change_industry_type(db, user.id, industry)
            db.refresh(user)

    active = IndustryType(user.industry_type)
    if not data:
        profile = service.resolve_profile(db, user.id, active)
        return ApiResponse(
            message="Industry updated successfully",
            data=ProfileUpdatePayload(profile=_serialize_profile(active.value, profile), industry_type=active.value),
        )

    schemas = PROFILE_SCHEMAS[active]
    if schemas is None:
        raise AppError(
            ErrorCode.UNSUPPORTED_INDUSTRY,
            f"Industry profile data is not supported for industry type '{active.value}'",
        )
    update_model, _ = schemas
    try:
        update = update_model.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]) or "body", "message": err["msg"]}
            for err in exc.errors()
        ]
        raise AppError(ErrorCode.VALIDATION_ERROR, errors=errors) from None

    profile = service.upsert_profile(db, user.id, active, update.model_dump(exclude_unset=True))
    return ApiResponse(
        message="Industry profile updated successfully",
        data=ProfileUpdatePayload(profile=_serialize_profile(active.value, profile), industry_type=active.value),
    )


@router.get("/navigation", response_model=ApiResponse[NavigationPayload])
def get_navigation(user: User = Depends(get_current_user)) -> ApiResponse[NavigationPayload]:
    """Navigation menu for the current user's industry."""
    service = get_industry_service()
    return ApiResponse(
        data=NavigationPayload(
            navigation=service.navigation_menu(user.industry_type),
            industry_type=user.industry_type,
        )
    )


def _industry_dashboard(industry: IndustryType):
    def endpoint(
        user: User = Depends(require_industry(industry)),
        db: Session = Depends(get_db),
    ) -> ApiResponse[DashboardPayload]:
        return ApiResponse(data=_dashboard_payload(db, user, industry, with_route=False))

    endpoint.__name__ = f"get_{industry.value}_dashboard"
    endpoint.__doc__ = f"Dashboard for {industry.value} users only."
    return endpoint


for _industry in (IndustryType.TOUR, IndustryType.TRAVEL, IndustryType.LOGISTICS):
    router.add_api_route(
        f"/{_industry.value}",
        _industry_dashboard(_industry),
        methods=["GET"],
        response_model=ApiResponse[DashboardPayload],
    )
