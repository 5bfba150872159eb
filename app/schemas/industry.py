"""Pydantic schemas for dashboard and industry profile endpoints."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from app.models.user import IndustryType
from app.schemas.common import CamelModel


class ProfileUpdate(CamelModel):
    """Fields shared by every industry profile. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    specialties: list[str] | None = None
    certifications: list[str] | None = None
    experience: int | None = Field(default=None, ge=0, le=100)
    rating: float | None = Field(default=None, ge=0, le=5)

    @field_validator("rating", "total_tours", "total_bookings", "total_shipments", check_fields=False)
    @classmethod
    def not_null(cls, v):
        # Omit the field to leave it unchanged; these columns have no null state
        if v is None:
            raise ValueError("may not be null")
        return v


class TourProfileUpdate(ProfileUpdate):
    company_name: str | None = Field(default=None, max_length=100)
    license_number: str | None = Field(default=None, max_length=50)
    languages: list[str] | None = None
    total_tours: int | None = Field(default=None, ge=0)


class TravelProfileUpdate(ProfileUpdate):
    agency_name: str | None = Field(default=None, max_length=100)
    iata_number: str | None = Field(default=None, max_length=50)
    destinations: list[str] | None = None
    total_bookings: int | None = Field(default=None, ge=0)


class LogisticsProfileUpdate(ProfileUpdate):
    company_name: str | None = Field(default=None, max_length=100)
    license_number: str | None = Field(default=None, max_length=50)
    vehicle_types: list[str] | None = None
    coverage_areas: list[str] | None = None
    total_shipments: int | None = Field(default=None, ge=0)


class ProfileResponse(CamelModel):
    id: str
    user_id: str
    specialties: list[str] | None = None
    certifications: list[str] | None = None
    experience: int | None = None
    rating: float = 0
    created_at: datetime
    updated_at: datetime


class TourProfileResponse(ProfileResponse):
    company_name: str | None = None
    license_number: str | None = None
    languages: list[str] | None = None
    total_tours: int = 0


class TravelProfileResponse(ProfileResponse):
    agency_name: str | None = None
    iata_number: str | None = None
    destinations: list[str] | None = None
    total_bookings: int = 0


class LogisticsProfileResponse(ProfileResponse):
    company_name: str | None = None
    license_number: str | None = None
    vehicle_types: list[str] | None = None
    coverage_areas: list[str] | None = None
    total_shipments: int = 0


PROFILE_SCHEMAS: dict[IndustryType, tuple[type[ProfileUpdate], type[ProfileResponse]] | None] = {
    IndustryType.TOUR: (TourProfileUpdate, TourProfileResponse),
    IndustryType.TRAVEL: (TravelProfileUpdate, TravelProfileResponse),
    IndustryType.LOGISTICS: (LogisticsProfileUpdate, LogisticsProfileResponse),
    IndustryType.OTHER: None,
}


class NavigationItem(CamelModel):
    name: str
    path: str
    icon: str


class NavigationPayload(CamelModel):
    navigation: list[NavigationItem]
    industry_type: str


class DashboardPayload(CamelModel):
    dashboard: dict[str, Any]
    navigation: list[NavigationItem]
    industry_type: str
    dashboard_route: str | None = None


class IndustryProfilePayload(CamelModel):
    industry_profile: dict[str, Any] | None = None
    industry_type: str


class ProfileUpdatePayload(CamelModel):
    profile: dict[str, Any] | None = None
    industry_type: str
