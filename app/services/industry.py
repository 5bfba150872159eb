"""Industry dispatcher: routes a user's industry type to its profile table, dashboard and menu."""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import DEFAULT_MESSAGES, AppError, ErrorCode
from app.models.profile import IndustryProfile, LogisticsProfile, TourProfile, TravelProfile
from app.models.user import IndustryType, User

logger = logging.getLogger("industry_hub")

# Every IndustryType member has an explicit entry; OTHER has no backing table.
PROFILE_MODELS: dict[IndustryType, type[IndustryProfile] | None] = {
    IndustryType.TOUR: TourProfile,
    IndustryType.TRAVEL: TravelProfile,
    IndustryType.LOGISTICS: LogisticsProfile,
    IndustryType.OTHER: None,
}

# Columns callers may never set through an upsert
PROTECTED_PROFILE_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})

DASHBOARD_ROUTES: dict[IndustryType, str] = {
    IndustryType.TOUR: "/dashboard/tour",
    IndustryType.TRAVEL: "/dashboard/travel",
    IndustryType.LOGISTICS: "/dashboard/logistics",
    IndustryType.OTHER: "/dashboard/generic",
}


@dataclass(frozen=True)
class NavItem:
    name: str
    path: str
    icon: str


BASE_NAVIGATION: tuple[NavItem, ...] = (
    NavItem("Dashboard", "/dashboard", "dashboard"),
    NavItem("Profile", "/dashboard/profile", "user"),
    NavItem("Payments", "/payments", "credit-card"),
    NavItem("Settings", "/dashboard/settings", "settings"),
)

INDUSTRY_NAVIGATION: dict[IndustryType, tuple[NavItem, ...]] = {
    IndustryType.TOUR: (
        NavItem("Tours", "/tours", "map"),
        NavItem("Bookings", "/bookings", "calendar"),
        NavItem("Customers", "/customers", "users"),
        NavItem("Analytics", "/analytics", "chart"),
    ),
    IndustryType.TRAVEL: (
        NavItem("Services", "/services", "plane"),
        NavItem("Bookings", "/bookings", "calendar"),
        NavItem("Customers", "/customers", "users"),
        NavItem("Destinations", "/destinations", "map"),
        NavItem("Analytics", "/analytics", "chart"),
    ),
    IndustryType.LOGISTICS: (
        NavItem("Shipments", "/shipments", "truck"),
        NavItem("Orders", "/orders", "package"),
        NavItem("Customers", "/customers", "users"),
        NavItem("Routes", "/routes", "map"),
        NavItem("Analytics", "/analytics", "chart"),
    ),
    IndustryType.OTHER: (),
}


def parse_industry_type(value: IndustryType | str, error_code: ErrorCode = ErrorCode.UNSUPPORTED_INDUSTRY) -> IndustryType:
    """Convert a raw discriminator into an IndustryType, raising AppError(error_code) if unknown."""
    try:
        return IndustryType(value)
    except ValueError:
        raise AppError(error_code, f"{DEFAULT_MESSAGES[error_code]}: {value!r}") from None


# Dashboard payload builders. Figures are placeholders until an order/booking
# reporting source exists; values the profile row already tracks are filled in.


def _tour_dashboard(profile: TourProfile | None) -> dict[str, Any]:
    return {
        "metrics": {
            "totalTours": profile.total_tours if profile else 0,
            "activeTours": 0,
            "totalBookings": 0,
            "monthlyRevenue": 0,
            "averageRating": float(profile.rating or 0) if profile else 0,
        },
        "recentBookings": [],
        "upcomingTours": [],
        "popularDestinations": [],
    }


def _travel_dashboard(profile: TravelProfile | None) -> dict[str, Any]:
    return {
        "metrics": {
            "totalBookings": profile.total_bookings if profile else 0,
            "activeBookings": 0,
            "monthlyRevenue": 0,
            "customerSatisfaction": float(profile.rating or 0) if profile else 0,
            "topDestinations": len(profile.destinations or []) if profile else 0,
        },
        "recentBookings": [],
        "upcomingTravels": [],
        "popularDestinations": [],
    }


def _logistics_dashboard(profile: LogisticsProfile | None) -> dict[str, Any]:
    return {
        "metrics": {
            "totalShipments": profile.total_shipments if profile else 0,
            "activeShipments": 0,
            "monthlyRevenue": 0,
            "onTimeDelivery": 0,
            "customerSatisfaction": float(profile.rating or 0) if profile else 0,
        },
        "recentShipments": [],
        "activeShipments": [],
        "popularRoutes": [],
    }


def _generic_dashboard(profile: None) -> dict[str, Any]:
    return {
        "metrics": {
            "totalOrders": 0,
            "activeOrders": 0,
            "monthlyRevenue": 0,
            "customerSatisfaction": 0,
        },
        "recentActivity": [],
        "notifications": [],
    }


DASHBOARD_BUILDERS: dict[IndustryType, Callable[[Any], dict[str, Any]]] = {
    IndustryType.TOUR: _tour_dashboard,
    IndustryType.TRAVEL: _travel_dashboard,
    IndustryType.LOGISTICS: _logistics_dashboard,
    IndustryType.OTHER: _generic_dashboard,
}


class IndustryService:
    """Resolves profiles, dashboards and navigation for a user's industry."""

    def resolve_profile(self, db: Session, user_id: str, industry_type: IndustryType | str) -> IndustryProfile | None:
        """Get the user's profile for an industry. None for OTHER or when no row exists."""
        model = PROFILE_MODELS[parse_industry_type(industry_type)]
        if model is None:
            return None
        return db.query(model).filter(model.user_id == user_id).first()

    def upsert_profile(
        self, db: Session, user_id: str, industry_type: IndustryType | str, data: dict[str, Any]
    ) -> IndustryProfile:
        """Insert or update the user's profile in the industry's table."""
        industry = parse_industry_type(industry_type)
        model = PROFILE_MODELS[industry]
        if model is None:
            raise AppError(ErrorCode.UNSUPPORTED_INDUSTRY, f"No profile is kept for industry type '{industry.value}'")
        self._check_fields(model, data)

        profile = db.query(model).filter(model.user_id == user_id).first()
        if profile is None:
            profile = model(user_id=user_id, **data)
            db.add(profile)
            try:
                db.commit()
            except IntegrityError:
                # Lost an insert race for this user's row; fall through to update it
                db.rollback()
                profile = db.query(model).filter(model.user_id == user_id).first()
                if profile is None:
                    raise AppError(ErrorCode.NOT_FOUND, "User not found") from None
                self._apply(profile, data)
                self._commit_update(db)
            else:
                logger.info("Profile created user_id=%s industry=%s", user_id, industry.value)
        else:
            self._apply(profile, data)
            self._commit_update(db)
            logger.info("Profile updated user_id=%s industry=%s", user_id, industry.value)

        db.refresh(profile)
        return profile

    def dashboard_data(self, db: Session, user_id: str, industry_type: IndustryType | str) -> dict[str, Any]:
        """Build the dashboard payload for the user's industry."""
        try:
            industry = IndustryType(industry_type)
        except ValueError:
            industry = IndustryType.OTHER

        user = db.get(User, user_id)
        profile = self.resolve_profile(db, user_id, industry)
        payload: dict[str, Any] = {
            "industryType": industry.value,
            "user": _user_summary(user) if user else None,
        }
        payload.update(DASHBOARD_BUILDERS[industry](profile))
        return payload

    def navigation_menu(self, industry_type: IndustryType | str) -> list[dict[str, str]]:
        """Base menu followed by the industry's own entries. Unknown types get the base menu."""
        try:
            extra = INDUSTRY_NAVIGATION[IndustryType(industry_type)]
        except ValueError:
            extra = ()
        return [asdict(item) for item in BASE_NAVIGATION + extra]

    def dashboard_route(self, industry_type: IndustryType | str) -> str:
        try:
            return DASHBOARD_ROUTES[IndustryType(industry_type)]
        except ValueError:
            return DASHBOARD_ROUTES[IndustryType.OTHER]

    def change_industry_type(self, db: Session, user_id: str, new_type: IndustryType | str) -> bool:
        """Switch a user's discriminator. Profiles of the previous industry are kept."""
        industry = parse_industry_type(new_type, ErrorCode.INVALID_INDUSTRY_TYPE)
        user = db.get(User, user_id)
        if user is None:
            raise AppError(ErrorCode.NOT_FOUND, "User not found")

        previous = user.industry_type
        user.industry_type = industry.value
        user.updated_at = datetime.utcnow()
        db.commit()

        logger.info("Industry type changed user_id=%s from=%s to=%s", user_id, previous, industry.value)
        return True

    @staticmethod
    def _check_fields(model: type[IndustryProfile], data: dict[str, Any]) -> None:
        columns = {column.key: column for column in model.__table__.columns}
        errors = []
        for key, value in data.items():
            if key not in columns or key in PROTECTED_PROFILE_FIELDS:
                errors.append({"field": key, "message": "Unknown profile field"})
            elif value is None and not columns[key].nullable:
                errors.append({"field": key, "message": "Field may not be null"})
        if errors:
            raise AppError(ErrorCode.VALIDATION_ERROR, errors=errors)

    @staticmethod
    def _commit_update(db: Session) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Profile update rejected by database constraints")
            raise AppError(ErrorCode.VALIDATION_ERROR) from None

    @staticmethod
    def _apply(profile: IndustryProfile, data: dict[str, Any]) -> None:
        for key, value in data.items():
            setattr(profile, key, value)
        profile.updated_at = datetime.utcnow()


def _user_summary(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": user.role,
    }


_industry_service: IndustryService | None = None


def get_industry_service() -> IndustryService:
    """Get singleton industry service instance."""
    global _industry_service
    if _industry_service is None:
        _industry_service = IndustryService()
    return _industry_service
