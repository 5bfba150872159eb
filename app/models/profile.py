"""Industry-specific profile models, one table per industry."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String

from app.database import Base
from app.models.user import new_id


class TourProfile(Base):
    """Tour operator details."""

    __tablename__ = "tour_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    company_name = Column(String(100), nullable=True)
    license_number = Column(String(50), nullable=True)
    specialties = Column(JSON, nullable=True)  # tour types
    languages = Column(JSON, nullable=True)
    certifications = Column(JSON, nullable=True)
    experience = Column(Integer, nullable=True)  # years
    rating = Column(Numeric(3, 2, asdecimal=False), nullable=False, default=0)
    total_tours = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class TravelProfile(Base):
    """Travel agency details."""

    __tablename__ = "travel_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    agency_name = Column(String(100), nullable=True)
    iata_number = Column(String(50), nullable=True)
    specialties = Column(JSON, nullable=True)  # travel services
    destinations = Column(JSON, nullable=True)
    certifications = Column(JSON, nullable=True)
    experience = Column(Integer, nullable=True)
    rating = Column(Numeric(3, 2, asdecimal=False), nullable=False, default=0)
    total_bookings = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class LogisticsProfile(Base):
    """Logistics company details."""

    __tablename__ = "logistics_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    company_name = Column(String(100), nullable=True)
    license_number = Column(String(50), nullable=True)
    specialties = Column(JSON, nullable=True)  # logistics services
    vehicle_types = Column(JSON, nullable=True)
    coverage_areas = Column(JSON, nullable=True)
    certifications = Column(JSON, nullable=True)
    experience = Column(Integer, nullable=True)
    rating = Column(Numeric(3, 2, asdecimal=False), nullable=False, default=0)
    total_shipments = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


IndustryProfile = TourProfile | TravelProfile | LogisticsProfile
