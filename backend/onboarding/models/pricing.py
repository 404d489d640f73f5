from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from onboarding.database import Base

SERVICE_TYPES = ("photo", "video", "iguide", "matterport")


class FlatService(Base):
    __tablename__ = "flat_services"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    rate = Column(Text, nullable=False, default="0")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class Tier(Base):
    __tablename__ = "tiers"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    min_sqft = Column(Integer, nullable=False)
    max_sqft = Column(Integer, nullable=False)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    rates = relationship("TieredRate", back_populates="tier", cascade="all, delete-orphan")


class TieredRate(Base):
    __tablename__ = "tiered_rates"
    __table_args__ = (UniqueConstraint("tier_id", "service_type"),)

    id = Column(Text, primary_key=True)
    tier_id = Column(Text, ForeignKey("tiers.id", ondelete="CASCADE"), nullable=False)
    service_type = Column(Text, nullable=False)
    rate = Column(Text, nullable=False, default="0")
    updated_at = Column(Text, nullable=False)

    tier = relationship("Tier", back_populates="rates")
