from sqlalchemy import Boolean, Column, Float, ForeignKey, Text, UniqueConstraint
from onboarding.database import Base


class HireeFlatServiceOverride(Base):
    __tablename__ = "hiree_flat_service_overrides"
    __table_args__ = (UniqueConstraint("profile_id", "flat_service_id"),)

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    flat_service_id = Column(Text, ForeignKey("flat_services.id", ondelete="CASCADE"), nullable=False)
    custom_rate = Column(Float)
    is_enabled = Column(Boolean, nullable=False, default=False)
    updated_at = Column(Text, nullable=False)


class HireeTieredRateOverride(Base):
    __tablename__ = "hiree_tiered_rate_overrides"
    __table_args__ = (UniqueConstraint("profile_id", "tiered_rate_id"),)

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    tiered_rate_id = Column(Text, ForeignKey("tiered_rates.id", ondelete="CASCADE"), nullable=False)
    custom_rate = Column(Float)
    is_enabled = Column(Boolean, nullable=False, default=False)
    updated_at = Column(Text, nullable=False)


class HireeGearOverride(Base):
    __tablename__ = "hiree_gear_overrides"
    __table_args__ = (UniqueConstraint("profile_id", "gear_item_id"),)

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    gear_item_id = Column(Text, ForeignKey("gear_items.id", ondelete="CASCADE"), nullable=False)
    is_required = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)
    updated_at = Column(Text, nullable=False)
