from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Text
from onboarding.database import Base

ESTIMATION_TYPES = ("company_gear", "hiree_custom_gear", "all_gear")


class GearItem(Base):
    __tablename__ = "gear_items"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # Set only for hiree custom gear
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"))
    name = Column(Text, nullable=False)
    is_custom = Column(Boolean, nullable=False, default=False)
    is_required = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)
    estimated_price_cad = Column(Float)
    price_source = Column(Text)
    last_estimated_at = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class GearEstimationLog(Base):
    __tablename__ = "gear_estimation_logs"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="SET NULL"))
    estimation_type = Column(Text, nullable=False)
    items_estimated = Column(Integer, nullable=False)
    total_estimated_cost_cad = Column(Float, nullable=False)
    tokens_used = Column(Integer, nullable=False)
    cost_usd = Column(Float, nullable=False)
    model = Column(Text)
    created_at = Column(Text, nullable=False)
