from sqlalchemy import JSON, Column, Float, ForeignKey, Integer, Text, UniqueConstraint
from onboarding.database import Base

OFFER_STATUSES = ("draft", "finalized", "sent", "accepted", "rejected")


class OfferDetails(Base):
    __tablename__ = "offer_details"

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    position = Column(Text)
    start_date = Column(Text)
    end_date = Column(Text)
    work_schedule = Column(Text)
    probation_months = Column(Integer)
    manager_name = Column(Text)
    manager_email = Column(Text)
    manager_phone = Column(Text)
    manager_ext = Column(Text)
    contact_ext = Column(Text)
    return_by = Column(Text)
    ceo_name = Column(Text)
    base_salary = Column(Float, nullable=False, default=0)
    hourly_rate = Column(Float, nullable=False, default=0)
    commission = Column(Float, nullable=False, default=0)
    benefits = Column(Text)
    selected_flat_service_ids = Column(JSON, nullable=False, default=list)
    selected_tiered_service_types = Column(JSON, nullable=False, default=list)
    responsibilities = Column(Text)
    requirements = Column(Text)
    terms = Column(Text)
    status = Column(Text, nullable=False, default="draft")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class Template(Base):
    __tablename__ = "templates"
    __table_args__ = (UniqueConstraint("profile_id", "document_type"),)

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    document_type = Column(Text, nullable=False)
    clauses = Column(JSON, nullable=False, default=list)
    addendum = Column(Text)
    updated_at = Column(Text, nullable=False)
