from sqlalchemy import Column, ForeignKey, Text
from onboarding.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Text, primary_key=True)
    owner_id = Column(Text, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    jurisdiction = Column(Text, nullable=False)
    logo_path = Column(Text)
    logo_mime_type = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    dob = Column(Text)
    address = Column(Text)
    email = Column(Text)
    phone = Column(Text)
    hire_date = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
