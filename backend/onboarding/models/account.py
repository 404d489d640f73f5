from sqlalchemy import Column, Text
from onboarding.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)
