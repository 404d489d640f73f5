from sqlalchemy import Boolean, Column, ForeignKey, Text
from onboarding.database import Base


class Signature(Base):
    __tablename__ = "signatures"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"))
    signature_type = Column(Text, nullable=False)
    name = Column(Text)
    signature_data = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)


class DocumentSignatureLink(Base):
    __tablename__ = "document_signature_links"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    document_type = Column(Text, nullable=False)
    document_title = Column(Text, nullable=False)
    document_id = Column(Text, nullable=False)
    document_html = Column(Text, nullable=False)
    signature_token = Column(Text, nullable=False, unique=True)
    is_signed = Column(Boolean, nullable=False, default=False)
    signed_at = Column(Text)
    signed_by = Column(Text)
    tenant_signature_data = Column(Text)
    tenant_initial_data = Column(Text)
    hiree_signature_data = Column(Text)
    hiree_initial_data = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class SignatureResetLog(Base):
    __tablename__ = "signature_reset_logs"

    id = Column(Text, primary_key=True)
    signature_link_id = Column(
        Text, ForeignKey("document_signature_links.id", ondelete="CASCADE"), nullable=False
    )
    reset_by = Column(Text, nullable=False)
    reset_reason = Column(Text)
    created_at = Column(Text, nullable=False)
