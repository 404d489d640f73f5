import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from onboarding.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- ACCOUNTS & AUTH THROTTLE
-- ============================================================
CREATE TABLE IF NOT EXISTS accounts (
    id            TEXT PRIMARY KEY,
    email         TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS auth_throttle (
    key             TEXT PRIMARY KEY,
    failed_attempts INTEGER NOT NULL,
    last_failed_at  REAL NOT NULL
);

-- ============================================================
-- COMPANIES & PROFILES
-- ============================================================
CREATE TABLE IF NOT EXISTS companies (
    id             TEXT PRIMARY KEY,
    owner_id       TEXT NOT NULL UNIQUE REFERENCES accounts(id) ON DELETE CASCADE,
    name           TEXT NOT NULL,
    jurisdiction   TEXT NOT NULL,
    logo_path      TEXT,
    logo_mime_type TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS profiles (
    id         TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    name       TEXT NOT NULL,
    dob        TEXT,
    address    TEXT,
    email      TEXT,
    phone      TEXT,
    hire_date  TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_profiles_company ON profiles(company_id);

-- ============================================================
-- PRICING
-- ============================================================
CREATE TABLE IF NOT EXISTS flat_services (
    id         TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    name       TEXT NOT NULL,
    rate       TEXT NOT NULL DEFAULT '0',
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_flat_services_company ON flat_services(company_id);

CREATE TABLE IF NOT EXISTS tiers (
    id         TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    min_sqft   INTEGER NOT NULL,
    max_sqft   INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_tiers_company ON tiers(company_id);

CREATE TABLE IF NOT EXISTS tiered_rates (
    id           TEXT PRIMARY KEY,
    tier_id      TEXT NOT NULL REFERENCES tiers(id) ON DELETE CASCADE,
    service_type TEXT NOT NULL
                 CHECK(service_type IN ('photo','video','iguide','matterport')),
    rate         TEXT NOT NULL DEFAULT '0',
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (tier_id, service_type)
);

-- ============================================================
-- GEAR
-- ============================================================
CREATE TABLE IF NOT EXISTS gear_items (
    id                  TEXT PRIMARY KEY,
    company_id          TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    profile_id          TEXT REFERENCES profiles(id) ON DELETE CASCADE,
    name                TEXT NOT NULL,
    is_custom           INTEGER NOT NULL DEFAULT 0,
    is_required         INTEGER NOT NULL DEFAULT 1,
    notes               TEXT,
    estimated_price_cad REAL,
    price_source        TEXT
                        CHECK(price_source IN ('manual','openai-estimated','user-overridden')),
    last_estimated_at   TEXT,
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_gear_company ON gear_items(company_id);
CREATE INDEX IF NOT EXISTS idx_gear_profile ON gear_items(profile_id);

-- ============================================================
-- PER-HIREE OVERRIDES
-- ============================================================
CREATE TABLE IF NOT EXISTS hiree_flat_service_overrides (
    id              TEXT PRIMARY KEY,
    profile_id      TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    flat_service_id TEXT NOT NULL REFERENCES flat_services(id) ON DELETE CASCADE,
    custom_rate     REAL,
    is_enabled      INTEGER NOT NULL DEFAULT 0,
    updated_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (profile_id, flat_service_id)
);

CREATE TABLE IF NOT EXISTS hiree_tiered_rate_overrides (
    id             TEXT PRIMARY KEY,
    profile_id     TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    tiered_rate_id TEXT NOT NULL REFERENCES tiered_rates(id) ON DELETE CASCADE,
    custom_rate    REAL,
    is_enabled     INTEGER NOT NULL DEFAULT 0,
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (profile_id, tiered_rate_id)
);

CREATE TABLE IF NOT EXISTS hiree_gear_overrides (
    id           TEXT PRIMARY KEY,
    profile_id   TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    gear_item_id TEXT NOT NULL REFERENCES gear_items(id) ON DELETE CASCADE,
    is_required  INTEGER NOT NULL DEFAULT 1,
    notes        TEXT,
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (profile_id, gear_item_id)
);

-- ============================================================
-- OFFERS & TEMPLATES
-- ============================================================
CREATE TABLE IF NOT EXISTS offer_details (
    id                            TEXT PRIMARY KEY,
    profile_id                    TEXT NOT NULL UNIQUE REFERENCES profiles(id) ON DELETE CASCADE,
    position                      TEXT,
    start_date                    TEXT,
    end_date                      TEXT,
    work_schedule                 TEXT,
    probation_months              INTEGER,
    manager_name                  TEXT,
    manager_email                 TEXT,
    manager_phone                 TEXT,
    manager_ext                   TEXT,
    contact_ext                   TEXT,
    return_by                     TEXT,
    ceo_name                      TEXT,
    base_salary                   REAL NOT NULL DEFAULT 0,
    hourly_rate                   REAL NOT NULL DEFAULT 0,
    commission                    REAL NOT NULL DEFAULT 0,
    benefits                      TEXT,
    selected_flat_service_ids     TEXT NOT NULL DEFAULT '[]',
    selected_tiered_service_types TEXT NOT NULL DEFAULT '[]',
    responsibilities              TEXT,
    requirements                  TEXT,
    terms                         TEXT,
    status                        TEXT NOT NULL DEFAULT 'draft'
                                  CHECK(status IN ('draft','finalized','sent','accepted','rejected')),
    created_at                    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at                    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS templates (
    id            TEXT PRIMARY KEY,
    profile_id    TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    document_type TEXT NOT NULL
                  CHECK(document_type IN ('waiver','noncompete','gear','pay','offer')),
    clauses       TEXT NOT NULL DEFAULT '[]',
    addendum      TEXT,
    updated_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (profile_id, document_type)
);

-- ============================================================
-- SIGNATURES
-- ============================================================
CREATE TABLE IF NOT EXISTS signatures (
    id             TEXT PRIMARY KEY,
    company_id     TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    profile_id     TEXT REFERENCES profiles(id) ON DELETE CASCADE,
    signature_type TEXT NOT NULL CHECK(signature_type IN ('hiree','company')),
    name           TEXT,
    signature_data TEXT NOT NULL,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_signatures_company ON signatures(company_id);

CREATE TABLE IF NOT EXISTS document_signature_links (
    id                    TEXT PRIMARY KEY,
    company_id            TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    profile_id            TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    document_type         TEXT NOT NULL
                          CHECK(document_type IN ('waiver','noncompete','gear','pay','offer')),
    document_title        TEXT NOT NULL,
    document_id           TEXT NOT NULL,
    document_html         TEXT NOT NULL,
    signature_token       TEXT NOT NULL UNIQUE,
    is_signed             INTEGER NOT NULL DEFAULT 0,
    signed_at             TEXT,
    signed_by             TEXT CHECK(signed_by IN ('tenant','hiree')),
    tenant_signature_data TEXT,
    tenant_initial_data   TEXT,
    hiree_signature_data  TEXT,
    hiree_initial_data    TEXT,
    created_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_signature_links_profile ON document_signature_links(profile_id);

-- ============================================================
-- AUDIT LOGS
-- ============================================================
CREATE TABLE IF NOT EXISTS signature_reset_logs (
    id                TEXT PRIMARY KEY,
    signature_link_id TEXT NOT NULL REFERENCES document_signature_links(id) ON DELETE CASCADE,
    reset_by          TEXT NOT NULL,
    reset_reason      TEXT,
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS gear_estimation_logs (
    id                       TEXT PRIMARY KEY,
    company_id               TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    profile_id               TEXT REFERENCES profiles(id) ON DELETE SET NULL,
    estimation_type          TEXT NOT NULL
                             CHECK(estimation_type IN ('company_gear','hiree_custom_gear','all_gear')),
    items_estimated          INTEGER NOT NULL,
    total_estimated_cost_cad REAL NOT NULL,
    tokens_used              INTEGER NOT NULL,
    cost_usd                 REAL NOT NULL,
    model                    TEXT,
    created_at               TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    conn.close()
