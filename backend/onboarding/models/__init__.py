from onboarding.models.account import Account
from onboarding.models.company import Company, Profile
from onboarding.models.pricing import FlatService, Tier, TieredRate
from onboarding.models.gear import GearItem, GearEstimationLog
from onboarding.models.override import (
    HireeFlatServiceOverride,
    HireeGearOverride,
    HireeTieredRateOverride,
)
from onboarding.models.offer import OfferDetails, Template
from onboarding.models.signature import DocumentSignatureLink, Signature, SignatureResetLog

__all__ = [
    "Account", "Company", "Profile", "FlatService", "Tier", "TieredRate",
    "GearItem", "GearEstimationLog", "HireeFlatServiceOverride",
    "HireeTieredRateOverride", "HireeGearOverride", "OfferDetails", "Template",
    "Signature", "DocumentSignatureLink", "SignatureResetLog",
]
