import re

import pytest

from onboarding.services.document_builder import (
    NO_OFFER_PLACEHOLDER,
    NO_PROFILE_PLACEHOLDER,
    AssemblyContext,
    CompanyInfo,
    FlatServiceEntry,
    GearEntry,
    HireeInfo,
    OfferInfo,
    TemplateInfo,
    TierEntry,
    TieredRateEntry,
    build_document,
    document_heading,
)
from onboarding.services.pricing import CustomRate, GearRequirement


def _context(**overrides):
    values = dict(
        company=CompanyInfo(name="Solution Gate Media", jurisdiction="Ontario, Canada"),
        profile=HireeInfo(name="Jane Doe", email="jane@example.com", dob="1995-06-01"),
    )
    values.update(overrides)
    return AssemblyContext(**values)


class TestWaiver:
    def test_clauses_and_addendum(self):
        ctx = _context(template=TemplateInfo(
            clauses=["I will follow safety rules", "", "I will keep client data private"],
            addendum="Line one\nLine two",
        ))
        html = build_document("waiver", ctx, document_id="SGM-ABC-12345", generated_on="2025-01-05")

        assert html.count('class="initials-page"') == 1
        assert html.count('class="initials-row"') == 2
        assert html.count('class="addendum-block"') == 1
        assert "<p>Line one</p><p>Line two</p>" in html
        assert "Trainee Signature" in html
        assert "Company Representative Signature" in html
        assert "Training Waiver &amp; Liability Release - Document ID: SGM-ABC-12345" in html
        assert "Generated on January 5, 2025" in html
        assert "laws of Ontario, Canada" in html

    def test_no_clauses_no_initials_page(self):
        html = build_document("waiver", _context())
        assert 'class="initials-page"' not in html
        assert 'class="addendum-block"' not in html

    def test_signature_images_and_placeholders(self):
        html = build_document("waiver", _context(hiree_signature="data:image/png;base64,AAAA"))
        assert 'src="data:image/png;base64,AAAA"' in html
        assert html.count("Signature required") == 1

    def test_user_text_is_escaped(self):
        ctx = _context(
            company=CompanyInfo(name="<Acme & Sons>", jurisdiction="Ontario"),
            profile=HireeInfo(name="<script>alert(1)</script>"),
        )
        html = build_document("waiver", ctx)
        assert "<script>" not in html
        assert "&lt;Acme &amp; Sons&gt;" in html

    def test_fresh_document_id_per_render(self):
        first = build_document("waiver", _context())
        second = build_document("waiver", _context())
        ids = [re.search(r"Document ID: (SGM-[0-9A-Z]+-[0-9A-Z]{5})", h).group(1) for h in (first, second)]
        assert ids[0] != ids[1]

    def test_defaults_for_blank_company(self):
        html = build_document("waiver", _context(company=CompanyInfo()))
        assert "Solution Gate Media" in html
        assert "Ontario, Canada" in html

    def test_logo_image(self):
        ctx = _context(company=CompanyInfo(name="Acme", jurisdiction="Ontario", logo="data:image/png;base64,QUJD"))
        html = build_document("waiver", ctx)
        assert 'alt="Company Logo"' in html


class TestPlaceholders:
    @pytest.mark.parametrize("doc_type", ["pay", "offer"])
    def test_offer_required(self, doc_type):
        assert build_document(doc_type, _context()) == NO_OFFER_PLACEHOLDER

    def test_offer_placeholder_checked_before_profile(self):
        assert build_document("pay", _context(profile=None)) == NO_OFFER_PLACEHOLDER

    def test_profile_required(self):
        assert build_document("waiver", _context(profile=None)) == NO_PROFILE_PLACEHOLDER
        assert build_document("gear", _context(profile=None)) == NO_PROFILE_PLACEHOLDER

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            build_document("lease", _context())


class TestPay:
    def _pricing_context(self, **offer_fields):
        offer = OfferInfo(
            position="Videographer",
            start_date="2025-01-15",
            probation_months=3,
            base_salary=52000,
            selected_flat_service_ids=["fs-1"],
            selected_tiered_service_types=["photo", "video"],
            **offer_fields,
        )
        return _context(
            offer=offer,
            flat_services=[
                FlatServiceEntry(id="fs-1", name="Drone Add-on", rate="150", override=CustomRate(rate=175)),
                FlatServiceEntry(id="fs-2", name="Twilight", rate="90"),
            ],
            tiers=[TierEntry(id="t-2", min_sqft=1501, max_sqft=3000), TierEntry(id="t-1", min_sqft=1, max_sqft=1500)],
            tiered_rates=[
                TieredRateEntry(id="r-1", tier_id="t-1", service_type="photo", rate="120"),
                TieredRateEntry(id="r-2", tier_id="t-1", service_type="video", rate="200"),
                TieredRateEntry(id="r-3", tier_id="t-2", service_type="photo", rate="160"),
                TieredRateEntry(id="r-4", tier_id="t-2", service_type="video", rate="260",
                                override=CustomRate(rate=300, enabled=False)),
            ],
        )

    def test_selected_services_only(self):
        html = build_document("pay", self._pricing_context())
        assert "Drone Add-on" in html
        assert "Twilight" not in html
        assert "Matterport" not in html
        assert "iGuide" not in html

    def test_resolved_rates(self):
        html = build_document("pay", self._pricing_context())
        assert "$175.00" in html
        assert "$150.00" not in html
        assert "$260.00" in html
        assert "$300.00" not in html

    def test_tiers_sorted_with_labels(self):
        html = build_document("pay", self._pricing_context())
        assert html.index("Up to 1,500 SQ.FT") < html.index("1,501 - 3,000 SQ.FT")

    def test_probation_window(self):
        html = build_document("pay", self._pricing_context())
        assert "January 15, 2025" in html
        assert "April 15, 2025" in html
        assert "$52,000.00" in html

    def test_signature_order(self):
        html = build_document("pay", self._pricing_context())
        assert html.index("Employer Signature") < html.index("Employee Signature")


class TestOffer:
    def test_offer_letter(self):
        ctx = _context(offer=OfferInfo(
            position="Photographer",
            start_date="2025-02-01",
            manager_name="Sam Lee",
            benefits="Camera allowance",
            ceo_name="Alex Morgan",
        ))
        html = build_document("offer", ctx)
        assert "Offer of Co-Working - Photographer" in html
        assert "Dear Jane Doe," in html
        assert "Sam Lee" in html
        assert "Camera allowance" in html
        assert "Alex Morgan" in html
        assert "Freelancer Signature" in html
        assert "Acceptance Letter - Document ID:" in html

    def test_heading(self):
        ctx = _context(offer=OfferInfo(position="Editor"))
        assert document_heading("offer", ctx) == "Offer of Co-Working - Editor"
        assert document_heading("offer", _context()) == "Acceptance Letter"
        assert document_heading("gear", ctx) == "Equipment, Gear & Supply Obligations"


class TestGear:
    def test_gear_table(self):
        ctx = _context(gear=[
            GearEntry(id="g-1", name="Full-frame camera", estimated_price_cad=2500.0),
            GearEntry(id="g-2", name="Drone", estimated_price_cad=1200.0,
                      override=GearRequirement(required=False, notes="Rental approved")),
            GearEntry(id="g-3", name="Spare batteries", is_custom=True, is_required=True),
        ])
        html = build_document("gear", ctx)
        assert html.count("<td>Required</td>") == 2
        assert html.count("<td>Optional</td>") == 1
        assert "Rental approved" in html
        assert "Not estimated" in html
        assert "$3,700.00" in html
        assert 'class="gear-total"' in html

    def test_no_gear(self):
        html = build_document("gear", _context())
        assert "No equipment has been listed" in html
