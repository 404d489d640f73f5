"""Assembly of onboarding documents into self-contained HTML bodies.

``build_document`` is a pure function of its ``AssemblyContext``: it performs
no I/O and reads no global state. The markup sticks to what both browsers and
``fpdf2``'s ``write_html`` understand: headings, paragraphs, lists, tables
with one plain-text chunk per cell, and images outside paragraphs.
"""

from dataclasses import dataclass, field

from onboarding.services.pricing import (
    DEFAULT,
    GearOverride,
    RateOverride,
    resolve_flat_service_rate,
    resolve_gear_notes,
    resolve_gear_required,
    resolve_tiered_rate,
)
from onboarding.services.tiers import tier_label
from onboarding.utils.formatting import (
    BLANK_DATE,
    add_months,
    doc_id,
    escape_html,
    format_currency,
    format_long_date,
    today_iso,
)

DOCUMENT_TYPES = ("waiver", "noncompete", "gear", "pay", "offer")

DOCUMENT_TITLES = {
    "waiver": "Training Waiver & Liability Release",
    "noncompete": "Non-Compete Agreement",
    "gear": "Equipment, Gear & Supply Obligations",
    "pay": "Compensation Agreement",
    "offer": "Acceptance Letter",
}

DOCUMENT_FILENAMES = {
    "waiver": "Training_Waiver_Liability_Release",
    "noncompete": "Non_Compete_Agreement",
    "gear": "Equipment_Gear_Supply_Obligations",
    "pay": "Compensation_Agreement",
    "offer": "Acceptance_Letter",
}

SERVICE_TYPE_LABELS = {
    "photo": "Photo",
    "video": "Video",
    "iguide": "iGuide",
    "matterport": "Matterport",
}

DEFAULT_COMPANY_NAME = "Solution Gate Media"
DEFAULT_JURISDICTION = "Ontario, Canada"
DEFAULT_POSITION = "Photographer"
BLANK_FIELD = "________"

NO_OFFER_PLACEHOLDER = (
    '<div class="document-placeholder">'
    "<p>No offer details exist for this hiree yet. "
    "Create an offer first to generate this document.</p>"
    "</div>"
)
NO_PROFILE_PLACEHOLDER = (
    '<div class="document-placeholder">'
    "<p>No hiree profile is loaded. "
    "Create or load a hiree profile first to generate this document.</p>"
    "</div>"
)


@dataclass
class CompanyInfo:
    name: str = ""
    jurisdiction: str = ""
    logo: str | None = None  # data URL


@dataclass
class HireeInfo:
    name: str = ""
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    dob: str | None = None
    hire_date: str | None = None


@dataclass
class FlatServiceEntry:
    id: str
    name: str
    rate: str
    override: RateOverride = DEFAULT


@dataclass
class TierEntry:
    id: str
    min_sqft: int
    max_sqft: int


@dataclass
class TieredRateEntry:
    id: str
    tier_id: str
    service_type: str
    rate: str
    override: RateOverride = DEFAULT


@dataclass
class GearEntry:
    id: str
    name: str
    is_custom: bool = False
    is_required: bool = True
    notes: str | None = None
    estimated_price_cad: float | None = None
    override: GearOverride = DEFAULT


@dataclass
class OfferInfo:
    position: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    work_schedule: str | None = None
    probation_months: int | None = None
    manager_name: str | None = None
    manager_email: str | None = None
    manager_phone: str | None = None
    manager_ext: str | None = None
    contact_ext: str | None = None
    return_by: str | None = None
    ceo_name: str | None = None
    base_salary: float = 0
    hourly_rate: float = 0
    commission: float = 0
    benefits: str | None = None
    selected_flat_service_ids: list[str] = field(default_factory=list)
    selected_tiered_service_types: list[str] = field(default_factory=list)


@dataclass
class TemplateInfo:
    clauses: list[str] = field(default_factory=list)
    addendum: str = ""


@dataclass
class AssemblyContext:
    company: CompanyInfo
    profile: HireeInfo | None = None
    flat_services: list[FlatServiceEntry] = field(default_factory=list)
    tiers: list[TierEntry] = field(default_factory=list)
    tiered_rates: list[TieredRateEntry] = field(default_factory=list)
    gear: list[GearEntry] = field(default_factory=list)
    offer: OfferInfo | None = None
    template: TemplateInfo = field(default_factory=TemplateInfo)
    hiree_signature: str | None = None
    company_signature: str | None = None


# ---------------------------------------------------------------------------
# Shared blocks
# ---------------------------------------------------------------------------

def _logo_block(company: CompanyInfo, c: str) -> str:
    if company.logo:
        return (
            '<div class="logo-block" style="text-align:center;margin-bottom:20px">'
            f'<img src="{escape_html(company.logo)}" alt="Company Logo" height="60" '
            'style="max-height:60px;object-fit:contain">'
            "</div>"
        )
    return (
        '<div class="logo-block" style="text-align:center;margin-bottom:20px">'
        f'<h1 class="logo-text" align="center" style="font-size:24px;color:#0f172a">{c}</h1>'
        "</div>"
    )


def _title_block(title: str, c: str) -> str:
    return (
        '<div class="title-block">'
        f'<h2 style="font-size:22px;color:#0f172a;margin-bottom:4px">{escape_html(title)}</h2>'
        f'<p class="company-line" style="color:#475569">{c}</p>'
        "</div>"
    )


def _hiree_block(profile: HireeInfo) -> str:
    dob = format_long_date(profile.dob) if profile.dob else BLANK_DATE
    rows = [
        ("Name", escape_html(profile.name or BLANK_DATE)),
        ("Email", escape_html(profile.email or BLANK_DATE)),
        ("Phone", escape_html(profile.phone or BLANK_DATE)),
        ("Address", escape_html(profile.address or BLANK_DATE)),
        ("Date of Birth", dob),
    ]
    lines = "".join(f"<p><b>{label}:</b> {value}</p>" for label, value in rows)
    return (
        '<div class="hiree-info" style="margin:12px 0;padding:12px;background:#f8fafc;'
        'border:1px solid #e2e8f0;border-radius:8px">'
        '<h4 style="color:#0f172a">Hiree Information</h4>'
        f"{lines}"
        "</div>"
    )


def _signature_block(label: str, signature: str | None) -> str:
    if signature:
        mark = (
            f'<img src="{escape_html(signature)}" alt="Signature" height="50" '
            'style="max-height:50px;max-width:200px;object-fit:contain">'
        )
    else:
        mark = '<p class="signature-placeholder" style="color:#9ca3af">Signature required</p>'
    return (
        '<div class="signature-block" style="margin:20px 0;padding:12px;'
        'border:1px solid #e2e8f0;border-radius:8px">'
        f'<p class="signature-label"><b>{escape_html(label)}</b></p>'
        f"{mark}"
        f'<p class="signature-date" style="color:#6b7280;font-size:12px">Date: {BLANK_DATE}</p>'
        "</div>"
    )


def _addendum_block(addendum: str) -> str:
    if not addendum or not addendum.strip():
        return ""
    # Paragraph per line keeps line breaks in both browser and PDF output
    lines = "".join(
        f"<p>{escape_html(line)}</p>" for line in addendum.splitlines() if line.strip()
    )
    return (
        '<div class="addendum-block" style="margin:20px 0;padding:12px;background:#fef3c7;'
        'border:1px solid #f59e0b;border-radius:8px;color:#92400e">'
        '<h4 style="color:#92400e">Additional Terms &amp; Notes</h4>'
        f"{lines}"
        "</div>"
    )


def _footer_block(title: str, document_id: str, generated_on: str) -> str:
    return (
        '<div class="footer-block" style="margin-top:30px;padding-top:20px;'
        'border-top:1px solid #e2e8f0;color:#6b7280;font-size:12px;text-align:center">'
        f'<p align="center">{escape_html(title)} - Document ID: {escape_html(document_id)}</p>'
        f'<p align="center">Generated on {format_long_date(generated_on)}</p>'
        "</div>"
    )


def _initials_page(title: str, document_id: str, clauses: list[str]) -> str:
    clauses = [clause for clause in clauses if clause and clause.strip()]
    if not clauses:
        return ""
    rows = "".join(
        f'<tr class="initials-row"><td></td><td>{escape_html(clause)}</td></tr>'
        for clause in clauses
    )
    return (
        '<div class="initials-page" style="break-before:page;page-break-before:always;margin-top:20px">'
        f'<h3 align="center">{escape_html(title)} - Initials Page</h3>'
        f'<p align="center" style="color:#6b7280;font-size:12px">Document ID: {escape_html(document_id)}</p>'
        "<p><b>Please initial each clause below:</b></p>"
        '<table border="1" style="width:100%">'
        '<thead><tr><th width="20%">Initials</th><th width="80%">Clause</th></tr></thead>'
        f"<tbody>{rows}</tbody>"
        "</table>"
        "</div>"
    )


def _clause(number: int, heading: str, body: str) -> str:
    return (
        f'<h3 style="margin:14px 0 8px;font-size:16px;color:#0f172a">{number}. {heading}</h3>'
        f'<p style="color:#1f2937">{body}</p>'
    )


def _closing(title: str, ctx: AssemblyContext, document_id: str,
             generated_on: str, signatures: list[tuple[str, str | None]]) -> list[str]:
    parts = [_addendum_block(ctx.template.addendum)]
    parts.extend(_signature_block(label, data) for label, data in signatures)
    parts.append(_footer_block(title, document_id, generated_on))
    parts.append(_initials_page(title, document_id, ctx.template.clauses))
    return parts


# ---------------------------------------------------------------------------
# Pricing tables
# ---------------------------------------------------------------------------

def _tiered_table(ctx: AssemblyContext, service_types: list[str]) -> str:
    if not ctx.tiers or not service_types:
        return ""
    rates = {(r.tier_id, r.service_type): r for r in ctx.tiered_rates}
    header = "".join(f"<th>{SERVICE_TYPE_LABELS[t]}</th>" for t in service_types)
    rows = []
    for index, tier in enumerate(sorted(ctx.tiers, key=lambda t: t.min_sqft), start=1):
        cells = []
        for service_type in service_types:
            rate = rates.get((tier.id, service_type))
            amount = resolve_tiered_rate(rate, rate.override) if rate else 0.0
            cells.append(f"<td>{format_currency(amount)}</td>")
        rows.append(
            f"<tr><td>Tier {index}</td>"
            f"<td>{escape_html(tier_label(tier.min_sqft, tier.max_sqft))}</td>"
            f"{''.join(cells)}</tr>"
        )
    return (
        '<h4 style="font-size:14px;color:#0f172a">Tiered Services (by Square Footage)</h4>'
        '<table border="1" class="tiered-rates" style="width:100%">'
        f"<thead><tr><th>Tier</th><th>Range</th>{header}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )


def _flat_table(services: list[FlatServiceEntry]) -> str:
    if not services:
        return ""
    rows = "".join(
        f"<tr><td>{escape_html(s.name)}</td>"
        f"<td>{format_currency(resolve_flat_service_rate(s, s.override))}</td></tr>"
        for s in services
    )
    return (
        '<h4 style="font-size:14px;color:#0f172a">Flat Rate Services</h4>'
        '<table border="1" class="flat-rates" style="width:100%">'
        "<thead><tr><th>Service</th><th>Rate</th></tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>"
    )


def _pricing_tables(ctx: AssemblyContext, offer: OfferInfo) -> str:
    selected_ids = set(offer.selected_flat_service_ids or [])
    flat = [s for s in ctx.flat_services if s.id in selected_ids]
    service_types = [
        t for t in SERVICE_TYPE_LABELS if t in (offer.selected_tiered_service_types or [])
    ]
    tables = _tiered_table(ctx, service_types) + _flat_table(flat)
    if not tables:
        return '<p style="color:#6b7280">No services have been selected on the offer.</p>'
    return tables


def _gear_table(gear: list[GearEntry]) -> str:
    if not gear:
        return '<p style="color:#6b7280">No equipment has been listed for this hiree.</p>'
    rows = []
    total = 0.0
    priced = False
    for item in gear:
        required = resolve_gear_required(item, item.override)
        notes = resolve_gear_notes(item, item.override)
        if item.estimated_price_cad is not None:
            price = format_currency(item.estimated_price_cad)
            total += item.estimated_price_cad
            priced = True
        else:
            price = "Not estimated"
        rows.append(
            "<tr>"
            f"<td>{escape_html(item.name)}</td>"
            f"<td>{'Required' if required else 'Optional'}</td>"
            f"<td>{escape_html(notes)}</td>"
            f"<td>{price}</td>"
            "</tr>"
        )
    if priced:
        rows.append(
            '<tr class="gear-total"><td colspan="3">Estimated Total (CAD)</td>'
            f"<td>{format_currency(total)}</td></tr>"
        )
    return (
        '<table border="1" class="gear-table" style="width:100%">'
        "<thead><tr><th>Item</th><th>Requirement</th><th>Notes</th>"
        "<th>Est. Price (CAD)</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )


def _compensation_block(offer: OfferInfo) -> str:
    lines = []
    if offer.base_salary:
        lines.append(f"<li><b>Base Salary:</b> {format_currency(offer.base_salary)}</li>")
    if offer.hourly_rate:
        lines.append(f"<li><b>Hourly Rate:</b> {format_currency(offer.hourly_rate)} per hour</li>")
    if offer.commission:
        lines.append(f"<li><b>Commission:</b> {offer.commission:g}%</li>")
    if offer.benefits and offer.benefits.strip():
        lines.append(f"<li><b>Benefits:</b> {escape_html(offer.benefits)}</li>")
    if not lines:
        return ""
    return (
        '<div class="compensation-details">'
        '<h4 style="font-size:14px;color:#0f172a">Compensation Details</h4>'
        f"<ul>{''.join(lines)}</ul>"
        "</div>"
    )


# ---------------------------------------------------------------------------
# Document bodies
# ---------------------------------------------------------------------------

def _waiver(ctx, c, j, document_id, generated_on):
    title = DOCUMENT_TITLES["waiver"]
    parts = [
        _logo_block(ctx.company, c),
        _title_block(title, c),
        _hiree_block(ctx.profile),
        _clause(1, "Assumption of Risk",
                "The Trainee acknowledges that participation in training and shadowing "
                "activities may involve risks, including but not limited to property damage, "
                "personal injury, equipment loss, and privacy concerns. The Trainee voluntarily "
                "assumes all such risks associated with training."),
        _clause(2, "Release of Liability",
                f"The Trainee releases and holds harmless {c}, its employees, contractors, "
                "clients, and affiliates from any claims, demands, damages, or liabilities "
                "arising from or related to training activities."),
        _clause(3, "Confidentiality &amp; Non-Disclosure",
                "The Trainee agrees not to disclose or use any confidential information, "
                "business practices, client data, images, or techniques observed during "
                "training for any purpose outside of the training session."),
        _clause(4, "Image Rights",
                f"Any photographs, videos, or media taken during training remain the sole "
                f"property of {c}. Trainees may not use, distribute, or claim ownership of "
                "such media."),
        _clause(5, "Governing Law",
                f"This Agreement shall be governed by and construed in accordance with the "
                f"laws of {j}."),
    ]
    parts += _closing(title, ctx, document_id, generated_on, [
        ("Trainee Signature", ctx.hiree_signature),
        ("Company Representative Signature", ctx.company_signature),
    ])
    return parts


def _noncompete(ctx, c, j, document_id, generated_on):
    title = DOCUMENT_TITLES["noncompete"]
    parts = [
        _logo_block(ctx.company, c),
        _title_block(title, c),
        _hiree_block(ctx.profile),
        '<p style="color:#1f2937">This Non-Compete Agreement is effective during employment '
        "and for a period of three (3) years following termination.</p>",
        _clause(1, "Restriction on Competition",
                "Employee agrees not to engage in, directly or indirectly, any business or "
                "employment involving visual content services related to real estate, "
                "including but not limited to photography, videography, drone services, "
                f"3D tours, or any other services offered by {c}, within {j}."),
        _clause(2, "Confidential Information",
                "Employee acknowledges access to confidential business information, client "
                "data, strategies, and techniques, and agrees not to disclose, use, or exploit "
                "such information outside the scope of employment."),
        _clause(3, "Enforcement",
                f"{c} may enforce this Agreement through legal action, including injunctive "
                f"relief and damages available under the laws of {j}."),
        _clause(4, "Severability",
                "If any provision is held invalid or unenforceable, the remainder shall "
                "continue in full force and effect."),
        _clause(5, "Governing Law",
                f"This Agreement shall be governed by and construed in accordance with the "
                f"laws of {j}."),
    ]
    parts += _closing(title, ctx, document_id, generated_on, [
        ("Employee Signature", ctx.hiree_signature),
        ("Company Representative Signature", ctx.company_signature),
    ])
    return parts


def _gear(ctx, c, j, document_id, generated_on):
    title = DOCUMENT_TITLES["gear"]
    parts = [
        _logo_block(ctx.company, c),
        _title_block(title, c),
        _hiree_block(ctx.profile),
        '<p style="color:#1f2937">All new hires are required to have the following equipment '
        "prior to their first day of work. Equipment must be in working condition and "
        "available for inspection. Proof of Transport Canada drone certification is "
        "mandatory. Rentals may be accepted temporarily with prior written approval.</p>",
        '<h3 style="margin:14px 0 8px;font-size:16px;color:#0f172a">Required Equipment</h3>',
        _gear_table(ctx.gear),
    ]
    parts += _closing(title, ctx, document_id, generated_on, [
        ("Hiree Signature", ctx.hiree_signature),
        ("Company Representative Signature", ctx.company_signature),
    ])
    return parts


def _pay(ctx, c, j, document_id, generated_on):
    title = DOCUMENT_TITLES["pay"]
    offer = ctx.offer
    effective_from = format_long_date(offer.start_date)
    until_iso = None
    if offer.start_date and offer.probation_months:
        until_iso = add_months(offer.start_date, int(offer.probation_months))
    effective_until = format_long_date(until_iso)

    position_lines = [
        f"<p><b>Position:</b> {escape_html(offer.position or DEFAULT_POSITION)}</p>",
        f"<p><b>Start Date:</b> {format_long_date(offer.start_date)}</p>",
    ]
    if offer.end_date:
        position_lines.append(f"<p><b>End Date:</b> {format_long_date(offer.end_date)}</p>")

    parts = [
        _logo_block(ctx.company, c),
        _title_block(title, c),
        _hiree_block(ctx.profile),
        f'<div class="position-block">{"".join(position_lines)}</div>',
        _compensation_block(offer),
        '<h3 style="margin:12px 0 8px;font-size:16px;color:#0f172a">1) Tiered &amp; Flat Services</h3>',
        _pricing_tables(ctx, offer),
        '<h3 style="margin:16px 0 8px;font-size:16px;color:#0f172a">2) Payment &amp; Terms</h3>',
        '<ol class="payment-terms" style="color:#1f2937">'
        f"<li><b>Effective Period:</b> From <u>{effective_from}</u> until "
        f"<u>{effective_until}</u> (probation window).</li>"
        "<li>Compensation is payable every two (2) weeks; statutory deductions may apply.</li>"
        "<li>Travel outside of the standard service region will be compensated when "
        "pre-approved.</li>"
        "<li>In case of errors, reshoots, or client complaints, compensation may be held "
        "until resolved by the original provider; if resolved by another team member, "
        "compensation may be transferred accordingly.</li>"
        "<li>All other terms of the Employment Agreement continue to apply; where there is "
        "a conflict, this Compensation Agreement prevails unless superseded in writing.</li>"
        "</ol>",
    ]
    parts += _closing(title, ctx, document_id, generated_on, [
        ("Employer Signature", ctx.company_signature),
        ("Employee Signature", ctx.hiree_signature),
    ])
    return parts


def _offer(ctx, c, j, document_id, generated_on):
    title = DOCUMENT_TITLES["offer"]
    offer = ctx.offer
    position = escape_html(offer.position or DEFAULT_POSITION)
    probation = escape_html(offer.probation_months or 1)
    salutation = escape_html(ctx.profile.name) if ctx.profile.name else "_____________________"
    schedule = escape_html(offer.work_schedule) if offer.work_schedule else BLANK_DATE

    parts = [
        _logo_block(ctx.company, c),
        _title_block(f"Offer of Co-Working - {offer.position or DEFAULT_POSITION}", c),
        f'<p style="color:#475569">Date: {format_long_date(generated_on)}</p>',
        f'<p style="color:#1f2937">Dear {salutation},</p>',
        f'<p style="color:#1f2937">I am very pleased to offer you the position of {position} '
        f"with {c}. This position has a start date of {format_long_date(offer.start_date)} "
        f"and includes a probationary period of {probation} month(s), after which your "
        "performance will be reviewed.</p>",
        f'<p class="work-schedule" style="color:#1f2937">Your work schedule will be: {schedule}.</p>',
        f'<p class="manager-contact" style="color:#1f2937">You will report to '
        f"<b>{escape_html(offer.manager_name or BLANK_FIELD)}</b> "
        f"({escape_html(offer.manager_email or BLANK_FIELD)} | "
        f"{escape_html(offer.manager_phone or BLANK_FIELD)} "
        f"Ext {escape_html(offer.manager_ext or BLANK_FIELD)}).</p>",
    ]
    if offer.benefits and offer.benefits.strip():
        parts.append(
            f'<p class="benefits" style="color:#1f2937">This position includes the following '
            f"benefits: {escape_html(offer.benefits)}</p>"
        )
    return_line = (
        '<p style="color:#1f2937">Please indicate your acceptance by signing below and '
        f"returning this letter by {format_long_date(offer.return_by)}."
    )
    if offer.contact_ext:
        return_line += f" For general questions, contact us at Ext {escape_html(offer.contact_ext)}."
    parts.append(return_line + "</p>")
    parts.append(_addendum_block(ctx.template.addendum))
    parts.append(
        '<div class="ceo-signature" style="margin-top:18px">'
        f"<p><b>{escape_html(offer.ceo_name or BLANK_FIELD)}</b></p>"
        "<p>Per: ____________ ____________ (SEAL)</p>"
        "</div>"
    )
    parts.append(
        '<h3 style="margin-top:24px;font-size:16px;color:#0f172a">Acceptance</h3>'
        '<p style="color:#1f2937">I accept this offer of co-working terms as outlined above.</p>'
    )
    parts.append(_signature_block("Freelancer Signature", ctx.hiree_signature))
    parts.append(_footer_block(title, document_id, generated_on))
    parts.append(_initials_page(title, document_id, ctx.template.clauses))
    return parts


_BUILDERS = {
    "waiver": _waiver,
    "noncompete": _noncompete,
    "gear": _gear,
    "pay": _pay,
    "offer": _offer,
}


def build_document(
    doc_type: str,
    ctx: AssemblyContext,
    *,
    document_id: str | None = None,
    generated_on: str | None = None,
) -> str:
    """Render the HTML body of ``doc_type`` for the given context.

    A fresh document id and today's date are used unless the caller pins
    them. Compensation and offer documents need an offer; every document
    needs a profile. When either is missing a placeholder fragment is
    returned instead.
    """
    if doc_type not in _BUILDERS:
        raise ValueError(f"Unknown document type: {doc_type}")
    if doc_type in ("pay", "offer") and ctx.offer is None:
        return NO_OFFER_PLACEHOLDER
    if ctx.profile is None:
        return NO_PROFILE_PLACEHOLDER

    c = escape_html(ctx.company.name or DEFAULT_COMPANY_NAME)
    j = escape_html(ctx.company.jurisdiction or DEFAULT_JURISDICTION)
    parts = _BUILDERS[doc_type](
        ctx, c, j, document_id or doc_id(), generated_on or today_iso()
    )
    return "\n".join(part for part in parts if part)


def document_heading(doc_type: str, ctx: AssemblyContext) -> str:
    """Human title shown in listings and preview headers."""
    if doc_type == "offer" and ctx.offer is not None:
        return f"Offer of Co-Working - {ctx.offer.position or DEFAULT_POSITION}"
    return DOCUMENT_TITLES[doc_type]
