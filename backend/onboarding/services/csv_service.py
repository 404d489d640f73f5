import csv
import io

from onboarding.models.pricing import SERVICE_TYPES

FLAT_HEADERS = ["service", "rate"]
TIER_HEADERS = ["min_sqft", "max_sqft", *SERVICE_TYPES]


def _reader(content: str) -> csv.DictReader:
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    if reader.fieldnames:
        reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    return reader


def export_flat_services_csv(services) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(FLAT_HEADERS)
    for service in services:
        writer.writerow([service.name, service.rate])
    return output.getvalue()


def parse_flat_services_csv(content: str) -> list[tuple[str, str]]:
    reader = _reader(content)
    if not reader.fieldnames or not set(FLAT_HEADERS) <= set(reader.fieldnames):
        raise ValueError("CSV must have headers: service, rate")
    rows = []
    for row in reader:
        name = (row.get("service") or "").strip()
        if not name:
            continue
        rows.append((name, (row.get("rate") or "0").strip() or "0"))
    return rows


def export_tiers_csv(tiers) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(TIER_HEADERS)
    for tier in tiers:
        rates = {r.service_type: r.rate for r in tier.rates}
        writer.writerow([tier.min_sqft, tier.max_sqft, *(rates.get(t, "0") for t in SERVICE_TYPES)])
    return output.getvalue()


def parse_tiers_csv(content: str) -> list[dict]:
    reader = _reader(content)
    if not reader.fieldnames or not {"min_sqft", "max_sqft"} <= set(reader.fieldnames):
        raise ValueError("CSV must have headers: min_sqft, max_sqft")
    rows = []
    for line_no, row in enumerate(reader, start=2):
        low = (row.get("min_sqft") or "").strip()
        high = (row.get("max_sqft") or "").strip()
        if not low and not high:
            continue
        try:
            bounds = (int(low), int(high))
        except ValueError:
            raise ValueError(f"Line {line_no}: min_sqft and max_sqft must be whole numbers") from None
        rates = {
            t: (row.get(t) or "").strip()
            for t in SERVICE_TYPES
            if (row.get(t) or "").strip()
        }
        rows.append({"min_sqft": bounds[0], "max_sqft": bounds[1], "rates": rates})
    return rows
