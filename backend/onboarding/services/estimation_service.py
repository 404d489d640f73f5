import json
import logging
import re
import uuid

from openai import OpenAI, OpenAIError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onboarding.config import settings
from onboarding.models.gear import GearEstimationLog
from onboarding.utils.formatting import now_iso

logger = logging.getLogger(__name__)

# gpt-4o-mini blended price per 1K tokens, USD
COST_PER_1K_TOKENS_USD = 0.000375
CONFIDENCE_LEVELS = ("high", "medium", "low")

SYSTEM_PROMPT = """You are a pricing assistant for professional real estate photography equipment in Canada.
Estimate the current retail price in Canadian dollars for each item you are given.
Return only valid JSON of the form:
{"items": [{"name": "<item name as given>", "estimatedPriceCAD": <number>, "confidence": "high" | "medium" | "low", "reasoning": "<one short sentence>"}]}
No markdown."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class EstimationError(Exception):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def _client() -> OpenAI:
    if not settings.openai_api_key:
        raise EstimationError("Price estimation is not configured (missing OpenAI API key)", status_code=503)
    return OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)


def _complete(system_prompt: str, user_prompt: str) -> tuple[str, int]:
    """Run one chat completion. Returns (reply text, total tokens)."""
    client = _client()
    try:
        resp = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=1200,
            temperature=0.2,
        )
    except OpenAIError as exc:
        logger.error("OpenAI request failed: %s", exc)
        raise EstimationError(f"Price estimation request failed: {exc}") from exc
    tokens = resp.usage.total_tokens if resp.usage else 0
    return resp.choices[0].message.content or "", tokens


def build_prompt(item_names: list[str]) -> str:
    listing = "\n".join(f"- {name}" for name in item_names)
    return f"Estimate the price in CAD for each of these items:\n{listing}"


def parse_estimates(raw: str) -> list[dict]:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[-1].rsplit("```", 1)[0]
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise EstimationError("Could not read prices from the estimation response")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise EstimationError("Could not read prices from the estimation response") from exc

    items = []
    for entry in payload.get("items") or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        try:
            price = float(entry.get("estimatedPriceCAD") or 0)
        except (TypeError, ValueError):
            price = 0.0
        confidence = str(entry.get("confidence") or "").lower()
        items.append({
            "name": str(entry["name"]),
            "estimated_price_cad": max(0.0, price),
            "confidence": confidence if confidence in CONFIDENCE_LEVELS else "medium",
            "reasoning": str(entry.get("reasoning") or ""),
        })
    return items


def estimate_cost_usd(tokens: int) -> float:
    return tokens * COST_PER_1K_TOKENS_USD / 1000


def estimate_gear_prices(item_names: list[str]) -> dict:
    if not item_names:
        return {"items": [], "tokens_used": 0, "cost_usd": 0.0, "total_estimated_cost_cad": 0.0}
    raw, tokens = _complete(SYSTEM_PROMPT, build_prompt(item_names))
    items = parse_estimates(raw)
    cost = estimate_cost_usd(tokens)
    logger.info("Estimated %d gear prices using %d tokens (~$%.6f USD)", len(items), tokens, cost)
    return {
        "items": items,
        "tokens_used": tokens,
        "cost_usd": cost,
        "total_estimated_cost_cad": sum(i["estimated_price_cad"] for i in items),
    }


def log_estimation(
    db: Session,
    company_id: str,
    profile_id: str | None,
    estimation_type: str,
    result: dict,
):
    """Record usage. A failed write is logged, never raised to the caller."""
    try:
        db.add(GearEstimationLog(
            id=str(uuid.uuid4()),
            company_id=company_id,
            profile_id=profile_id,
            estimation_type=estimation_type,
            items_estimated=len(result["items"]),
            total_estimated_cost_cad=result["total_estimated_cost_cad"],
            tokens_used=result["tokens_used"],
            cost_usd=result["cost_usd"],
            model=settings.openai_model,
            created_at=now_iso(),
        ))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Could not write gear estimation log: %s", exc)
