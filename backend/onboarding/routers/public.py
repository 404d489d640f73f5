"""Unauthenticated signing flow reached through a shared link."""

import json
from string import Template

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from onboarding.config import settings
from onboarding.database import get_db
from onboarding.models.company import Company, Profile
from onboarding.models.signature import DocumentSignatureLink
from onboarding.schemas.signature import PublicSignatureView, PublicSignRequest
from onboarding.services import signature_service
from onboarding.services.pdf_service import PRINT_STYLESHEET
from onboarding.services.signature_service import AlreadySignedError
from onboarding.utils.formatting import escape_html

router = APIRouter(prefix="/public/sign", tags=["public"])
page_router = APIRouter(tags=["public"])

SIGN_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Sign: $title</title>
<style>
$stylesheet
.sign-shell { max-width: 860px; margin: 0 auto; }
.snapshot { border: 1px solid #e2e8f0; border-radius: 8px; padding: 24px; max-height: 60vh; overflow-y: auto; }
.pad { border: 1px dashed #94a3b8; border-radius: 6px; touch-action: none; background: #fff; }
.pad-row { display: flex; gap: 16px; flex-wrap: wrap; margin: 16px 0; }
.actions button { padding: 10px 18px; margin-right: 8px; border-radius: 6px; border: 1px solid #cbd5e1; cursor: pointer; }
.actions .primary { background: #2563eb; color: #fff; border-color: #2563eb; }
.status { margin-top: 12px; font-weight: 600; }
</style>
</head>
<body>
<div class="sign-shell">
<h1>$title</h1>
<p>Document ID: $document_id</p>
<div class="snapshot">$document_html</div>
<div id="capture" $capture_hidden>
<div class="pad-row">
<div><h4>Signature</h4><canvas id="signature-pad" class="pad" width="400" height="150"></canvas></div>
<div><h4>Initials</h4><canvas id="initials-pad" class="pad" width="200" height="150"></canvas></div>
</div>
<div class="actions">
<button type="button" onclick="clearPads()">Clear</button>
<button type="button" class="primary" onclick="submitSignature()">Sign Document</button>
</div>
</div>
<p class="status" id="status">$status</p>
</div>
<script>
const SIGN_URL = $sign_url;
const pads = {};
function setupPad(id) {
  const canvas = document.getElementById(id);
  const ctx = canvas.getContext("2d");
  ctx.lineWidth = 2;
  ctx.lineCap = "round";
  const state = { drawing: false, dirty: false };
  function point(e) {
    const rect = canvas.getBoundingClientRect();
    return [e.clientX - rect.left, e.clientY - rect.top];
  }
  canvas.addEventListener("pointerdown", function (e) {
    state.drawing = true;
    const p = point(e);
    ctx.beginPath();
    ctx.moveTo(p[0], p[1]);
  });
  canvas.addEventListener("pointermove", function (e) {
    if (!state.drawing) return;
    const p = point(e);
    ctx.lineTo(p[0], p[1]);
    ctx.stroke();
    state.dirty = true;
  });
  ["pointerup", "pointerleave"].forEach(function (name) {
    canvas.addEventListener(name, function () { state.drawing = false; });
  });
  pads[id] = { canvas: canvas, ctx: ctx, state: state };
}
function clearPads() {
  Object.values(pads).forEach(function (pad) {
    pad.ctx.clearRect(0, 0, pad.canvas.width, pad.canvas.height);
    pad.state.dirty = false;
  });
}
async function submitSignature() {
  const status = document.getElementById("status");
  const signature = pads["signature-pad"];
  const initials = pads["initials-pad"];
  if (!signature.state.dirty) {
    status.textContent = "Please draw your signature first.";
    return;
  }
  const body = {
    signer: "hiree",
    signature_data: signature.canvas.toDataURL("image/png"),
    initial_data: initials.state.dirty ? initials.canvas.toDataURL("image/png") : null,
  };
  const resp = await fetch(SIGN_URL, {
    method: "POST",
    headers: { "Content-Type": "application/json" },
    body: JSON.stringify(body),
  });
  const data = await resp.json();
  if (resp.ok) {
    status.textContent = "Thank you. The document has been signed.";
    document.getElementById("capture").hidden = true;
  } else {
    status.textContent = data.detail || "Could not sign the document.";
  }
}
setupPad("signature-pad");
setupPad("initials-pad");
</script>
</body>
</html>
""")


def _get_link(db: Session, token: str) -> DocumentSignatureLink:
    link = signature_service.get_by_token(db, token)
    if not link:
        raise HTTPException(status_code=404, detail="Signature link not found")
    return link


def _public_view(db: Session, link: DocumentSignatureLink) -> PublicSignatureView:
    company = db.query(Company).filter(Company.id == link.company_id).first()
    profile = db.query(Profile).filter(Profile.id == link.profile_id).first()
    return PublicSignatureView(
        document_type=link.document_type,
        document_title=link.document_title,
        document_id=link.document_id,
        document_html=link.document_html,
        company_name=company.name if company else "",
        hiree_name=profile.name if profile else "",
        is_signed=bool(link.is_signed),
        signed_at=link.signed_at,
        signed_by=link.signed_by,
    )


@router.get("/{token}", response_model=PublicSignatureView)
async def get_signing_view(token: str, db: Session = Depends(get_db)):
    return _public_view(db, _get_link(db, token))


@router.post("/{token}", response_model=PublicSignatureView)
async def submit_signature(token: str, req: PublicSignRequest, db: Session = Depends(get_db)):
    link = _get_link(db, token)
    try:
        link = signature_service.sign(db, link, req.signer, req.signature_data, req.initial_data)
    except AlreadySignedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _public_view(db, link)


@page_router.get("/sign/{token}", response_class=HTMLResponse)
async def signing_page(token: str, db: Session = Depends(get_db)):
    link = _get_link(db, token)
    status = f"Signed on {link.signed_at}." if link.is_signed else ""
    return HTMLResponse(SIGN_PAGE.substitute(
        title=escape_html(link.document_title),
        document_id=escape_html(link.document_id),
        document_html=link.document_html,
        stylesheet=PRINT_STYLESHEET,
        capture_hidden="hidden" if link.is_signed else "",
        status=escape_html(status),
        sign_url=json.dumps(f"{settings.api_prefix}/public/sign/{token}"),
    ))
