import re

SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class TestDocuments:
    def _setup(self, client):
        client.post("/api/v1/auth/register", json={
            "email": "owner@example.com",
            "password": "correct-horse-42",
            "confirm_password": "correct-horse-42",
        })
        token = client.post(
            "/api/v1/auth/login", json={"email": "owner@example.com", "password": "correct-horse-42"}
        ).json()["token"]
        h = self._auth(token)
        client.put("/api/v1/company", json={"name": "Solution Gate Media", "jurisdiction": "Ontario, Canada"}, headers=h)
        profile_id = client.post("/api/v1/profiles", json={"name": "Jane Doe"}, headers=h).json()["id"]
        return token, profile_id

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_list_readiness(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        docs = {d["type"]: d for d in client.get(f"/api/v1/profiles/{profile_id}/documents", headers=h).json()}
        assert docs["waiver"]["ready"] is True
        assert docs["pay"]["ready"] is False
        assert docs["offer"]["filename"] == "Acceptance_Letter.pdf"

        client.put(f"/api/v1/profiles/{profile_id}/offer", json={"position": "Editor"}, headers=h)
        docs = {d["type"]: d for d in client.get(f"/api/v1/profiles/{profile_id}/documents", headers=h).json()}
        assert docs["pay"]["ready"] is True

    def test_preview(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        client.put(
            f"/api/v1/profiles/{profile_id}/templates/waiver",
            json={"clauses": ["One", "Two"], "addendum": "Note"},
            headers=h,
        )
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/waiver", headers=h)
        assert r.status_code == 200
        data = r.json()
        assert data["title"] == "Training Waiver & Liability Release"
        assert re.match(r"^SGM-[0-9A-Z]+-[0-9A-Z]{5}$", data["document_id"])
        assert data["html"].count('class="initials-row"') == 2
        assert "Jane Doe" in data["html"]

    def test_preview_without_offer(self, client):
        token, profile_id = self._setup(client)
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/pay", headers=self._auth(token))
        assert r.status_code == 200
        assert r.json()["document_id"] is None
        assert 'class="document-placeholder"' in r.json()["html"]

    def test_preview_uses_stored_signatures(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        r = client.post("/api/v1/signatures", json={
            "signature_type": "hiree",
            "profile_id": profile_id,
            "signature_data": SIGNATURE,
        }, headers=h)
        assert r.status_code == 201
        html = client.get(f"/api/v1/profiles/{profile_id}/documents/waiver", headers=h).json()["html"]
        assert SIGNATURE in html
        assert html.count("Signature required") == 1

    def test_unknown_type(self, client):
        token, profile_id = self._setup(client)
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/lease", headers=self._auth(token))
        assert r.status_code == 404

    def test_print_page(self, client):
        token, profile_id = self._setup(client)
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/noncompete/print", headers=self._auth(token))
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert "Print / Save as PDF" in r.text
        assert "@page" in r.text
        assert "Non-Compete Agreement" in r.text

    def test_pdf_download(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        client.put(f"/api/v1/profiles/{profile_id}/templates/gear", json={"clauses": ["Keep gear insured"]}, headers=h)
        client.post("/api/v1/gear", json={"name": "Camera", "estimated_price_cad": 2500}, headers=h)
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/gear/pdf", headers=h)
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert 'filename="Equipment_Gear_Supply_Obligations.pdf"' in r.headers["content-disposition"]
        assert r.content.startswith(b"%PDF")

    def test_pdf_for_every_document(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        service_id = client.post("/api/v1/flat-services", json={"name": "Drone", "rate": "150"}, headers=h).json()["id"]
        client.post("/api/v1/tiers", json={"max_sqft": 1500}, headers=h)
        client.put(f"/api/v1/profiles/{profile_id}/offer", json={
            "position": "Photographer",
            "start_date": "2025-01-15",
            "probation_months": 3,
            "base_salary": 52000,
            "benefits": "Camera allowance",
            "selected_flat_service_ids": [service_id],
            "selected_tiered_service_types": ["photo", "video"],
        }, headers=h)
        for doc_type in ("waiver", "noncompete", "gear", "pay", "offer"):
            r = client.get(f"/api/v1/profiles/{profile_id}/documents/{doc_type}/pdf", headers=h)
            assert r.status_code == 200, doc_type
            assert r.content.startswith(b"%PDF")

    def test_pdf_requires_offer(self, client):
        token, profile_id = self._setup(client)
        r = client.get(f"/api/v1/profiles/{profile_id}/documents/offer/pdf", headers=self._auth(token))
        assert r.status_code == 400


class TestSignatures:
    def _setup(self, client):
        client.post("/api/v1/auth/register", json={
            "email": "owner@example.com",
            "password": "correct-horse-42",
            "confirm_password": "correct-horse-42",
        })
        token = client.post(
            "/api/v1/auth/login", json={"email": "owner@example.com", "password": "correct-horse-42"}
        ).json()["token"]
        client.put("/api/v1/company", json={"name": "Acme", "jurisdiction": "Ontario"}, headers=self._auth(token))
        return token

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_create_list_delete(self, client):
        h = self._auth(self._setup(client))
        r = client.post("/api/v1/signatures", json={
            "signature_type": "company",
            "signature_data": SIGNATURE,
            "name": "Alex Morgan",
        }, headers=h)
        assert r.status_code == 201
        signature_id = r.json()["id"]
        assert len(client.get("/api/v1/signatures", headers=h).json()) == 1

        r = client.delete(f"/api/v1/signatures/{signature_id}", headers=h)
        assert r.status_code == 200
        assert client.get("/api/v1/signatures", headers=h).json() == []

    def test_validation(self, client):
        h = self._auth(self._setup(client))
        r = client.post("/api/v1/signatures", json={
            "signature_type": "witness",
            "signature_data": SIGNATURE,
        }, headers=h)
        assert r.status_code == 400

        r = client.post("/api/v1/signatures", json={
            "signature_type": "company",
            "signature_data": "https://example.com/sig.png",
        }, headers=h)
        assert r.status_code == 400

        r = client.post("/api/v1/signatures", json={
            "signature_type": "hiree",
            "signature_data": SIGNATURE,
        }, headers=h)
        assert r.status_code == 400
