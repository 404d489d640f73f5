SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class TestSignatureLinks:
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

    def _create_link(self, client, token, profile_id, doc_type="waiver"):
        return client.post(
            f"/api/v1/profiles/{profile_id}/documents/{doc_type}/signature-link",
            headers=self._auth(token),
        )

    def test_create_link(self, client):
        token, profile_id = self._setup(client)
        r = self._create_link(client, token, profile_id)
        assert r.status_code == 201
        link = r.json()
        assert len(link["signature_token"]) == 32
        assert link["signature_token"].isalnum()
        assert link["url"].endswith(f"/sign/{link['signature_token']}")
        assert link["is_signed"] is False
        assert link["document_title"] == "Training Waiver & Liability Release"

    def test_offer_link_requires_offer(self, client):
        token, profile_id = self._setup(client)
        r = self._create_link(client, token, profile_id, "offer")
        assert r.status_code == 400

    def test_snapshot_is_frozen(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        link = self._create_link(client, token, profile_id).json()
        client.put(f"/api/v1/profiles/{profile_id}", json={"name": "Janet Smith"}, headers=h)

        r = client.get(f"/api/v1/public/sign/{link['signature_token']}")
        assert r.status_code == 200
        view = r.json()
        assert "Jane Doe" in view["document_html"]
        assert "Janet Smith" not in view["document_html"]
        assert view["document_id"] == link["document_id"]
        assert f"Document ID: {link['document_id']}" in view["document_html"]
        assert view["hiree_name"] == "Janet Smith"
        assert view["company_name"] == "Solution Gate Media"

    def test_public_sign_once(self, client):
        token, profile_id = self._setup(client)
        link = self._create_link(client, token, profile_id).json()
        url = f"/api/v1/public/sign/{link['signature_token']}"

        r = client.post(url, json={"signer": "hiree", "signature_data": SIGNATURE, "initial_data": SIGNATURE})
        assert r.status_code == 200
        assert r.json()["is_signed"] is True
        assert r.json()["signed_by"] == "hiree"

        r = client.post(url, json={"signer": "hiree", "signature_data": SIGNATURE})
        assert r.status_code == 409

        detail = client.get(f"/api/v1/signature-links/{link['id']}", headers=self._auth(token)).json()
        assert detail["hiree_signature_data"] == SIGNATURE
        assert detail["hiree_initial_data"] == SIGNATURE
        assert detail["tenant_signature_data"] is None

    def test_public_sign_validation(self, client):
        token, profile_id = self._setup(client)
        link = self._create_link(client, token, profile_id).json()
        url = f"/api/v1/public/sign/{link['signature_token']}"

        r = client.post(url, json={"signer": "witness", "signature_data": SIGNATURE})
        assert r.status_code == 400
        r = client.post(url, json={"signer": "hiree", "signature_data": "not-an-image"})
        assert r.status_code == 400
        assert client.get(url).json()["is_signed"] is False

    def test_unknown_token(self, client):
        self._setup(client)
        assert client.get("/api/v1/public/sign/doesnotexist").status_code == 404
        r = client.post("/api/v1/public/sign/doesnotexist", json={"signature_data": SIGNATURE})
        assert r.status_code == 404
        assert client.get("/sign/doesnotexist").status_code == 404

    def test_signing_page(self, client):
        token, profile_id = self._setup(client)
        link = self._create_link(client, token, profile_id).json()
        r = client.get(f"/sign/{link['signature_token']}")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert 'id="signature-pad"' in r.text
        assert f"/api/v1/public/sign/{link['signature_token']}" in r.text
        assert "Jane Doe" in r.text

    def test_reset(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        link = self._create_link(client, token, profile_id).json()
        url = f"/api/v1/public/sign/{link['signature_token']}"
        client.post(url, json={"signer": "tenant", "signature_data": SIGNATURE})

        r = client.post(f"/api/v1/signature-links/{link['id']}/reset", json={"reason": "Wrong hiree signed"}, headers=h)
        assert r.status_code == 200
        assert r.json()["is_signed"] is False
        assert r.json()["signed_by"] is None

        r = client.post(url, json={"signer": "hiree", "signature_data": SIGNATURE})
        assert r.status_code == 200

    def test_reset_is_logged(self, client, test_db):
        from onboarding.models.signature import SignatureResetLog

        token, profile_id = self._setup(client)
        link = self._create_link(client, token, profile_id).json()
        client.post(
            f"/api/v1/signature-links/{link['id']}/reset",
            json={"reason": "Testing"},
            headers=self._auth(token),
        )
        db = test_db()
        try:
            logs = db.query(SignatureResetLog).all()
            assert len(logs) == 1
            assert logs[0].reset_by == "owner@example.com"
            assert logs[0].reset_reason == "Testing"
        finally:
            db.close()

    def test_list_and_delete(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        first = self._create_link(client, token, profile_id).json()
        self._create_link(client, token, profile_id, "noncompete")

        r = client.get("/api/v1/signature-links", headers=h)
        assert len(r.json()) == 2
        r = client.get(f"/api/v1/signature-links?profile_id={profile_id}", headers=h)
        assert len(r.json()) == 2

        r = client.delete(f"/api/v1/signature-links/{first['id']}", headers=h)
        assert r.status_code == 200
        assert client.get(f"/api/v1/signature-links/{first['id']}", headers=h).status_code == 404

    def test_signed_pdf(self, client):
        token, profile_id = self._setup(client)
        link = self._create_link(client, token, profile_id).json()
        client.post(
            f"/api/v1/public/sign/{link['signature_token']}",
            json={"signer": "hiree", "signature_data": SIGNATURE},
        )
        r = client.get(f"/api/v1/signature-links/{link['id']}/pdf", headers=self._auth(token))
        assert r.status_code == 200
        assert r.content.startswith(b"%PDF")
        assert "Training_Waiver_Liability_Release_Signed.pdf" in r.headers["content-disposition"]
