import pytest

from onboarding.services import estimation_service


class TestGear:
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
        client.put("/api/v1/company", json={"name": "Acme", "jurisdiction": "Ontario"}, headers=h)
        profile_id = client.post("/api/v1/profiles", json={"name": "Jane Doe"}, headers=h).json()["id"]
        return token, profile_id

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_catalog_and_custom_gear(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        r = client.post("/api/v1/gear", json={"name": "Full-frame camera"}, headers=h)
        assert r.status_code == 201
        assert r.json()["is_custom"] is False

        r = client.post(
            f"/api/v1/profiles/{profile_id}/gear",
            json={"name": "Gimbal", "is_required": False},
            headers=h,
        )
        assert r.status_code == 201
        assert r.json()["is_custom"] is True

        assert [g["name"] for g in client.get("/api/v1/gear", headers=h).json()] == ["Full-frame camera"]
        custom = client.get(f"/api/v1/profiles/{profile_id}/gear", headers=h).json()
        assert [g["name"] for g in custom] == ["Gimbal"]

    def test_resolved_gear(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        camera = client.post("/api/v1/gear", json={"name": "Camera", "is_required": False}, headers=h).json()
        drone = client.post("/api/v1/gear", json={"name": "Drone"}, headers=h).json()
        client.post(f"/api/v1/profiles/{profile_id}/gear", json={"name": "Gimbal", "is_required": False}, headers=h)

        r = client.put(
            f"/api/v1/profiles/{profile_id}/overrides/gear/{drone['id']}",
            json={"is_required": False, "notes": "Rental approved"},
            headers=h,
        )
        assert r.status_code == 200

        resolved = {g["name"]: g for g in client.get(f"/api/v1/profiles/{profile_id}/gear/resolved", headers=h).json()}
        assert resolved["Camera"]["required"] is True
        assert resolved["Camera"]["has_override"] is False
        assert resolved["Drone"]["required"] is False
        assert resolved["Drone"]["notes"] == "Rental approved"
        assert resolved["Gimbal"]["required"] is False

        client.delete(f"/api/v1/profiles/{profile_id}/overrides/gear/{drone['id']}", headers=h)
        resolved = {g["name"]: g for g in client.get(f"/api/v1/profiles/{profile_id}/gear/resolved", headers=h).json()}
        assert resolved["Drone"]["required"] is True
        assert camera["id"] in {g["id"] for g in resolved.values()}

    def test_manual_price_sources(self, client):
        token, _ = self._setup(client)
        h = self._auth(token)
        item = client.post("/api/v1/gear", json={"name": "Tripod", "estimated_price_cad": 120}, headers=h).json()
        assert item["price_source"] == "manual"

        r = client.put(f"/api/v1/gear/{item['id']}", json={"notes": "Carbon"}, headers=h)
        assert r.json()["price_source"] == "manual"

    def test_estimate_updates_prices(self, client, monkeypatch):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        camera = client.post("/api/v1/gear", json={"name": "Camera"}, headers=h).json()
        client.post("/api/v1/gear", json={"name": "Drone"}, headers=h)
        client.post(f"/api/v1/profiles/{profile_id}/gear", json={"name": "Gimbal"}, headers=h)

        def fake_complete(system_prompt, user_prompt):
            return (
                '```json\n{"items": ['
                '{"name": "camera", "estimatedPriceCAD": 2499.99, "confidence": "high", "reasoning": "Typical body"},'
                '{"name": "Drone", "estimatedPriceCAD": -5, "confidence": "unsure", "reasoning": ""},'
                '{"name": "Gimbal", "estimatedPriceCAD": 450, "confidence": "low", "reasoning": "Mid range"}'
                "]}\n```",
                1000,
            )

        monkeypatch.setattr(estimation_service, "_complete", fake_complete)
        r = client.post(f"/api/v1/profiles/{profile_id}/gear/estimate", json={"scope": "all_gear"}, headers=h)
        assert r.status_code == 200
        data = r.json()
        assert data["updated"] == 3
        assert data["tokens_used"] == 1000
        assert data["cost_usd"] == pytest.approx(0.000375)
        by_name = {i["name"]: i for i in data["items"]}
        assert by_name["Drone"]["estimated_price_cad"] == 0.0
        assert by_name["Drone"]["confidence"] == "medium"

        catalog = {g["name"]: g for g in client.get("/api/v1/gear", headers=h).json()}
        assert catalog["Camera"]["estimated_price_cad"] == 2499.99
        assert catalog["Camera"]["price_source"] == "openai-estimated"
        assert catalog["Camera"]["last_estimated_at"] is not None

        # A hand edit after estimation is protected from the next run
        r = client.put(f"/api/v1/gear/{camera['id']}", json={"estimated_price_cad": 1999}, headers=h)
        assert r.json()["price_source"] == "user-overridden"

        r = client.post(f"/api/v1/profiles/{profile_id}/gear/estimate", json={"scope": "company_gear"}, headers=h)
        assert r.json()["updated"] == 1
        camera_after = next(g for g in client.get("/api/v1/gear", headers=h).json() if g["name"] == "Camera")
        assert camera_after["estimated_price_cad"] == 1999

    def test_estimate_without_api_key(self, client, monkeypatch):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        client.post("/api/v1/gear", json={"name": "Camera"}, headers=h)
        monkeypatch.setattr(estimation_service.settings, "openai_api_key", None)
        r = client.post(f"/api/v1/profiles/{profile_id}/gear/estimate", json={}, headers=h)
        assert r.status_code == 503

    def test_estimate_bad_scope(self, client):
        token, profile_id = self._setup(client)
        r = client.post(
            f"/api/v1/profiles/{profile_id}/gear/estimate",
            json={"scope": "everything"},
            headers=self._auth(token),
        )
        assert r.status_code == 400


class TestEstimationParsing:
    def test_parse_plain_json(self):
        items = estimation_service.parse_estimates(
            'Sure! {"items": [{"name": "Lens", "estimatedPriceCAD": "899", "confidence": "HIGH"}]} Thanks'
        )
        assert items == [{
            "name": "Lens",
            "estimated_price_cad": 899.0,
            "confidence": "high",
            "reasoning": "",
        }]

    def test_unparseable_reply(self):
        with pytest.raises(estimation_service.EstimationError) as exc_info:
            estimation_service.parse_estimates("no prices today")
        assert exc_info.value.status_code == 502

    def test_cost(self):
        assert estimation_service.estimate_cost_usd(2000) == pytest.approx(0.00075)

    def test_no_items_skips_api(self, monkeypatch):
        def fail(*args):
            raise AssertionError("should not be called")

        monkeypatch.setattr(estimation_service, "_complete", fail)
        result = estimation_service.estimate_gear_prices([])
        assert result["items"] == []
        assert result["tokens_used"] == 0
