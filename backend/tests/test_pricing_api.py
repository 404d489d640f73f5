class TestFlatServices:
    def _setup(self, client):
        client.post("/api/v1/auth/register", json={
            "email": "owner@example.com",
            "password": "correct-horse-42",
            "confirm_password": "correct-horse-42",
        })
        token = client.post(
            "/api/v1/auth/login", json={"email": "owner@example.com", "password": "correct-horse-42"}
        ).json()["token"]
        client.put(
            "/api/v1/company",
            json={"name": "Solution Gate Media", "jurisdiction": "Ontario, Canada"},
            headers=self._auth(token),
        )
        return token

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_crud(self, client):
        h = self._auth(self._setup(client))
        r = client.post("/api/v1/flat-services", json={"name": "Drone Add-on", "rate": "150"}, headers=h)
        assert r.status_code == 201
        service_id = r.json()["id"]

        r = client.put(f"/api/v1/flat-services/{service_id}", json={"rate": "175"}, headers=h)
        assert r.json()["rate"] == "175"
        assert r.json()["name"] == "Drone Add-on"

        r = client.get("/api/v1/flat-services", headers=h)
        assert len(r.json()) == 1

        r = client.delete(f"/api/v1/flat-services/{service_id}", headers=h)
        assert r.status_code == 200
        assert client.get("/api/v1/flat-services", headers=h).json() == []

    def test_csv_export(self, client):
        h = self._auth(self._setup(client))
        client.post("/api/v1/flat-services", json={"name": "Twilight", "rate": "90"}, headers=h)
        r = client.get("/api/v1/flat-services/export.csv", headers=h)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert r.text.splitlines() == ["service,rate", "Twilight,90"]

    def test_csv_import(self, client):
        h = self._auth(self._setup(client))
        content = "\ufeffService,Rate\nDrone Add-on,150\n,99\nTwilight,\n".encode("utf-8")
        r = client.post(
            "/api/v1/flat-services/import",
            files={"file": ("services.csv", content, "text/csv")},
            headers=h,
        )
        assert r.status_code == 200
        assert r.json()["imported"] == 2
        services = {s["name"]: s["rate"] for s in client.get("/api/v1/flat-services", headers=h).json()}
        assert services == {"Drone Add-on": "150", "Twilight": "0"}

    def test_csv_import_requires_headers(self, client):
        h = self._auth(self._setup(client))
        r = client.post(
            "/api/v1/flat-services/import",
            files={"file": ("services.csv", b"name,price\nA,1\n", "text/csv")},
            headers=h,
        )
        assert r.status_code == 400
        assert r.json()["detail"] == "CSV must have headers: service, rate"


class TestOverrides:
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

    def _flat(self, pricing, name):
        return next(s for s in pricing["flat_services"] if s["name"] == name)

    def test_flat_override_resolution(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        service_id = client.post(
            "/api/v1/flat-services", json={"name": "Drone Add-on", "rate": "150"}, headers=h
        ).json()["id"]

        pricing = client.get(f"/api/v1/profiles/{profile_id}/pricing", headers=h).json()
        assert self._flat(pricing, "Drone Add-on")["effective_rate"] == 150.0

        r = client.put(
            f"/api/v1/profiles/{profile_id}/overrides/flat/{service_id}",
            json={"custom_rate": 175, "is_enabled": True},
            headers=h,
        )
        assert r.status_code == 200
        entry = self._flat(client.get(f"/api/v1/profiles/{profile_id}/pricing", headers=h).json(), "Drone Add-on")
        assert entry["effective_rate"] == 175.0
        assert entry["base_rate"] == 150.0
        assert entry["override_enabled"] is True

        client.put(
            f"/api/v1/profiles/{profile_id}/overrides/flat/{service_id}",
            json={"custom_rate": 175, "is_enabled": False},
            headers=h,
        )
        entry = self._flat(client.get(f"/api/v1/profiles/{profile_id}/pricing", headers=h).json(), "Drone Add-on")
        assert entry["effective_rate"] == 150.0

        r = client.delete(f"/api/v1/profiles/{profile_id}/overrides/flat/{service_id}", headers=h)
        assert r.status_code == 200
        entry = self._flat(client.get(f"/api/v1/profiles/{profile_id}/pricing", headers=h).json(), "Drone Add-on")
        assert entry["custom_rate"] is None

    def test_tiered_override(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        tier = client.post("/api/v1/tiers", json={"max_sqft": 1500}, headers=h).json()
        client.put(f"/api/v1/tiers/{tier['id']}/rates/photo", json={"rate": "120"}, headers=h)
        rate_id = tier["rates"]["photo"]["id"]

        r = client.put(
            f"/api/v1/profiles/{profile_id}/overrides/tiered/{rate_id}",
            json={"custom_rate": 140},
            headers=h,
        )
        assert r.status_code == 200
        pricing = client.get(f"/api/v1/profiles/{profile_id}/pricing", headers=h).json()
        photo = next(r for r in pricing["tiered_rates"] if r["service_type"] == "photo")
        assert photo["effective_rate"] == 140.0
        assert photo["base_rate"] == 120.0
        assert photo["label"] == "Up to 1,500 SQ.FT"
        assert len(pricing["tiered_rates"]) == 4

    def test_negative_override_rejected(self, client):
        token, profile_id = self._setup(client)
        h = self._auth(token)
        service_id = client.post(
            "/api/v1/flat-services", json={"name": "Drone", "rate": "150"}, headers=h
        ).json()["id"]
        r = client.put(
            f"/api/v1/profiles/{profile_id}/overrides/flat/{service_id}",
            json={"custom_rate": -5},
            headers=h,
        )
        assert r.status_code == 400

    def test_override_unknown_service(self, client):
        token, profile_id = self._setup(client)
        r = client.put(
            f"/api/v1/profiles/{profile_id}/overrides/flat/missing",
            json={"custom_rate": 10},
            headers=self._auth(token),
        )
        assert r.status_code == 404
