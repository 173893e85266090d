from conftest import make_payload


def test_login_with_active_code(client, seeded):
    response = client.post("/auth", json={"code": "ABC123"})

    assert response.status_code == 200
    assert response.json() == {"branchId": 1, "userName": "Dana Field"}


def test_login_requires_code(client, seeded):
    for body in ({}, {"code": ""}):
        response = client.post("/auth", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Access code is required.", "code": "MISSING_ACCESS_CODE"}


def test_login_with_wrongly_typed_code_is_a_bad_payload(client, seeded):
    for body in ({"code": 123}, {"code": ["ABC123"]}, ["ABC123"]):
        response = client.post("/auth", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Access code must be a string", "code": "INVALID_PAYLOAD"}


def test_login_with_invalid_json(client, seeded):
    response = client.post("/auth", content=b"{code:", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PAYLOAD"


def test_login_with_inactive_or_unknown_code(client, seeded):
    for code in ("OLD999", "NOPE"):
        response = client.post("/auth", json={"code": code})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or inactive access code", "code": "INVALID_ACCESS_CODE"}


def test_dry_run_validates_without_writing(client, seeded, count_records):
    payload = make_payload()

    response = client.post("/records/test", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["validatedData"] == {
        "branchId": 1,
        "recordCount": 1,
        "userName": "Dana Field",
        "sampleRecord": payload["records"][0],
    }
    assert count_records() == 0


def test_dry_run_reports_the_same_errors(client, seeded):
    bad_counts = make_payload([{"typeId": 5, "weekEnding": "2025-07-06", "fullCount": -1, "emptyCount": 0}])

    assert client.post("/records/test", json=bad_counts).json()["code"] == "NEGATIVE_COUNT"
    assert client.post("/records/test", json=make_payload(access_code="OLD999")).status_code == 401


def test_service_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "API is running"
