def test_validate_reports_every_error(client):
    response = client.post(
        "/api/constraints/validate",
        json={
            "hardConstraints": [{"type": "bogus", "condition": "x"}],
            "softConstraints": [{"type": "time_preferences", "weight": -0.1}],
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "isValid": False,
        "errors": [
            "hard[0]: unknown constraint type 'bogus'",
            "soft[0]: weight must be between 0 and 1, got -0.1",
        ],
    }


def test_validate_accepts_well_formed_declarations(client):
    response = client.post(
        "/api/constraints/validate",
        json={
            "hardConstraints": [{"type": "classroom_availability", "condition": "r1 closed on Fridays"}],
            "softConstraints": [{"type": "consecutive_classes", "weight": 0.3, "parameters": {"max_consecutive": 2}}],
        },
    )

    assert response.json() == {"isValid": True, "errors": []}


def test_invalid_set_is_not_stored(client):
    response = client.post(
        "/api/constraints/sets",
        json={"name": "Broken", "hardConstraints": [{"type": "room_capacity"}]},
    )

    assert response.status_code == 400
    assert response.json()["details"]["errors"] == ["hard[0]: condition is required for hard constraints"]
    assert client.get("/api/constraints/sets").json() == []


def test_create_list_and_read_sets(client):
    created = client.post(
        "/api/constraints/sets",
        json={
            "name": "Balanced load",
            "description": "Keep faculty within two sessions of the mean",
            "department": "dept-cse",
            "softConstraints": [{"type": "workload_distribution", "weight": 0.6}],
        },
    )
    assert created.status_code == 201
    body = created.json()
    assert body["department"] == "dept-cse"
    assert body["softConstraints"][0]["type"] == "workload_distribution"
    assert body["softConstraints"][0]["weight"] == 0.6

    client.post("/api/constraints/sets", json={"name": "Another", "department": "dept-ee"})

    listed = client.get("/api/constraints/sets", params={"department": "dept-cse"}).json()
    assert [item["name"] for item in listed] == ["Balanced load"]

    fetched = client.get(f"/api/constraints/sets/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Balanced load"

    assert client.get("/api/constraints/sets/missing").status_code == 404


def test_duplicate_set_name_conflicts(client):
    payload = {"name": "Once", "department": "dept-cse"}
    assert client.post("/api/constraints/sets", json=payload).status_code == 201

    duplicate = client.post("/api/constraints/sets", json=payload)

    assert duplicate.status_code == 409


def test_set_with_malformed_parameters_is_not_stored(client):
    response = client.post(
        "/api/constraints/sets",
        json={
            "name": "Malformed",
            "softConstraints": [{"type": "consecutive_classes", "weight": 0.4, "parameters": {"max_consecutive": None}}],
        },
    )

    assert response.status_code == 400
    assert response.json()["details"]["errors"] == [
        "soft[0]: parameters.max_consecutive must be a non-negative integer, got None"
    ]
    assert client.get("/api/constraints/sets").json() == []


def test_nan_weight_is_rejected(client):
    response = client.post(
        "/api/constraints/validate",
        content='{"softConstraints": [{"type": "max_daily_hours", "weight": NaN}]}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json() == {"isValid": False, "errors": ["soft[0]: weight must be a finite number"]}
