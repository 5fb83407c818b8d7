def test_detect_endpoint_returns_report_with_names(client, seeded_department):
    response = client.post(
        "/api/conflicts/detect",
        json={
            "assignments": [
                {"day": "Tue", "slotIndex": 2, "subjectId": "s1", "facultyId": "f1", "classroomId": "r1"},
                {"day": "Tue", "slotIndex": 2, "subjectId": "s2", "facultyId": "f2", "classroomId": "r1"},
            ]
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {"facultyConflicts": 0, "classroomConflicts": 1, "total": 1}
    conflict = body["classroomConflicts"][0]
    assert conflict["conflictType"] == "classroom_double_booking"
    assert conflict["slotKey"] == "Tue-S2"
    assert "LH-101" in conflict["description"]
    assert [item["actionType"] for item in body["suggestedResolutions"]] == ["change_room"]
    assert body["suggestedResolutions"][0]["target"]["subjectId"] == "s2"


def test_detect_without_resolutions(client):
    response = client.post(
        "/api/conflicts/detect",
        json={
            "includeResolutions": False,
            "assignments": [
                {"day": "Mon", "slotIndex": 0, "subjectId": "a", "facultyId": "x", "classroomId": "r1"},
                {"day": "Mon", "slotIndex": 0, "subjectId": "b", "facultyId": "x", "classroomId": "r2"},
            ],
        },
    )

    body = response.json()
    assert body["summary"]["facultyConflicts"] == 1
    assert body["suggestedResolutions"] == []


def test_empty_schedule_has_no_conflicts(client):
    response = client.post("/api/conflicts/detect", json={"assignments": []})

    assert response.json()["summary"]["total"] == 0
