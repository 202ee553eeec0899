from datetime import time

from app.models.timetable_entry import DayOfWeek, TimetableEntry


def entry_payload(academic, section=1, professor=1, room=1, day="Monday", start="09:00", end="10:00"):
    return {
        "subject_id": academic.subject_ids[0],
        "section_id": academic.section_ids[section - 1],
        "professor_id": academic.professor_ids[professor - 1],
        "room_id": academic.room_ids[room - 1],
        "day_of_week": day,
        "start_time": start,
        "end_time": end,
    }


def test_timetable_writes_require_a_writer_role(client, academic, auth_headers):
    payload = entry_payload(academic)

    anonymous = client.post("/api/timetable/", json=payload)
    assert anonymous.status_code in {401, 403}

    for role in ("student", "professor"):
        response = client.post("/api/timetable/", json=payload, headers=auth_headers(role))
        assert response.status_code == 403

    head_response = client.post("/api/timetable/", json=payload, headers=auth_headers("department_head"))
    assert head_response.status_code == 201

    admin_headers = auth_headers("admin")
    entry_id = head_response.json()["id"]
    moved = client.put(
        f"/api/timetable/{entry_id}",
        json=entry_payload(academic, start="11:00", end="12:00"),
        headers=admin_headers,
    )
    assert moved.status_code == 200
    assert moved.json()["start_time"] == "11:00"


def test_create_and_read_back_entry(client, academic, auth_headers):
    headers = auth_headers("admin")
    response = client.post("/api/timetable/", json=entry_payload(academic), headers=headers)
    assert response.status_code == 201
    created = response.json()
    assert created["day_of_week"] == "Monday"
    assert created["start_time"] == "09:00"
    assert created["end_time"] == "10:00"

    student_headers = auth_headers("student")
    fetched = client.get(f"/api/timetable/{created['id']}", headers=student_headers)
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_double_booking_is_rejected_with_axis_and_entry(client, academic, auth_headers):
    headers = auth_headers("admin")
    first = client.post("/api/timetable/", json=entry_payload(academic), headers=headers).json()

    response = client.post(
        "/api/timetable/",
        json=entry_payload(academic, section=2, professor=2, room=1, start="09:30", end="10:30"),
        headers=headers,
    )
    assert response.status_code == 409
    body = response.json()
    assert body["details"]["axis"] == "room"
    assert body["details"]["entry_id"] == first["id"]
    assert body["details"]["conflicts"] == [{"axis": "room", "entry_id": first["id"]}]
    assert str(first["id"]) in body["message"]


def test_back_to_back_and_other_day_placements_are_accepted(client, academic, auth_headers):
    headers = auth_headers("admin")
    assert client.post("/api/timetable/", json=entry_payload(academic), headers=headers).status_code == 201
    assert (
        client.post(
            "/api/timetable/", json=entry_payload(academic, start="10:00", end="11:00"), headers=headers
        ).status_code
        == 201
    )
    assert (
        client.post("/api/timetable/", json=entry_payload(academic, day="Tuesday"), headers=headers).status_code
        == 201
    )


def test_malformed_entries_are_rejected(client, academic, auth_headers):
    headers = auth_headers("admin")

    inverted = client.post(
        "/api/timetable/", json=entry_payload(academic, start="10:00", end="09:00"), headers=headers
    )
    assert inverted.status_code == 422

    unknown_day = client.post("/api/timetable/", json=entry_payload(academic, day="Funday"), headers=headers)
    assert unknown_day.status_code == 422

    with_seconds = client.post(
        "/api/timetable/", json=entry_payload(academic, start="09:00:30"), headers=headers
    )
    assert with_seconds.status_code == 422

    payload = entry_payload(academic)
    payload["room_id"] = 9999
    unknown_room = client.post("/api/timetable/", json=payload, headers=headers)
    assert unknown_room.status_code == 422
    assert unknown_room.json()["details"]["missing"] == [{"entity": "room", "id": 9999}]


def test_listings_are_sorted_by_weekday_then_start_time(client, academic, auth_headers):
    headers = auth_headers("admin")
    for day, start, end in [
        ("Thursday", "08:00", "09:00"),
        ("Monday", "13:00", "14:00"),
        ("Tuesday", "09:00", "10:00"),
        ("Monday", "08:00", "09:00"),
    ]:
        response = client.post(
            "/api/timetable/", json=entry_payload(academic, day=day, start=start, end=end), headers=headers
        )
        assert response.status_code == 201

    for resource, resource_id in [
        ("section", academic.section_ids[0]),
        ("professor", academic.professor_ids[0]),
        ("room", academic.room_ids[0]),
    ]:
        listed = client.get(f"/api/timetable/{resource}/{resource_id}", headers=headers).json()
        assert [(item["day_of_week"], item["start_time"]) for item in listed] == [
            ("Monday", "08:00"),
            ("Monday", "13:00"),
            ("Tuesday", "09:00"),
            ("Thursday", "08:00"),
        ]

    empty = client.get(f"/api/timetable/room/{academic.room_ids[2]}", headers=headers)
    assert empty.status_code == 200
    assert empty.json() == []


def test_update_and_delete_entry(client, academic, auth_headers):
    headers = auth_headers("admin")
    entry = client.post("/api/timetable/", json=entry_payload(academic), headers=headers).json()

    unchanged = client.put(f"/api/timetable/{entry['id']}", json=entry_payload(academic), headers=headers)
    assert unchanged.status_code == 200

    deleted = client.delete(f"/api/timetable/{entry['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    missing = client.get(f"/api/timetable/{entry['id']}", headers=headers)
    assert missing.status_code == 404
    assert "not found" in missing.json()["message"]

    assert client.delete(f"/api/timetable/{entry['id']}", headers=headers).status_code == 404
    assert client.put(f"/api/timetable/{entry['id']}", json=entry_payload(academic), headers=headers).status_code == 404


def test_check_reports_conflicts_without_writing(client, academic, auth_headers):
    headers = auth_headers("admin")
    entry = client.post("/api/timetable/", json=entry_payload(academic), headers=headers).json()

    clash = client.post(
        "/api/timetable/check",
        json=entry_payload(academic, room=2, start="09:30", end="10:30"),
        headers=headers,
    )
    assert clash.status_code == 200
    assert clash.json() == {
        "has_conflict": True,
        "conflicts": [
            {"axis": "section", "entry_id": entry["id"]},
            {"axis": "professor", "entry_id": entry["id"]},
        ],
    }

    own_slot = client.post(
        "/api/timetable/check",
        json={**entry_payload(academic), "exclude_id": entry["id"]},
        headers=headers,
    )
    assert own_slot.json() == {"has_conflict": False, "conflicts": []}

    listed = client.get(f"/api/timetable/section/{academic.section_ids[0]}", headers=headers).json()
    assert len(listed) == 1


def test_conflict_audit_is_empty_for_service_written_timetable(client, academic, auth_headers):
    headers = auth_headers("admin")
    client.post("/api/timetable/", json=entry_payload(academic), headers=headers)
    client.post("/api/timetable/", json=entry_payload(academic, start="10:00", end="11:00"), headers=headers)

    response = client.get("/api/timetable/conflicts", headers=headers)
    assert response.status_code == 200
    assert response.json() == []

    student = client.get("/api/timetable/conflicts", headers=auth_headers("student"))
    assert student.status_code == 403


def test_weekly_views_carry_resource_names(client, academic, auth_headers):
    headers = auth_headers("admin")
    created = client.post("/api/timetable/", json=entry_payload(academic), headers=headers).json()
    assert created["subject_name"] == "Algorithms"
    assert created["room_name"] == "R101"

    for path in (
        f"/api/timetable/section/{academic.section_ids[0]}",
        f"/api/timetable/professor/{academic.professor_ids[0]}",
        f"/api/timetable/room/{academic.room_ids[0]}",
    ):
        [item] = client.get(path, headers=headers).json()
        assert item["subject_name"] == "Algorithms"
        assert item["section_name"] == "A"
        assert item["professor_first_name"] == "Ada"
        assert item["professor_last_name"] == "Lovelace"
        assert item["room_name"] == "R101"


def test_listing_shows_rows_written_outside_the_api(client, academic, auth_headers, session_factory):
    db = session_factory()
    try:
        db.add(
            TimetableEntry(
                subject_id=academic.subject_ids[0],
                section_id=academic.section_ids[0],
                professor_id=academic.professor_ids[0],
                room_id=academic.room_ids[0],
                day_of_week=DayOfWeek.Monday,
                start_time=time(10, 0, 30),
                end_time=time(9, 0),
            )
        )
        db.commit()
    finally:
        db.close()

    response = client.get(f"/api/timetable/section/{academic.section_ids[0]}", headers=auth_headers("admin"))
    assert response.status_code == 200
    [item] = response.json()
    assert item["start_time"] == "10:00:30"
    assert item["end_time"] == "09:00"


def test_missing_records_share_one_error_shape(client, auth_headers):
    headers = auth_headers("admin")
    entry = client.get("/api/timetable/999", headers=headers)
    room = client.get("/api/rooms/999", headers=headers)
    assert entry.status_code == room.status_code == 404
    assert set(room.json()) == set(entry.json()) == {"message", "details"}
    assert room.json()["message"] == "Room with id 999 not found"
