# tests/test_giving_entry.py
# POST /giving, POST /giving/bulk-import, POST /attendance

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from app.models.attendance import AttendanceRecord, Service
from app.models.giving import GivingRecord


def _records(db):
    db.expire_all()
    return db.execute(select(GivingRecord).order_by(GivingRecord.date_given)).scalars().all()


def _import(client, headers, text):
    return client.post(
        "/giving/bulk-import",
        content=text.encode("utf-8"),
        headers={**headers, "Content-Type": "text/csv"},
    )


# --- POST /giving ------------------------------------------------------------

def test_create_giving_record(client, db, headers, seed):
    current = seed.category("Current", 1)
    h = seed.household("Smith Household")
    m = seed.member(h, "John", "Smith", head=True)

    r = client.post("/giving", headers=headers, json={
        "memberId": m.id,
        "dateGiven": "2024-03-03",
        "notes": "check 1042",
        "items": [{"categoryId": current.id, "amount": "25.00"}],
    })
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["memberId"] == m.id
    assert body["dateGiven"] == "2024-03-03"
    assert body["items"][0]["categoryId"] == current.id

    rows = _records(db)
    assert len(rows) == 1
    assert rows[0].items[0].amount == Decimal("25.00")


def test_create_giving_rejects_negative_or_all_zero(client, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)

    for items in ([{"categoryId": current.id, "amount": -1}], [{"categoryId": current.id, "amount": 0}], []):
        r = client.post("/giving", headers=headers, json={"memberId": m.id, "dateGiven": "2024-01-01", "items": items})
        assert r.status_code == 422, items


def test_create_giving_unknown_member_or_category(client, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)

    r = client.post("/giving", headers=headers, json={
        "memberId": "nobody", "dateGiven": "2024-01-01", "items": [{"categoryId": current.id, "amount": 5}],
    })
    assert r.status_code == 422
    assert r.json()["detail"] == "memberId does not exist"

    r = client.post("/giving", headers=headers, json={
        "memberId": m.id, "dateGiven": "2024-01-01", "items": [{"categoryId": "nope", "amount": 5}],
    })
    assert r.status_code == 422


def test_list_giving_by_date_range(client, headers, giving_2024):
    rows = client.get("/giving", params={"from": "2024-01-01", "to": "2024-12-31"}, headers=headers).json()
    assert len(rows) == 3
    assert rows[0]["dateGiven"] == "2024-06-02"


# --- CSV import --------------------------------------------------------------

def test_bulk_import_by_envelope_and_category_columns(client, db, headers, seed):
    current = seed.category("Current", 1)
    mission = seed.category("Mission", 2)
    h = seed.household("Smith Household")
    spouse = seed.member(h, "Jane", "Smith", envelope=101)
    head = seed.member(h, "John", "Smith", head=True, envelope=101)

    csv_text = (
        "Envelope Number,Date Given,Current,Mission,Notes\n"
        "101,2024-01-07,25.00,5.00,first sunday\n"
        "101,01/14/2024,30,,\n"
    )
    r = _import(client, headers, csv_text)
    assert r.status_code == 200, r.text
    assert r.json() == {"success": 2, "failed": 0, "errors": []}

    rows = _records(db)
    assert [rec.member_id for rec in rows] == [head.id, head.id]
    assert spouse.id not in {rec.member_id for rec in rows}
    first = {i.category_id: i.amount for i in rows[0].items}
    assert first == {current.id: Decimal("25.00"), mission.id: Decimal("5.00")}
    assert rows[0].notes == "first sunday"
    assert rows[1].date_given == date(2024, 1, 14)


def test_bulk_import_legacy_amount_column_maps_to_current(client, db, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)

    r = _import(client, headers, f"member id,date,amount\n{m.id},2024-02-04,40.00\n")
    assert r.json()["success"] == 1
    assert _records(db)[0].items[0].category_id == current.id


def test_bulk_import_collects_row_errors(client, db, headers, seed):
    seed.category("Current", 1)
    seed.member(seed.household("H"), "A", "B", head=True, envelope=7)

    csv_text = (
        "envelope number,date given,current\n"
        "7,2024-01-07,10\n"
        "8,2024-01-07,10\n"
        "7,not-a-date,10\n"
        "7,,10\n"
        "7,2024-01-14,-3\n"
        "7,2024-01-21,0\n"
    )
    body = _import(client, headers, csv_text).json()
    assert body["success"] == 1
    assert body["failed"] == 5
    assert body["errors"] == [
        "Row 3: Member not found (8)",
        "Row 4: Invalid date format (use YYYY-MM-DD)",
        "Row 5: Missing required field (dateGiven)",
        "Row 6: Invalid amount for current (must be non-negative)",
        "Row 7: At least one amount is required",
    ]
    assert len(_records(db)) == 1


def test_bulk_import_rejects_bad_header(client, headers, seed):
    seed.category("Current", 1)
    r = _import(client, headers, "envelope number,date given,bogus\n7,2024-01-07,10\n")
    assert r.status_code == 400
    assert "Available categories: Current" in r.json()["detail"]

    r = _import(client, headers, "envelope number,current\n7,10\n")
    assert r.status_code == 400

    r = _import(client, headers, "envelope number,date,current\n")
    assert r.status_code == 400


def test_bulk_import_ignores_inactive_categories(client, headers, seed):
    seed.category("Current", 1)
    seed.category("Building", 3, is_active=False)
    seed.member(seed.household("H"), "A", "B", head=True, envelope=7)

    body = _import(client, headers, "envelope number,date,current,building\n7,2024-01-07,10,99\n").json()
    assert body["success"] == 1


# --- attendance --------------------------------------------------------------

def test_attendance_upsert(client, db, headers, seed, church):
    m = seed.member(seed.household("H"), "A", "B", head=True)
    svc = Service(church_id=church.id, service_date=date(2024, 3, 3))
    db.add(svc)
    db.commit()

    payload = {"memberId": m.id, "serviceId": svc.id, "attended": True, "tookCommunion": False}
    r = client.post("/attendance", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["attended"] is True

    r = client.post("/attendance", json={**payload, "tookCommunion": True}, headers=headers)
    assert r.json()["tookCommunion"] is True

    db.expire_all()
    rows = db.execute(select(AttendanceRecord)).scalars().all()
    assert len(rows) == 1
    assert rows[0].took_communion is True


def test_communion_requires_attendance(client, headers, seed, church, db):
    m = seed.member(seed.household("H"), "A", "B", head=True)
    svc = Service(church_id=church.id, service_date=date(2024, 3, 3))
    db.add(svc)
    db.commit()

    r = client.post(
        "/attendance",
        json={"memberId": m.id, "serviceId": svc.id, "attended": False, "tookCommunion": True},
        headers=headers,
    )
    assert r.status_code == 422


def test_attendance_unknown_service(client, headers, seed):
    m = seed.member(seed.household("H"), "A", "B", head=True)
    r = client.post("/attendance", json={"memberId": m.id, "serviceId": "nope", "attended": True}, headers=headers)
    assert r.status_code == 404


# --- edit / delete giving ----------------------------------------------------

def test_update_giving_replaces_items_and_clears_notes(client, db, headers, seed):
    current = seed.category("Current", 1)
    mission = seed.category("Mission", 2)
    m = seed.member(seed.household("H"), "A", "B", head=True)
    rec = seed.give(m, date(2024, 3, 3), (current, "10.00"), notes="typo")

    r = client.put(f"/giving/{rec.id}", headers=headers, json={
        "dateGiven": "2024-03-10",
        "notes": None,
        "items": [{"categoryId": mission.id, "amount": "12.00"}, {"categoryId": current.id, "amount": 0}],
    })
    assert r.status_code == 200, r.text
    assert r.json()["dateGiven"] == "2024-03-10"

    row = _records(db)[0]
    assert row.notes is None
    assert [(i.category_id, i.amount) for i in row.items] == [(mission.id, Decimal("12.00"))]


def test_update_giving_keeps_unsent_fields(client, db, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)
    rec = seed.give(m, date(2024, 3, 3), (current, "10.00"), notes="check 99")

    r = client.put(f"/giving/{rec.id}", headers=headers, json={"dateGiven": "2024-04-01"})
    assert r.status_code == 200, r.text

    row = _records(db)[0]
    assert row.notes == "check 99"
    assert row.items[0].amount == Decimal("10.00")


def test_update_giving_rejects_bad_items(client, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)
    rec = seed.give(m, date(2024, 3, 3), (current, "10.00"))

    assert client.put(f"/giving/{rec.id}", headers=headers, json={"items": []}).status_code == 422
    r = client.put(f"/giving/{rec.id}", headers=headers, json={"items": [{"categoryId": "nope", "amount": 5}]})
    assert r.status_code == 422
    assert client.put("/giving/missing", headers=headers, json={"notes": "x"}).status_code == 404


def test_delete_giving(client, db, headers, seed):
    current = seed.category("Current", 1)
    m = seed.member(seed.household("H"), "A", "B", head=True)
    rec = seed.give(m, date(2024, 3, 3), (current, "10.00"))

    assert client.get(f"/giving/{rec.id}", headers=headers).status_code == 200
    assert client.delete(f"/giving/{rec.id}", headers=headers).status_code == 204
    assert _records(db) == []
    assert client.get(f"/giving/{rec.id}", headers=headers).status_code == 404
    assert client.delete(f"/giving/{rec.id}", headers=headers).status_code == 404


# --- categories --------------------------------------------------------------

def test_list_categories_in_display_order(client, headers, seed):
    seed.category("Mission", 2)
    seed.category("Current", 1)
    seed.category("Building", 2)

    rows = client.get("/giving-categories", headers=headers).json()
    assert [c["name"] for c in rows] == ["Current", "Building", "Mission"]
    assert rows[0]["displayOrder"] == 1
    assert rows[0]["isActive"] is True


def test_create_category_appends_and_rejects_duplicates(client, headers, seed):
    seed.category("Current", 1)
    seed.category("Mission", 2)

    r = client.post("/giving-categories", headers=headers, json={"name": "  Building Fund "})
    assert r.status_code == 201, r.text
    assert r.json()["name"] == "Building Fund"
    assert r.json()["displayOrder"] == 3

    r = client.post("/giving-categories", headers=headers, json={"name": "mission"})
    assert r.status_code == 409

    assert client.post("/giving-categories", headers=headers, json={"name": "   "}).status_code == 422


def test_deactivated_category_drops_out_of_csv_import(client, headers, seed):
    seed.category("Current", 1)
    building = seed.category("Building", 2)
    seed.member(seed.household("H"), "A", "B", head=True, envelope=7)

    r = client.put(f"/giving-categories/{building.id}", headers=headers, json={"isActive": False, "displayOrder": 9})
    assert r.status_code == 200, r.text
    assert r.json() == {"id": building.id, "name": "Building", "displayOrder": 9, "isActive": False}

    r = _import(client, headers, "envelope number,date,current,building\n7,2024-01-07,10,5\n")
    assert r.status_code == 200
    assert r.json()["success"] == 1


def test_rename_category_conflict_and_missing(client, headers, seed):
    seed.category("Current", 1)
    mission = seed.category("Mission", 2)

    assert client.put(f"/giving-categories/{mission.id}", headers=headers, json={"name": "Current"}).status_code == 409
    assert client.put("/giving-categories/nope", headers=headers, json={"name": "X"}).status_code == 404


def test_delete_category_only_when_unused(client, headers, seed):
    current = seed.category("Current", 1)
    spare = seed.category("Spare", 2)
    m = seed.member(seed.household("H"), "A", "B", head=True)
    seed.give(m, date(2024, 3, 3), (current, "10.00"))

    r = client.delete(f"/giving-categories/{current.id}", headers=headers)
    assert r.status_code == 409
    assert "Deactivate it instead" in r.json()["detail"]

    assert client.delete(f"/giving-categories/{spare.id}", headers=headers).status_code == 204
    assert [c["name"] for c in client.get("/giving-categories", headers=headers).json()] == ["Current"]


def test_only_admins_manage_categories(client, seed, church):
    seed.category("Current", 1)
    seed.user("viewer@trinity.example", "viewer-key", role="viewer")
    hdrs = {"X-API-Key": "viewer-key", "X-Church-Id": church.id}

    assert client.get("/giving-categories", headers=hdrs).status_code == 200
    assert client.post("/giving-categories", headers=hdrs, json={"name": "New"}).status_code == 403


# --- households --------------------------------------------------------------

def test_household_with_members_cannot_be_deleted(client, db, headers, seed):
    h = seed.household("Smith Household")
    seed.member(h, "John", "Smith", head=True)

    r = client.delete(f"/households/{h.id}", headers=headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Cannot delete household with members. Remove all members first."
    assert [row["id"] for row in client.get("/households", headers=headers).json()] == [h.id]


def test_empty_household_is_deleted(client, headers, seed):
    h = seed.household("Empty Household")
    assert client.delete(f"/households/{h.id}", headers=headers).status_code == 204
    assert client.get("/households", headers=headers).json() == []
    assert client.delete(f"/households/{h.id}", headers=headers).status_code == 404


def test_household_from_other_church_cannot_be_deleted(client, db, headers):
    from app.models.church import Church
    from app.models.household import Household

    other = Church(name="Other Church")
    db.add(other)
    db.commit()
    foreign = Household(church_id=other.id, name="Foreign Household")
    db.add(foreign)
    db.commit()

    assert client.delete(f"/households/{foreign.id}", headers=headers).status_code == 404
