from datetime import timedelta
from decimal import Decimal

from havenhouse.models import Notification, Payment
from havenhouse.utils.dates import utcnow

URL = "/api/v1/payments"


def today():
    return utcnow().date()


def test_create_payment(staff_client, make_resident):
    resident = make_resident()
    response = staff_client.post(URL, json={
        "resident_id": resident.id,
        "amount": "525.50",
        "type": "rent",
        "due_date": (today() + timedelta(days=5)).isoformat(),
    })
    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["amount"]) == Decimal("525.50")
    assert body["status"] == "pending"
    assert body["effective_status"] == "pending"
    assert body["paid_date"] is None


def test_create_paid_payment_stamps_paid_date(staff_client, make_resident):
    resident = make_resident()
    response = staff_client.post(URL, json={
        "resident_id": resident.id,
        "amount": "100.00",
        "type": "fee",
        "status": "paid",
        "due_date": today().isoformat(),
    })
    assert response.json()["paid_date"] == today().isoformat()


def test_create_payment_validation(staff_client, make_resident):
    resident = make_resident()
    unknown = staff_client.post(URL, json={"resident_id": "missing", "amount": "10", "due_date": today().isoformat()})
    assert unknown.status_code == 400
    assert unknown.json()["detail"] == "Resident not found"

    negative = staff_client.post(URL, json={"resident_id": resident.id, "amount": "-5", "due_date": today().isoformat()})
    assert negative.status_code == 400


def test_overdue_tab_uses_effective_status(staff_client, make_resident, make_payment):
    resident = make_resident(first_name="Harper")
    late = make_payment(resident, due_date=today() - timedelta(days=2))
    make_payment(resident, due_date=today() + timedelta(days=2))
    make_payment(resident, status="paid", due_date=today() - timedelta(days=10), paid_date=today() - timedelta(days=1))

    overdue = staff_client.get(URL, params={"tab": "overdue"}).json()
    assert [p["id"] for p in overdue] == [late.id]
    assert overdue[0]["status"] == "pending"
    assert overdue[0]["effective_status"] == "overdue"
    assert overdue[0]["resident"]["first_name"] == "Harper"


def test_pending_tab_and_search(staff_client, make_resident, make_payment):
    harper = make_resident(first_name="Harper")
    ellis = make_resident(first_name="Ellis")
    make_payment(harper)
    make_payment(ellis, status="paid", paid_date=today())

    pending = staff_client.get(URL, params={"tab": "pending"}).json()
    assert [p["resident_id"] for p in pending] == [harper.id]

    found = staff_client.get(URL, params={"search": "ellis"}).json()
    assert [p["resident_id"] for p in found] == [ellis.id]


def test_mark_paid(staff_client, make_resident, make_payment, db_session):
    payment = make_payment(make_resident(), due_date=today() - timedelta(days=3))
    response = staff_client.patch(f"{URL}/{payment.id}", json={"status": "paid", "payment_method": "cash"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "paid"
    assert body["effective_status"] == "paid"
    assert body["paid_date"] == today().isoformat()
    assert body["payment_method"] == "cash"

    db_session.expire_all()
    assert db_session.get(Payment, payment.id).status == "paid"


def test_update_unknown_payment(staff_client):
    assert staff_client.patch(f"{URL}/missing", json={"status": "paid"}).status_code == 404
    assert staff_client.get(f"{URL}/missing").status_code == 404


def test_summary(staff_client, make_resident, make_payment):
    resident = make_resident()
    make_payment(resident, amount=Decimal("500.00"), status="paid", paid_date=today())
    make_payment(resident, amount=Decimal("200.00"), due_date=today() - timedelta(days=1))
    make_payment(resident, amount=Decimal("50.00"), due_date=today() + timedelta(days=1))

    summary = staff_client.get(f"{URL}/summary").json()
    assert Decimal(summary["total_revenue"]) == Decimal("500.00")
    assert Decimal(summary["pending_amount"]) == Decimal("250.00")
    assert Decimal(summary["overdue_amount"]) == Decimal("200.00")
    assert Decimal(summary["paid_this_month"]) == Decimal("500.00")


def test_overdue_sweep_notifies_once(staff_client, make_resident, make_payment, db_session):
    resident = make_resident(first_name="Blake", last_name="Fox")
    late = make_payment(resident, due_date=today() - timedelta(days=4))
    make_payment(resident, due_date=today() + timedelta(days=4))

    first = staff_client.post(f"{URL}/overdue-sweep").json()
    assert first == {"overdue_payments": 1, "notifications_created": 1}
    second = staff_client.post(f"{URL}/overdue-sweep").json()
    assert second == {"overdue_payments": 1, "notifications_created": 0}

    notification = db_session.query(Notification).one()
    assert notification.type == "payment_overdue"
    assert notification.related_id == late.id
    assert "Blake Fox" in notification.message
