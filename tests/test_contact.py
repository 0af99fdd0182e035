from havenhouse.models import Application, Notification
from havenhouse.services.application_service import DUPLICATE_PHONE_MESSAGE, is_valid_phone

CONTACT_URL = "/api/v1/contact"


def form(**overrides):
    data = {
        "firstName": "Jamie",
        "lastName": "Doe",
        "phone": "555-1111",
        "email": "jamie@example.com",
        "sobrietyDate": "2023-05-01",
        "employmentStatus": "Part-time",
        "housingNeeded": "Immediately",
        "message": "Looking for a bed next month.",
    }
    data.update(overrides)
    return data


def test_submit_application(client, db_session):
    response = client.post(CONTACT_URL, json=form(firstName="  Jamie  "))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["applicationId"]

    application = db_session.query(Application).filter(Application.id == body["applicationId"]).one()
    assert application.first_name == "Jamie"
    assert application.status == "pending"
    assert application.sobriety_date.isoformat() == "2023-05-01"


def test_submit_creates_staff_notification(client, db_session):
    response = client.post(CONTACT_URL, json=form())
    notification = db_session.query(Notification).one()
    assert notification.type == "new_application"
    assert notification.related_id == response.json()["applicationId"]
    assert "Jamie Doe" in notification.message


def test_optional_fields_may_be_omitted(client):
    response = client.post(CONTACT_URL, json={"firstName": "Sam", "lastName": "Lee", "phone": "(555) 010-2000"})
    assert response.status_code == 201


def test_blank_optional_fields_are_accepted(client, db_session):
    response = client.post(CONTACT_URL, json={
        "firstName": "Jane",
        "lastName": "Doe",
        "phone": "555-123-4567",
        "email": "",
        "sobrietyDate": "",
        "employmentStatus": "",
        "housingNeeded": "",
        "message": "",
    })
    assert response.status_code == 201

    application = db_session.query(Application).filter(Application.id == response.json()["applicationId"]).one()
    assert application.sobriety_date is None
    assert application.email is None
    assert application.message is None


def test_duplicate_phone_is_rejected(client, db_session):
    assert client.post(CONTACT_URL, json=form()).status_code == 201
    response = client.post(CONTACT_URL, json=form(firstName="Someone", lastName="Else"))
    assert response.status_code == 409
    assert response.json()["detail"] == DUPLICATE_PHONE_MESSAGE
    assert db_session.query(Application).count() == 1


def test_missing_required_fields(client, db_session):
    response = client.post(CONTACT_URL, json=form(lastName=None))
    assert response.status_code == 400
    assert response.json()["detail"] == "First name, last name, and phone are required"

    response = client.post(CONTACT_URL, json=form(firstName="   "))
    assert response.status_code == 400
    assert db_session.query(Application).count() == 0


def test_invalid_email(client):
    response = client.post(CONTACT_URL, json=form(email="not-an-email"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide a valid email address"


def test_invalid_phone(client):
    response = client.post(CONTACT_URL, json=form(phone="call me maybe"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide a valid phone number"


def test_invalid_sobriety_date(client):
    response = client.post(CONTACT_URL, json=form(sobrietyDate="last spring"))
    assert response.status_code == 400
    assert "sobrietyDate" in response.json()["detail"]


def test_malformed_body(client):
    response = client.post(CONTACT_URL, content="{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_get_is_not_allowed(client):
    response = client.get(CONTACT_URL)
    assert response.status_code == 405
    assert response.json() == {"detail": "Method not allowed"}
    assert response.headers["allow"] == "POST"


def test_phone_validation():
    assert is_valid_phone("555-1111")
    assert is_valid_phone("+1 (555) 123-4567")
    assert not is_valid_phone("12345")
    assert not is_valid_phone("555-CALL-NOW")
