# tests/test_appointments.py

from datetime import datetime, timedelta

import pytest

from barberbook import core
from tests.conftest import next_weekday, register

TUESDAY = 1
SUNDAY = 6


@pytest.fixture
def day():
    return next_weekday(TUESDAY)


@pytest.fixture
def after(monkeypatch):
    """Move the clock to a given moment."""
    def _set(moment: datetime):
        monkeypatch.setattr(core, "now_local", lambda: moment)
    return _set


def test_book_appointment(book, day, barber_id):
    resp = book(day, "10:00")
    assert resp.status_code == 201
    body = resp.json()
    assert body["barber_id"] == barber_id
    assert body["barber_name"] == "João Navalha"
    assert body["client_name"] == "Maria Cliente"
    assert body["client_coordinates"] == {"lat": -23.5505, "lng": -46.6333}
    assert body["client_full_address"] == "Praça da Sé, 1, Sé, São Paulo - SP"
    assert body["service_name"] == "Corte"
    assert body["service_price"] == 40.0
    assert body["duration_minutes"] == 30
    assert body["type"] == "inShop"
    assert body["time"] == "10:00:00"
    assert body["status"] == "scheduled"
    assert body["reviewed"] is False
    assert body["pending"] is False


def test_book_at_home_adds_fee(book, day):
    resp = book(day, "10:00", type="atHome")
    assert resp.status_code == 201
    assert resp.json()["service_price"] == 60.0


def test_book_at_home_needs_fee(book, day):
    resp = book(day, "10:00", "barba", type="atHome")
    assert resp.status_code == 422


def test_book_explicit_client_name(book, day):
    resp = book(day, "10:00", client_name="  Zé  ")
    assert resp.json()["client_name"] == "Zé"


@pytest.mark.parametrize("at, detail", [
    ("08:30", "Appointment must be within working hours"),
    ("17:45", "Appointment must be within working hours"),
])
def test_book_outside_hours(book, day, at, detail):
    resp = book(day, at)
    assert resp.status_code == 422
    assert resp.json()["detail"] == detail


def test_book_off_day(book):
    resp = book(next_weekday(SUNDAY), "10:00")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Barber is not scheduled to work that day"


def test_book_in_the_past(book, day, after):
    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=12))
    resp = book(day, "10:00")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Cannot book an appointment in the past"


def test_book_unknown_service(book, day):
    assert book(day, "10:00", "nope").status_code == 422


def test_book_unknown_barber(client, client_headers, day):
    resp = client.post(
        "/barbers/9999/appointments",
        json={"service_id": "corte", "date": day.isoformat(), "time": "10:00"},
        headers=client_headers,
    )
    assert resp.status_code == 404


def test_barber_cannot_book(book, day, barber_headers):
    assert book(day, "10:00", headers=barber_headers).status_code == 403


def test_overlap_rejected_until_cancelled(client, book, day, client_headers):
    first = book(day, "10:00", "combo")
    assert first.status_code == 201

    clash = book(day, "10:30")
    assert clash.status_code == 409

    # back-to-back is fine
    assert book(day, "11:00").status_code == 201

    client.patch(f"/appointments/{first.json()['id']}/cancel", headers=client_headers)
    assert book(day, "10:30").status_code == 201


def test_same_start_rejected_by_database(client, book, day, client_headers, monkeypatch):
    # two requests that both passed the overlap check before either committed
    monkeypatch.setattr(core, "find_conflict", lambda start, end, appts: None)

    first = book(day, "10:00")
    assert first.status_code == 201

    second = book(day, "10:00")
    assert second.status_code == 409
    assert second.json()["detail"] == "Appointment already exists for that start time"

    client.patch(f"/appointments/{first.json()['id']}/cancel", headers=client_headers)
    assert book(day, "10:00").status_code == 201


def test_client_cancels_own_appointment(client, book, day, client_headers):
    appt_id = book(day, "10:00").json()["id"]

    resp = client.patch(f"/appointments/{appt_id}/cancel", headers=client_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"

    again = client.patch(f"/appointments/{appt_id}/cancel", headers=client_headers)
    assert again.status_code == 409
    assert again.json()["error"] == "INVALID_TRANSITION"


def test_other_client_cannot_cancel(client, book, day):
    appt_id = book(day, "10:00").json()["id"]
    stranger = register(client, "stranger@example.com", "client")
    assert client.patch(f"/appointments/{appt_id}/cancel", headers=stranger).status_code == 403


def test_cancel_unknown_appointment(client, client_headers):
    assert client.patch("/appointments/9999/cancel", headers=client_headers).status_code == 404


def test_complete_requires_start_to_have_passed(client, book, day, barber_headers, after):
    appt_id = book(day, "10:00").json()["id"]

    early = client.patch(f"/appointments/{appt_id}/complete", headers=barber_headers)
    assert early.status_code == 409

    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=11))
    resp = client.patch(f"/appointments/{appt_id}/complete", headers=barber_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"

    # terminal
    assert client.patch(f"/appointments/{appt_id}/no-show", headers=barber_headers).status_code == 409


def test_client_cannot_complete(client, book, day, client_headers, after):
    appt_id = book(day, "10:00").json()["id"]
    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=11))
    assert client.patch(f"/appointments/{appt_id}/complete", headers=client_headers).status_code == 403
    assert client.patch(f"/appointments/{appt_id}/no-show", headers=client_headers).status_code == 403


def test_other_barber_cannot_change_status(client, book, day, after):
    appt_id = book(day, "10:00").json()["id"]
    other = register(client, "other-barber@example.com", "barber")
    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=11))
    assert client.patch(f"/appointments/{appt_id}/no-show", headers=other).status_code == 403
    assert client.patch(f"/appointments/{appt_id}/cancel", headers=other).status_code == 403


def test_barber_upcoming_and_history(client, book, day, barber_headers, after):
    a = book(day, "09:00").json()["id"]
    b = book(day, "11:00").json()["id"]
    c = book(day, "15:00").json()["id"]
    d = book(day, "16:00").json()["id"]

    # midday: a and b have started
    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=12))
    client.patch(f"/appointments/{a}/complete", headers=barber_headers)
    client.patch(f"/appointments/{d}/cancel", headers=barber_headers)

    upcoming = client.get("/barbers/me/appointments/upcoming", headers=barber_headers).json()
    assert [x["id"] for x in upcoming] == [c]

    history = client.get("/barbers/me/appointments/history", headers=barber_headers).json()
    assert [x["id"] for x in history] == [d, b, a]
    pending = {x["id"]: x["pending"] for x in history}
    assert pending == {d: False, b: True, a: False}

    only_scheduled = client.get(
        "/barbers/me/appointments/history", params={"status": "scheduled"}, headers=barber_headers
    ).json()
    assert [x["id"] for x in only_scheduled] == [b]

    completed = client.get(
        "/barbers/me/appointments/history", params={"status": "completed"}, headers=barber_headers
    ).json()
    assert [x["id"] for x in completed] == [a]

    bad = client.get("/barbers/me/appointments/history", params={"status": "booked"}, headers=barber_headers)
    assert bad.status_code == 422


def test_client_appointments_and_history(client, book, day, client_headers, barber_headers, after):
    later_day = day + timedelta(days=1)
    first = book(day, "10:00").json()["id"]
    second = book(later_day, "10:00").json()["id"]

    mine = client.get("/clients/me/appointments", headers=client_headers).json()
    assert [x["id"] for x in mine] == [second, first]
    assert all(x["barber_name"] == "João Navalha" for x in mine)

    after(datetime.combine(day, datetime.min.time()) + timedelta(hours=11))
    client.patch(f"/appointments/{first}/no-show", headers=barber_headers)

    history = client.get("/clients/me/appointments/history", headers=client_headers).json()
    assert [x["id"] for x in history] == [first]
    assert history[0]["status"] == "no-show"

    no_shows = client.get(
        "/clients/me/appointments/history", params={"status": "no-show"}, headers=client_headers
    ).json()
    assert len(no_shows) == 1

    resp = client.get("/clients/me/appointments/history", params={"status": "scheduled"}, headers=client_headers)
    assert resp.status_code == 422
