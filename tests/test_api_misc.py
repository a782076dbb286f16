"""
Uploads, the contact form and the health check.
"""
import pytest

from turismo.services.email_service import EmailService


@pytest.fixture
def stored(monkeypatch) -> list:
    """Replaces the S3 upload with an in-memory record"""
    calls = []

    def fake_upload(upload_file):
        calls.append(upload_file.filename)
        return {"url": f"https://cdn.turismo.test/media/{upload_file.filename}", "type": "image"}

    monkeypatch.setattr("turismo.api.v1.endpoints.uploads.upload_media", fake_upload)
    return calls


async def test_upload_images(client, agent_headers, stored):
    files = [
        ("files", ("lake.jpg", b"\xff\xd8\xff", "image/jpeg")),
        ("files", ("boat.png", b"\x89PNG", "image/png")),
    ]

    response = await client.post("/api/v1/uploads", headers=agent_headers, files=files)

    assert response.status_code == 201
    assert [f["url"] for f in response.json()["files"]] == [
        "https://cdn.turismo.test/media/lake.jpg",
        "https://cdn.turismo.test/media/boat.png",
    ]
    assert stored == ["lake.jpg", "boat.png"]


async def test_upload_rejects_whole_batch_on_bad_file(client, agent_headers, stored):
    files = [
        ("files", ("lake.jpg", b"\xff\xd8\xff", "image/jpeg")),
        ("files", ("notes.pdf", b"%PDF", "application/pdf")),
    ]

    response = await client.post("/api/v1/uploads", headers=agent_headers, files=files)

    assert response.status_code == 400
    assert response.json() == {"error": "File format not allowed", "details": {"field": "files"}}
    assert stored == []


async def test_upload_limits_file_count(client, agent_headers, stored):
    files = [("files", (f"{i}.jpg", b"x", "image/jpeg")) for i in range(11)]

    response = await client.post("/api/v1/uploads", headers=agent_headers, files=files)

    assert response.status_code == 400
    assert stored == []


async def test_upload_needs_agent(client, stored):
    files = [("files", ("lake.jpg", b"x", "image/jpeg"))]

    response = await client.post("/api/v1/uploads", files=files)

    assert response.status_code == 401


async def test_contact_without_smtp_is_accepted(client):
    response = await client.post("/api/v1/contact", json={
        "name": "Ana", "email": "ana@mail.pe", "message": "Do you run tours in June?",
    })

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Message sent"}


async def test_contact_mail_failure_is_500(client, monkeypatch):
    async def broken_send(self, **kwargs):
        raise ConnectionError("SMTP down")

    monkeypatch.setattr(EmailService, "send", broken_send)

    response = await client.post("/api/v1/contact", json={
        "name": "Ana", "email": "ana@mail.pe", "message": "Do you run tours in June?",
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Could not send the message", "details": {"service": "mail"}}


async def test_healthz_reports_each_dependency(client):
    response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"db": "ok", "s3": "error"}
