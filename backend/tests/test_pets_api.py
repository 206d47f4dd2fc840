"""Integration tests for the pet API."""

from __future__ import annotations

import uuid
from io import BytesIO
from typing import Any

import pytest
from httpx import AsyncClient
from PIL import Image

from petmanager.integrations import S3Client

pytestmark = pytest.mark.asyncio

MAX_FORM = {"name": "Max", "category": "Dog", "birthday": "2020-03-15", "gender": "male"}


def _create_sample_png() -> bytes:
    image = Image.new("RGB", (320, 240), color=(30, 120, 200))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


async def _authenticate(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def test_signed_out_requests_point_at_login(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    pet_id = uuid.uuid4()

    response = await client.get(f"/api/v1/pets/{pet_id}")

    assert response.status_code == 401
    payload = response.json()
    assert payload["kind"] == "login_required"
    assert payload["navigate_to"] == f"/login?redirect=/pets/{pet_id}"
    assert response.headers["Location"] == f"/login?redirect=/pets/{pet_id}"

    listing = await client.get("/api/v1/pets")
    assert listing.status_code == 401
    assert listing.json()["navigate_to"] == "/login?redirect=/pets"

    create = await client.post("/api/v1/pets", data=MAX_FORM)
    assert create.status_code == 401
    assert create.json()["navigate_to"] == "/login?redirect=/pets/new"


async def test_pet_lifecycle_over_http(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    storage: S3Client = app_context["storage"]
    headers = await _authenticate(
        client, app_context["owner_email"], app_context["owner_password"]
    )

    created = await client.post(
        "/api/v1/pets",
        data=MAX_FORM,
        files={"image": ("max photo.png", _create_sample_png(), "image/png")},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.headers["X-Invalidate-Paths"] == "/pets"
    body = created.json()
    assert body["success"] is True
    assert body["navigate_to"] == "/pets"
    pet = body["pet"]
    pet_id = pet["id"]
    assert pet["image_path"].startswith(f"{app_context['owner_id']}/pets/")
    assert pet["image_path"].endswith("-max_photo.png")
    assert pet["image_url"] == f"/{storage.bucket}/{pet['image_path']}"
    assert storage.object_exists(pet["image_path"])

    listing = await client.get("/api/v1/pets", headers=headers)
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [pet_id]

    detail = await client.get(f"/api/v1/pets/{pet_id}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["name"] == "Max"
    assert detail.json()["age_years"] >= 4

    renamed = await client.patch(
        f"/api/v1/pets/{pet_id}", data={"name": "Maximus"}, headers=headers
    )
    assert renamed.status_code == 200
    assert renamed.json()["navigate_to"] == f"/pets/{pet_id}"
    assert renamed.headers["X-Invalidate-Paths"] == f"/pets, /pets/{pet_id}"
    assert renamed.json()["pet"]["category"] == "Dog"
    assert renamed.json()["pet"]["image_path"] == pet["image_path"]

    cleared = await client.patch(
        f"/api/v1/pets/{pet_id}", data={"remove_image": "true"}, headers=headers
    )
    assert cleared.status_code == 200
    assert cleared.json()["pet"]["image_path"] is None
    assert not storage.object_exists(pet["image_path"])

    deleted = await client.delete(f"/api/v1/pets/{pet_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["navigate_to"] == "/pets"

    missing = await client.get(f"/api/v1/pets/{pet_id}", headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Pet not found"}


async def test_invalid_form_returns_field_errors(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _authenticate(
        client, app_context["owner_email"], app_context["owner_password"]
    )

    response = await client.post(
        "/api/v1/pets",
        data={**MAX_FORM, "name": "", "gender": "unknown"},
        files={"image": ("notes.txt", b"plain text", "text/plain")},
        headers=headers,
    )

    assert response.status_code == 422
    field_errors = response.json()["field_errors"]
    assert field_errors["name"] == ["Pet name is required"]
    assert field_errors["gender"] == ["Gender must be either male or female"]
    assert field_errors["image"] == ["Image must be JPEG or PNG format"]
    assert "X-Invalidate-Paths" not in response.headers

    listing = await client.get("/api/v1/pets", headers=headers)
    assert listing.json() == []


async def test_other_owner_cannot_touch_a_pet(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    owner_headers = await _authenticate(
        client, app_context["owner_email"], app_context["owner_password"]
    )
    other_headers = await _authenticate(
        client, app_context["other_email"], app_context["other_password"]
    )
    created = await client.post("/api/v1/pets", data=MAX_FORM, headers=owner_headers)
    pet_id = created.json()["pet"]["id"]

    detail = await client.get(f"/api/v1/pets/{pet_id}", headers=other_headers)
    assert detail.status_code == 404

    patch = await client.patch(
        f"/api/v1/pets/{pet_id}", data={"name": "Stolen"}, headers=other_headers
    )
    assert patch.status_code == 404
    assert patch.json()["error"] == (
        "Pet not found or you do not have permission to edit it."
    )

    delete = await client.delete(f"/api/v1/pets/{pet_id}", headers=other_headers)
    assert delete.status_code == 404
    assert delete.json()["error"] == (
        "Pet not found or you do not have permission to delete it."
    )

    still_there = await client.get(f"/api/v1/pets/{pet_id}", headers=owner_headers)
    assert still_there.json()["name"] == "Max"
