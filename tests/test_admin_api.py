"""
Tests for the admin endpoints (gateway settings and lesson tree).
"""

import pytest

from sqlalchemy import select

from storefront.config import settings
from storefront.models.course import Lesson
from storefront.models.site_setting import SiteSetting

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def admin_headers(monkeypatch):
    monkeypatch.setattr(settings, "admin_api_key", ADMIN_KEY)
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.mark.asyncio
async def test_requires_admin_key(client, admin_headers):
    missing = await client.get("/admin/gateways/bkash/settings")
    wrong = await client.get("/admin/gateways/bkash/settings", headers={"X-Admin-Key": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401


@pytest.mark.asyncio
async def test_settings_are_masked(client, admin_headers, gateway_settings):
    response = await client.get("/admin/gateways/bkash/settings", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["configured"] is True
    assert body["settings"]["app_key"] == "sandbox-app-key"
    assert body["settings"]["app_secret"] == "********"
    assert body["settings"]["password"] == "********"
    assert body["settings"]["success_url"] is None


@pytest.mark.asyncio
async def test_update_settings(client, db, admin_headers, gateway_settings):
    response = await client.put(
        "/admin/gateways/sslcommerz/settings",
        headers=admin_headers,
        json={"settings": {
            "store_id": "livestore",
            "store_password": "********",
            "ipn_url": "https://api.example.com/webhooks/sslcommerz/ipn",
        }},
    )

    assert response.status_code == 200
    assert response.json()["updated"] == ["ipn_url", "store_id"]

    rows = {
        row.key: row.value
        for row in (await db.execute(select(SiteSetting))).scalars().all()
    }
    assert rows["ssl_store_id"] == "livestore"
    assert rows["ssl_store_password"] == "teststore@ssl"
    assert rows["ssl_ipn_url"] == "https://api.example.com/webhooks/sslcommerz/ipn"


@pytest.mark.asyncio
async def test_update_rejects_unknown_keys(client, admin_headers):
    response = await client.put(
        "/admin/gateways/bkash/settings",
        headers=admin_headers,
        json={"settings": {"app_key": "k", "merchant_pin": "1234"}},
    )

    assert response.status_code == 400
    assert "merchant_pin" in response.json()["error"]


@pytest.mark.asyncio
async def test_lesson_tree_endpoint(client, db, admin_headers, course):
    intro = Lesson(course_id=course.id, title="Intro", order_index=0, is_published=True)
    db.add(intro)
    await db.flush()
    db.add(Lesson(course_id=course.id, parent_lesson_id=intro.id, title="Setup", order_index=0, is_published=False))
    await db.commit()

    response = await client.get(f"/admin/courses/{course.id}/lessons", headers=admin_headers)

    assert response.status_code == 200
    lessons = response.json()["lessons"]
    assert [lesson["title"] for lesson in lessons] == ["Intro"]
    assert [lesson["title"] for lesson in lessons[0]["sub_lessons"]] == ["Setup"]

    published = await client.get(
        f"/admin/courses/{course.id}/lessons",
        params={"published_only": "true"},
        headers=admin_headers,
    )
    assert published.json()["lessons"][0]["sub_lessons"] == []


@pytest.mark.asyncio
async def test_lesson_tree_unknown_course(client, admin_headers):
    response = await client.get(
        "/admin/courses/00000000-0000-4000-8000-000000000000/lessons",
        headers=admin_headers,
    )
    assert response.status_code == 404
