from __future__ import annotations
import pytest


@pytest.mark.asyncio
async def test_dashboard_counts_and_activity(auth_client, storage, make_submission):
    await make_submission(title="First site")
    await make_submission(title="Second site", status="approved", submitted_by=None)
    await make_submission("design", title="A poster")
    storage.objects["designs/a.png"] = (b"12345", "image/png")

    r = await auth_client.get("/dashboard")
    assert r.status_code == 200
    body = r.json()
    assert body["stats"] == {
        "total_designs": 0,
        "total_websites": 0,
        "active_submissions": 3,
        "storage_used_bytes": 5,
    }
    # only website submissions feed the activity list
    activity = body["recent_activity"]
    assert {a["name"] for a in activity} == {"First site", "Second site"}
    assert {a["user"] for a in activity} == {"Ada", "Unknown User"}
    assert [n["href"] for n in body["navigation"]] == ["/dashboard", "/upload/design", "/upload/website", "/submissions"]


@pytest.mark.asyncio
async def test_media_list_and_delete(auth_client, storage):
    storage.objects["designs/a.png"] = (b"aa", "image/png")
    storage.objects["website-previews/b.mp4"] = (b"bbbb", "video/mp4")

    r = await auth_client.get("/media", params={"prefix": "designs/"})
    assert r.status_code == 200
    assert r.json() == [{"path": "designs/a.png", "size": 2, "url": "https://cdn.gridrr.test/gridrr/designs/a.png"}]

    r = await auth_client.delete("/media/website-previews/b.mp4")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert "website-previews/b.mp4" not in storage.objects
