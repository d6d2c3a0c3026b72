def test_list_blogs_newest_first(client):
    body = client.get("/api/blogs").json()
    assert body["success"] is True
    assert [p["id"] for p in body["data"]] == ["1", "2"]
    assert body["total"] == 2


def test_blog_filters(client):
    featured = client.get("/api/blogs", params={"featured": "true"}).json()["data"]
    assert [p["id"] for p in featured] == ["1"]
    assert client.get("/api/blogs", params={"published": "false"}).json()["data"] == []
    assert len(client.get("/api/blogs", params={"limit": "1"}).json()["data"]) == 1


def test_blogs_by_tag_is_case_insensitive(client):
    data = client.get("/api/blogs/tag/vlsi").json()["data"]
    assert [p["id"] for p in data] == ["1"]


def test_get_blog_not_found(client):
    r = client.get("/api/blogs/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Blog post not found"}


def test_create_blog_fills_defaults(client):
    r = client.post("/api/blogs", json={"title": "T", "content": "word " * 450, "author": "Me"})
    assert r.status_code == 201
    post = r.json()["data"]
    assert post["readTime"] == "3 min read"
    assert post["published"] is False and post["featured"] is False
    assert post["tags"] == []
    assert len(post["publishDate"]) == 10

    assert client.get(f"/api/blogs/{post['id']}").json()["data"]["title"] == "T"


def test_create_blog_requires_fields(client):
    r = client.post("/api/blogs", json={"title": "T"})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: title, content, author"


def test_update_and_delete_blog(client):
    r = client.put("/api/blogs/2", json={"title": "New", "content": "c", "author": "a", "published": False})
    data = r.json()["data"]
    assert data["title"] == "New" and data["published"] is False and data["created_at"].startswith("2024-12-18")

    assert client.delete("/api/blogs/2").json()["data"]["id"] == "2"
    assert client.delete("/api/blogs/2").status_code == 404


def test_list_jobs_sorted_by_posted_date(client):
    data = client.get("/api/jobs").json()["data"]
    assert [j["id"] for j in data] == ["1", "2", "5", "6"]


def test_job_filters(client):
    assert [j["id"] for j in client.get("/api/jobs", params={"location": "remote"}).json()["data"]] == ["5"]
    assert [j["id"] for j in client.get("/api/jobs", params={"department": "design"}).json()["data"]] == ["6"]
    assert client.get("/api/jobs", params={"type": "Contract"}).json()["total"] == 0


def test_create_job_defaults_and_validation(client):
    bad = client.post("/api/jobs", json={"title": "T"})
    assert bad.status_code == 400

    r = client.post("/api/jobs", json={
        "title": "Analog Engineer", "department": "Design", "location": "Remote",
        "type": "Full-time", "description": "d",
    })
    assert r.status_code == 201
    job = r.json()["data"]
    assert job["status"] == "active"
    assert job["skills_required"] == []

    invalid = client.post("/api/jobs", json={
        "title": "X", "department": "D", "location": "L", "type": "Full-time", "description": "d", "status": "paused",
    })
    assert invalid.status_code == 400


def test_job_status_patch(client):
    r = client.patch("/api/jobs/1/status", json={"status": "closed"})
    assert r.json()["data"]["status"] == "closed"
    assert client.get("/api/jobs", params={"status": "active"}).json()["total"] == 3

    bad = client.patch("/api/jobs/1/status", json={"status": "paused"})
    assert bad.status_code == 400
    assert bad.json()["error"] == "Invalid status. Must be 'active', 'inactive', or 'closed'"

    assert client.patch("/api/jobs/99/status", json={"status": "closed"}).status_code == 404


def test_stores_are_per_app(app, settings, backend, sheets, sync_client):
    from fastapi.testclient import TestClient
    from app.main import create_app

    TestClient(app).delete("/api/jobs/1")
    other = TestClient(create_app(settings=settings, backend=backend, sheets=sheets, sync_client=sync_client))
    assert other.get("/api/jobs/1").status_code == 200
