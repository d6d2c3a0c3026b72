import io
from datetime import date

from openpyxl import load_workbook

from app.admin.dashboard import (
    check_password,
    combine_resumes,
    export_tab,
    filter_records,
    load_dashboard,
    update_application_status,
)
from app.content.blogs import BlogStore
from app.content.jobs import JobStore
from app.db.base import Response, Table


def add_application(backend, **extra):
    row = {
        "full_name": "Ada Lovelace", "email": "ada@example.com", "phone": "1",
        "position": "RTL Design Engineer", "experience": "3", "status": "pending",
    }
    row.update(extra)
    return backend.tables.insert(Table.JOB_APPLICATIONS, [row]).data[0]


# -------- gate ---------------------------------------------------------------

def test_check_password():
    assert check_password("admin2024", "admin2024")
    assert not check_password("", "admin2024")
    assert not check_password(None, "admin2024")


def test_dashboard_requires_login(client):
    r = client.get("/admin")
    assert "Admin Access" in r.text
    bad = client.post("/admin/login", data={"password": "guess"})
    assert bad.status_code == 401
    assert "Invalid password. Please try again." in bad.text
    assert client.get("/admin/export/contacts.csv", follow_redirects=False).status_code == 303


def test_logout_clears_cookie(admin_client):
    admin_client.post("/admin/logout", follow_redirects=False)
    assert "Admin Access" in admin_client.get("/admin").text


# -------- data ---------------------------------------------------------------

def test_combined_resume_list():
    apps = [
        {"id": "a1", "full_name": "Ada  Lovelace", "resume_url": "/r/1", "position": "RTL", "created_at": "t1"},
        {"id": "a2", "full_name": "No File", "resume_url": None, "position": "RTL"},
    ]
    uploads = [{"id": "u1", "full_name": "Grace Hopper", "resume_url": "/r/2", "created_at": "t2"}]
    out = combine_resumes(apps, uploads)
    assert [r["id"] for r in out] == ["a1", "u1"]
    assert out[0]["file_name"] == "Resume_Ada_Lovelace.pdf"
    assert out[0]["source"] == "job_application"
    assert out[1]["position"] == "General Application"
    assert out[1]["source"] == "direct_upload"


def test_filter_records_search_and_status():
    rows = [
        {"full_name": "Ada", "email": "ada@x.com", "position": "RTL", "status": "pending"},
        {"full_name": "Grace", "email": "grace@x.com", "position": "DFT", "status": "approved"},
    ]
    assert [r["full_name"] for r in filter_records("applications", rows, "dft")] == ["Grace"]
    assert [r["full_name"] for r in filter_records("applications", rows, "", "pending")] == ["Ada"]
    assert filter_records("applications", rows, "ada", "approved") == []


def test_filter_matches_list_fields():
    jobs = [{"title": "A", "department": "D", "location": "L", "skills_required": ["UVM", "Perl"]}]
    assert filter_records("jobs", jobs, "uvm") == jobs


def test_load_dashboard_and_stats(backend):
    add_application(backend, resume_url="/api/files/resume/x.pdf")
    backend.tables.insert(Table.CONTACTS, [{"name": "C", "email": "c@x.com", "message": "m"}])
    data = load_dashboard(backend, BlogStore(), JobStore())
    stats = data.stats()
    assert stats["applications"] == 1
    assert stats["pending_applications"] == 1
    assert stats["contacts"] == 1
    assert stats["resumes"] == 1
    assert stats["active_jobs"] == 4
    assert stats["blogs"] == 2
    assert data.errors == []


class BrokenTables:
    def list_ordered_by_created_at_desc(self, table):
        return Response.fail("relation does not exist")


def test_load_dashboard_survives_backend_errors(backend, caplog):
    backend.tables = BrokenTables()
    data = load_dashboard(backend, BlogStore(), JobStore())
    assert data.applications == [] and data.contacts == []
    assert len(data.errors) == 5
    assert "relation does not exist" in caplog.text


def test_update_application_status(backend):
    row = add_application(backend)
    assert update_application_status(backend, row["id"], "reviewing").ok
    assert backend.tables.list_ordered(Table.JOB_APPLICATIONS, "created_at").data[0]["status"] == "reviewing"

    assert not update_application_status(backend, row["id"], "hired").ok
    assert not update_application_status(backend, "missing", "approved").ok


def test_export_tab_uses_filtered_view(backend):
    add_application(backend)
    add_application(backend, full_name="Grace Hopper", email="grace@example.com")
    data = load_dashboard(backend, BlogStore(), JobStore())

    artifact = export_tab(data, "applications", "csv", query="grace", today=date(2024, 12, 20))
    assert artifact.filename == "job_applications_2024-12-20.csv"
    lines = artifact.content.decode().split("\n")
    assert len(lines) == 2 and "Grace Hopper" in lines[1]

    assert export_tab(data, "contacts", "csv") is None


# -------- routes -------------------------------------------------------------

def test_dashboard_lists_submissions(admin_client, backend):
    admin_client.post("/contact", data={"name": "Ada", "email": "ada@example.com", "message": "Hello"})
    r = admin_client.get("/admin", params={"tab": "contacts"})
    assert r.status_code == 200
    assert "ada@example.com" in r.text


def test_status_update_route(admin_client, backend):
    row = add_application(backend)
    r = admin_client.post(f"/admin/applications/{row['id']}/status", data={"status": "approved"}, follow_redirects=False)
    assert r.status_code == 303
    assert backend.tables.list_ordered(Table.JOB_APPLICATIONS, "created_at").data[0]["status"] == "approved"


def test_csv_export_route(admin_client, backend):
    add_application(backend)
    r = admin_client.get("/admin/export/applications.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="job_applications_' in r.headers["content-disposition"]
    assert "Ada Lovelace" in r.text


def test_xlsx_export_route(admin_client):
    r = admin_client.get("/admin/export/jobs.xlsx")
    wb = load_workbook(io.BytesIO(r.content))
    assert wb.sheetnames == ["Data"]
    assert wb["Data"].max_row == 5


def test_empty_export_redirects_with_notice(admin_client):
    r = admin_client.get("/admin/export/contacts.csv", follow_redirects=False)
    assert r.status_code == 303
    assert "notice=No+data+to+export" in r.headers["location"]

    r = admin_client.get("/admin/export/all.xlsx", follow_redirects=False)
    assert r.status_code == 303


def test_export_all_route(admin_client, backend):
    add_application(backend)
    backend.tables.insert(Table.CONTACTS, [{"name": "C", "email": "c@x.com", "message": "m"}])
    r = admin_client.get("/admin/export/all.xlsx")
    assert r.status_code == 200
    wb = load_workbook(io.BytesIO(r.content))
    assert wb.sheetnames == ["Job Applications", "Contact Messages"]


def test_blog_and_job_editors(admin_client):
    r = admin_client.post(
        "/admin/blogs",
        data={"title": "Hello", "content": "Body", "author": "Team", "tags": "VLSI, DFT", "published": "on"},
        follow_redirects=False,
    )
    assert r.status_code == 303
    posts = admin_client.get("/api/blogs", params={"published": "true"}).json()["data"]
    created = next(p for p in posts if p["title"] == "Hello")
    assert created["tags"] == ["VLSI", "DFT"]

    bad = admin_client.post("/admin/blogs", data={"title": "No body"})
    assert bad.status_code == 400

    admin_client.post("/admin/jobs/5/status", data={"status": "inactive"})
    assert admin_client.get("/api/jobs/5").json()["data"]["status"] == "inactive"

    admin_client.post("/admin/jobs/6/delete")
    assert admin_client.get("/api/jobs/6").status_code == 404

    assert admin_client.get("/admin/blogs/new").status_code == 200
    assert admin_client.get("/admin/jobs/1/edit").status_code == 200
