import time

from app.db.base import SIGNED_IN, SIGNED_OUT, Table
from app.db.demo import INVALID_LOGIN, RECORD_NOT_FOUND, USER_EXISTS


# -------- auth ---------------------------------------------------------------

def test_sign_in_unknown_user_fails_and_keeps_state(backend):
    res = backend.auth.sign_in_with_password("nobody@example.com", "secret")
    assert res.error["message"] == INVALID_LOGIN
    assert res.data == {"user": None, "session": None}
    assert backend.auth.get_session().data == {"session": None}


def test_sign_up_then_sign_in(backend):
    res = backend.auth.sign_up("a@example.com", "pw", {"data": {"full_name": "Ada"}})
    assert res.ok
    user = res.data["user"]
    assert user["id"].startswith("demo-")
    assert user["user_metadata"] == {"full_name": "Ada"}
    assert backend.auth.current_user()["email"] == "a@example.com"

    backend.auth.sign_out()
    assert backend.auth.current_user() is None

    assert not backend.auth.sign_in_with_password("a@example.com", "wrong").ok
    assert backend.auth.current_user() is None
    assert backend.auth.sign_in_with_password("a@example.com", "pw").ok
    assert backend.auth.get_session().data["session"]["user"]["email"] == "a@example.com"


def test_duplicate_sign_up_leaves_existing_user(backend):
    first = backend.auth.sign_up("a@example.com", "pw").data["user"]
    backend.auth.sign_out()
    res = backend.auth.sign_up("a@example.com", "other", {"data": {"full_name": "Imposter"}})
    assert res.error["message"] == USER_EXISTS
    assert backend.auth.current_user() is None
    assert backend.auth.users["a@example.com"]["id"] == first["id"]
    assert backend.auth.users["a@example.com"]["password"] == "pw"


def test_oauth_not_available(backend):
    res = backend.auth.sign_in_with_oauth("google")
    assert res.error["message"] == "OAuth not available in demo mode. Use email signup/login instead."


def test_auth_state_observer(backend):
    seen = []
    sub = backend.auth.on_auth_state_change(lambda event, session: seen.append((event, session)))
    assert seen == [(SIGNED_OUT, None)]

    backend.auth.sign_up("a@example.com", "pw")
    assert seen[-1][0] == SIGNED_IN
    assert seen[-1][1]["user"]["email"] == "a@example.com"

    backend.auth.sign_out()
    assert seen[-1] == (SIGNED_OUT, None)

    sub.unsubscribe()
    backend.auth.sign_in_with_password("a@example.com", "pw")
    assert len(seen) == 3


def test_failing_observer_does_not_break_sign_in(backend):
    def broken(event, session):
        raise RuntimeError("listener bug")

    backend.auth.on_auth_state_change(broken)
    assert backend.auth.sign_up("a@example.com", "pw").ok


def test_sessions_are_kept_per_visitor(backend):
    backend.auth.sign_up("alice@example.com", "pw", session_id="alice")
    assert backend.auth.current_user("alice")["email"] == "alice@example.com"
    assert backend.auth.current_user("bob") is None
    assert backend.auth.current_user() is None

    backend.auth.sign_out("bob")
    assert backend.auth.current_user("alice")["email"] == "alice@example.com"
    backend.auth.sign_out("alice")
    assert backend.auth.current_user("alice") is None


def test_password_never_leaves_the_provider(backend):
    res = backend.auth.sign_up("a@example.com", "pw")
    assert "password" not in res.data["user"]
    assert "password" not in res.data["session"]["user"]
    assert "password" not in backend.auth.current_user()
    assert "password" not in backend.auth.get_session().data["session"]["user"]

    backend.auth.current_user()["email"] = "mutated@example.com"
    assert backend.auth.current_user()["email"] == "a@example.com"


# -------- tables -------------------------------------------------------------

def test_insert_assigns_id_and_timestamp(backend):
    res = backend.tables.insert(Table.CONTACTS, [{"id": "mine", "created_at": "1999-01-01", "name": "A"}])
    row = res.data[0]
    assert row["id"] != "mine" and row["id"].startswith("demo-")
    assert row["created_at"] != "1999-01-01"
    assert row["name"] == "A"


def test_two_inserts_get_distinct_ids(backend):
    first = backend.tables.insert(Table.CONTACTS, [{"name": "A"}]).data[0]
    second = backend.tables.insert(Table.CONTACTS, [{"name": "A"}]).data[0]
    assert first["id"] != second["id"]
    assert len({r["id"] for r in backend.tables.list_ordered(Table.CONTACTS, "created_at").data}) == 2


def test_list_newest_first(backend):
    backend.tables.insert(Table.CONTACTS, [{"name": "old"}])
    time.sleep(0.005)
    backend.tables.insert(Table.CONTACTS, [{"name": "new"}])

    desc = backend.tables.list_ordered_by_created_at_desc(Table.CONTACTS).data
    assert [r["name"] for r in desc] == ["new", "old"]

    insertion = backend.tables.list_ordered(Table.CONTACTS, "created_at", ascending=True).data
    assert [r["name"] for r in insertion] == ["old", "new"]


def test_list_returns_copies(backend):
    backend.tables.insert(Table.CONTACTS, [{"name": "A"}])
    backend.tables.list_ordered(Table.CONTACTS, "created_at").data[0]["name"] = "mutated"
    assert backend.tables.list_ordered(Table.CONTACTS, "created_at").data[0]["name"] == "A"


def test_unpersisted_tables_echo_and_stay_empty(backend, caplog):
    res = backend.tables.insert(Table.GET_STARTED_REQUESTS, [{"first_name": "Ada"}])
    assert res.ok and res.data[0]["first_name"] == "Ada"
    assert backend.tables.list_ordered_by_created_at_desc(Table.GET_STARTED_REQUESTS).data == []
    assert "not stored" in caplog.text


def test_update_only_job_applications(backend):
    app_row = backend.tables.insert(Table.JOB_APPLICATIONS, [{"full_name": "A", "status": "pending"}]).data[0]
    res = backend.tables.update_by_id(Table.JOB_APPLICATIONS, app_row["id"], {"status": "approved"})
    assert res.ok and res.data[0]["status"] == "approved"
    assert backend.tables.list_ordered(Table.JOB_APPLICATIONS, "created_at").data[0]["status"] == "approved"

    contact = backend.tables.insert(Table.CONTACTS, [{"name": "A"}]).data[0]
    res = backend.tables.update_by_id(Table.CONTACTS, contact["id"], {"name": "B"})
    assert res.error["message"] == RECORD_NOT_FOUND
    assert backend.tables.list_ordered(Table.CONTACTS, "created_at").data[0]["name"] == "A"

    assert backend.tables.update_by_id(Table.JOB_APPLICATIONS, "missing", {"status": "x"}).error["message"] == RECORD_NOT_FOUND


def test_upsert_echoes(backend):
    assert backend.tables.upsert(Table.USERS, {"id": "u1", "email": "a@b.c"}).data == [{"id": "u1", "email": "a@b.c"}]


def test_close_drops_state(backend):
    backend.auth.sign_up("a@example.com", "pw")
    backend.tables.insert(Table.CONTACTS, [{"name": "A"}])
    backend.close()
    assert backend.auth.current_user() is None
    assert backend.auth.users == {}
    assert backend.tables.list_ordered(Table.CONTACTS, "created_at").data == []


# -------- storage ------------------------------------------------------------

def test_demo_storage_paths(backend):
    path = backend.storage.upload("resumes", "cv.pdf").data["path"]
    assert path.startswith("demo-storage/cv.pdf-")
    url = backend.storage.get_public_url(path).data["publicUrl"]
    assert url == f"https://demo-storage.example.com/{path}"
