import pytest

from app.core.config import Settings
from app.db.backend import create_backend
from app.db.base import SIGNED_IN, Backend, Table
from app.db.crud import UNIQUE_VIOLATION, SqlAuth, SqlTables, hash_password, verify_password
from app.db.session import connect
from app.db.storage import LocalStorage
from app.forms.controllers import ALREADY_SUBSCRIBED, submit_contact, subscribe_newsletter


@pytest.fixture
def db():
    database = connect("sqlite:///:memory:")
    database.ensure_tables()
    yield database
    database.dispose()


@pytest.fixture
def sql_backend(db, tmp_path):
    return Backend(auth=SqlAuth(db), tables=SqlTables(db), storage=LocalStorage(str(tmp_path)))


def test_connect_without_url_is_disabled():
    assert connect("") is None


def test_insert_assigns_id_and_timestamp(db):
    tables = SqlTables(db)
    res = tables.insert(Table.CONTACTS, [{"id": "mine", "name": "Ada", "email": "a@b.c", "message": "hi", "extra": 1}])
    assert res.ok
    row = res.data[0]
    assert row["id"] != "mine"
    assert row["created_at"]
    assert "extra" not in row


def test_list_ordered_newest_first(db):
    tables = SqlTables(db)
    for name in ("first", "second", "third"):
        tables.insert(Table.CONTACTS, [{"name": name, "email": "a@b.c", "message": "m"}])
    rows = tables.list_ordered_by_created_at_desc(Table.CONTACTS).data
    assert [r["name"] for r in rows] == ["third", "second", "first"]

    bad = tables.list_ordered(Table.CONTACTS, "nope")
    assert not bad.ok


def test_update_by_id(db):
    tables = SqlTables(db)
    row = tables.insert(Table.JOB_APPLICATIONS, [{
        "full_name": "Ada", "email": "a@b.c", "phone": "1", "position": "P", "experience": "2",
    }]).data[0]
    assert row["status"] == "pending"

    res = tables.update_by_id(Table.JOB_APPLICATIONS, row["id"], {"status": "approved", "id": "other"})
    assert res.data[0]["status"] == "approved"
    assert res.data[0]["id"] == row["id"]

    missing = tables.update_by_id(Table.JOB_APPLICATIONS, "missing", {"status": "approved"})
    assert missing.error["message"] == "Record not found"


def test_newsletter_duplicate_reports_unique_violation(db):
    tables = SqlTables(db)
    assert tables.insert(Table.NEWSLETTER_SUBSCRIBERS, [{"email": "a@b.c"}]).ok
    dup = tables.insert(Table.NEWSLETTER_SUBSCRIBERS, [{"email": "a@b.c"}])
    assert dup.error["code"] == UNIQUE_VIOLATION
    assert "duplicate" in dup.error["message"]


def test_subscribe_twice_is_not_an_error(sql_backend):
    first = subscribe_newsletter(sql_backend, {"email": "a@b.c"})
    assert not first.duplicate and first.record["subscribed_at"]
    again = subscribe_newsletter(sql_backend, {"email": "a@b.c"})
    assert again.duplicate is True
    assert again.message == ALREADY_SUBSCRIBED


def test_contact_persists_through_sql(sql_backend):
    submit_contact(sql_backend, {"name": "Ada", "email": "a@b.c", "message": "hi"})
    rows = sql_backend.tables.list_ordered_by_created_at_desc(Table.CONTACTS).data
    assert rows[0]["message"] == "hi"


def test_upsert_creates_then_updates(db):
    tables = SqlTables(db)
    tables.upsert(Table.USERS, {"id": "u1", "email": "a@b.c", "full_name": "Ada"})
    tables.upsert(Table.USERS, {"id": "u1", "email": "a@b.c", "full_name": "Ada Lovelace"})
    rows = tables.list_ordered(Table.USERS, "created_at").data
    assert len(rows) == 1 and rows[0]["full_name"] == "Ada Lovelace"


def test_password_hashing():
    stored = hash_password("secret")
    assert verify_password("secret", stored)
    assert not verify_password("wrong", stored)
    assert not verify_password("secret", None)


def test_sql_auth_flow(db):
    auth = SqlAuth(db)
    events = []
    auth.on_auth_state_change(lambda event, session: events.append(event))

    res = auth.sign_up("a@b.c", "pw", {"data": {"full_name": "Ada"}})
    assert res.ok
    assert res.data["user"]["user_metadata"]["full_name"] == "Ada"
    assert "password_hash" not in res.data["user"]

    assert auth.sign_up("a@b.c", "pw").error["message"] == "User already registered"

    auth.sign_out()
    assert auth.current_user() is None
    assert not auth.sign_in_with_password("a@b.c", "wrong").ok
    assert auth.sign_in_with_password("a@b.c", "pw").ok
    assert auth.get_session().data["session"]["user"]["email"] == "a@b.c"
    assert events == ["SIGNED_OUT", SIGNED_IN, "SIGNED_OUT", SIGNED_IN]

    assert not auth.sign_in_with_oauth("github").ok


def test_sql_sessions_are_per_visitor(db):
    auth = SqlAuth(db)
    auth.sign_up("a@b.c", "pw", session_id="alice")
    assert auth.current_user("alice")["email"] == "a@b.c"
    assert auth.current_user("bob") is None
    assert auth.current_user() is None

    auth.sign_out("bob")
    assert auth.current_user("alice") is not None


def test_create_backend_picks_sql_or_demo(tmp_path):
    real = create_backend(Settings(database_url=f"sqlite:///{tmp_path / 'site.db'}", uploads_dir=str(tmp_path)))
    assert real.demo is False
    assert real.tables.insert(Table.CONTACTS, [{"name": "A", "email": "a@b.c", "message": "m"}]).ok
    real.close()

    demo = create_backend(Settings(database_url="sqlite:///demo"))
    assert demo.demo is True
    demo.close()
