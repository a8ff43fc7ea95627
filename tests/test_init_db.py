from vulnscan_api.core.security import verify_password
from vulnscan_api.db.init_db import init_admin_if_empty
from vulnscan_api.models import User

from conftest import make_user


def test_bootstrap_admin_created_on_empty_table(db_session):
    admin = init_admin_if_empty(db_session, username="root", email="root@example.com", password="bootstrap-pw")

    assert admin.role == "administrator"
    assert verify_password("bootstrap-pw", admin.hashed_password)
    assert db_session.query(User).count() == 1


def test_bootstrap_skipped_when_users_exist(db_session):
    make_user(db_session, "alice")

    assert init_admin_if_empty(db_session, username="root", email="root@example.com", password="pw") is None
    assert db_session.query(User).count() == 1
