import pytest

from caas_journey.db import Store
from caas_journey.users import create_or_update_user


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_journey.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    """An opened store backed by the temporary database."""
    return Store(tmp_db).open()


@pytest.fixture
def student(store):
    return create_or_update_user(store, "u1", username="Ayu", email="ayu@example.com")
