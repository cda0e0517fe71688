from datetime import datetime

import pytest

from clubdesk import services, storage


@pytest.fixture(autouse=True)
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "club.json"
    monkeypatch.setattr(storage, "DATA_FILE", path)
    return path


@pytest.fixture
def service(data_file):
    return services.ClubService()


@pytest.fixture
def when():
    return datetime(2024, 5, 12, 15, 0)
