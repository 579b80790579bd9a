import os

import pytest

from drivefinder.config import get_settings


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the config dir at tmp_path and drop any DRIVEFINDER_* env vars."""
    for key in list(os.environ):
        if key.upper().startswith("DRIVEFINDER_"):
            monkeypatch.delenv(key)
    home = tmp_path / "drivefinder-home"
    monkeypatch.setenv("DRIVEFINDER_HOME", str(home))
    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()
