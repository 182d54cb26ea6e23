import pytest

from splinekit import config


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep user settings files and SPLINEKIT_* variables out of the tests."""

    monkeypatch.setenv('HOME', str(tmp_path / 'home'))
    monkeypatch.setenv('APPDATA', str(tmp_path / 'appdata'))
    for name in (config.SPLINEKIT_CONFIG, config.SPLINEKIT_DTYPE,
                 config.SPLINEKIT_TOLERANCE):
        monkeypatch.delenv(name, raising=False)
    config.clear_cache()
    yield
    config.clear_cache()
