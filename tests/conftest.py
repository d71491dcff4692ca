import pytest

from ovdkargs import config


@pytest.fixture(autouse=True)
def unpublished(monkeypatch):
    """Each test starts before the arguments have been parsed."""
    monkeypatch.setattr(config, "_current", None)
