import pytest
from pydantic import ValidationError

from recipeshare.config import Settings


def test_filter_mode_defaults_to_tag():
    assert Settings().DEFAULT_FILTER_MODE == "tag"


def test_unknown_filter_mode_rejected_at_startup(monkeypatch):
    monkeypatch.setenv("DEFAULT_FILTER_MODE", "cuisine")
    with pytest.raises(ValidationError):
        Settings()


def test_region_filter_mode_from_env(monkeypatch):
    monkeypatch.setenv("DEFAULT_FILTER_MODE", "region")
    assert Settings().DEFAULT_FILTER_MODE == "region"
