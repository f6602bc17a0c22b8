"""
Test suite for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from billparser.config import Settings


class TestSettings:

    def test_defaults(self):
        config = Settings(_env_file=None)
        assert config.DEFAULT_CURRENCY == "INR"
        assert config.MERCHANT_SCAN_LINES == 6
        assert config.TOTAL_TAIL_LINES == 20
        assert config.TOTAL_SELECTION == "max"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TOTAL_SELECTION", "last")
        monkeypatch.setenv("TOTAL_TAIL_LINES", "5")
        config = Settings(_env_file=None)
        assert config.TOTAL_SELECTION == "last"
        assert config.TOTAL_TAIL_LINES == 5

    def test_invalid_total_selection(self, monkeypatch):
        monkeypatch.setenv("TOTAL_SELECTION", "median")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
