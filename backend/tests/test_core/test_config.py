"""
Unit tests for Settings
"""
import pytest

from stockledger.core.config import Settings
from stockledger.core.storage import build_storage
from stockledger.storage.memory import InMemoryStorageAdapter


class TestAllowedOrigins:

    @pytest.mark.parametrize("raw,expected", [
        ("*", ["*"]),
        ("", ["*"]),
        ("http://localhost:3000, https://shop.example.com", ["http://localhost:3000", "https://shop.example.com"]),
        ('["http://localhost:3000"]', ["http://localhost:3000"]),
    ])
    def test_parsing(self, raw, expected):
        assert Settings(ALLOWED_ORIGINS=raw).get_allowed_origins() == expected


class TestBuildStorage:

    def test_memory_backend(self):
        assert isinstance(build_storage("memory"), InMemoryStorageAdapter)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_storage("cassandra")
