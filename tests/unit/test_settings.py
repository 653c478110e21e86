"""Unit tests for Settings."""

from pydantic import ValidationError
import pytest

from corpus_search.config import Settings


@pytest.mark.unit
class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        for name in ("PORT", "DEFAULT_CATEGORY", "MAX_PAGE_SIZE", "CACHE_TTL_SECONDS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 13000
        assert settings.default_category == "uncategorized"
        assert settings.max_page_size == 100
        assert settings.cache_ttl_seconds == 300.0
        assert settings.path_prefix == "topics/"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("DEFAULT_CATEGORY", "misc")
        settings = Settings()
        assert settings.port == 8080
        assert settings.default_category == "misc"

    def test_init_arguments_override_environment(self):
        assert Settings(data_path="other").data_path == "other"


@pytest.mark.unit
class TestSettingsValidation:
    def test_default_page_size_above_maximum_is_rejected(self):
        with pytest.raises(ValidationError, match="DEFAULT_PAGE_SIZE"):
            Settings(default_page_size=200, max_page_size=100)

    @pytest.mark.parametrize("field", ["preview_max_length", "cache_max_entries", "max_page_size"])
    def test_non_positive_sizes_are_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_port_range(self):
        with pytest.raises(ValidationError):
            Settings(port=70000)


@pytest.mark.unit
class TestCorsOrigins:
    def test_comma_separated(self):
        settings = Settings(cors_allow_origins=" https://a.example , https://b.example ,")
        assert settings.get_cors_allow_origins() == ["https://a.example", "https://b.example"]

    def test_empty(self):
        assert Settings(cors_allow_origins="").get_cors_allow_origins() == []
