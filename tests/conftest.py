"""Shared test fixtures and configuration."""

import os

import pytest


# Complete test environment that overrides every config value Settings reads
TEST_ENV = {
    # Server settings
    "HOST": "127.0.0.1",
    "PORT": "13000",
    "STATIC_DIR": "",
    "CORS_ALLOW_ORIGINS": "*",
    # Corpus settings
    "DATA_PATH": "missing-test-corpus",
    "PATH_PREFIX": "topics/",
    "DEFAULT_CATEGORY": "uncategorized",
    "UNTITLED_TITLE": "Untitled page",
    # Search settings
    "PREVIEW_MAX_LENGTH": "600",
    "DEFAULT_PAGE_SIZE": "20",
    "MAX_PAGE_SIZE": "100",
    "CACHE_TTL_SECONDS": "300",
    "CACHE_MAX_ENTRIES": "120",
    # Logging
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables before each test to the test defaults."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sample_records():
    """Small corpus spanning three categories, one unfiled page and CJK text."""
    return [
        {
            "content": "guide guide tutorial",
            "title": "Intro Guide",
            "path": "topics/basics/intro.html",
        },
        {
            "content": "Advanced configuration of the search engine.\nSee the guide for basics.",
            "title": "Configuration",
            "path": "topics/advanced/config.html",
        },
        {
            "content": "Hello world from the tutorial. hello again.",
            "title": "Hello World",
            "path": "topics\\basics\\hello.html",
        },
        {
            "content": "中文文档 搜索 引擎",
            "title": "中文指南",
            "path": "topics/zh/guide.html",
        },
        {
            "content": "A page without a category and without a title.",
            "title": "",
            "path": "",
        },
    ]
