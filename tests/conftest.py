"""Shared fixtures for linkverify tests."""

import threading

import pytest

from linkverify.core.config import clear_config_cache
from linkverify.core.models import Link, Location, ValidationResult


class RecordingVerifier:
    """Verifier stub that returns a fixed result and records each call.

    All verifiers built by one factory share a call log, so tests can
    assert on the order verifiers were consulted in.
    """

    def __init__(self, name, result, calls, lock):
        self.name = name
        self.result = result
        self.calls = calls
        self._lock = lock

    def verify(self, link, cache):
        with self._lock:
            self.calls.append((self.name, link.href))
        if isinstance(self.result, BaseException):
            raise self.result
        if callable(self.result):
            return self.result(link)
        return self.result


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def make_verifier(call_log):
    """Factory for RecordingVerifier stubs sharing call_log."""
    lock = threading.Lock()

    def factory(name, result=ValidationResult.UNSUPPORTED):
        return RecordingVerifier(name, result, call_log, lock)

    return factory


@pytest.fixture
def make_pairs():
    """Factory for n distinct (Location, Link) pairs."""
    def factory(n, prefix="doc"):
        return [
            (Location(f"{prefix}{i % 7}.md", i + 1), Link(f"https://example.com/{i}"))
            for i in range(n)
        ]
    return factory


class DictCache:
    """Minimal read-only cache backed by a dict."""

    def __init__(self, entries=None):
        self.entries = dict(entries or {})
        self.lookups = []

    def is_valid(self, key):
        self.lookups.append(key)
        return self.entries.get(key)


@pytest.fixture
def dict_cache():
    return DictCache


@pytest.fixture(autouse=True)
def _fresh_config(tmp_path, monkeypatch):
    """Keep tests away from any real .linkverify.yaml."""
    clear_config_cache()
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    yield
    clear_config_cache()
