"""Shared fixtures."""

import pytest

from dreamdup.schemas.keyword import KeywordRecord


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep user/project config files and credentials out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for var in ("OPENAI_API_KEY", "SUPABASE_URL", "SUPABASE_KEY"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def dream_corpus():
    """A small corpus of dream keywords."""
    return [
        KeywordRecord(id=1, keyword="뱀꿈", slug="snake-dream"),
        KeywordRecord(id=2, keyword="호랑이꿈", slug="tiger-dream"),
        KeywordRecord(id=3, keyword="돼지 꿈", slug="pig-dream"),
        KeywordRecord(id=4, keyword="불꿈", slug="fire-dream"),
    ]
