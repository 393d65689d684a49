"""Tests for the GitHub Contents API client and backend — MockTransport, no network."""

from __future__ import annotations

import json

import pytest

from app.fitness.errors import StorageError
from app.fitness.github import GitHubContentsClient
from app.fitness.persistence import GitHubBackend, encode_records

from tests.conftest import make_record
from tests.fake_github import FakeGitHub


def _client(fake: FakeGitHub, **kwargs) -> GitHubContentsClient:
    return GitHubContentsClient("secret-token", "owner/repo", transport=fake.transport(), **kwargs)


class TestContentsClient:
    @pytest.mark.asyncio
    async def test_first_write_omits_sha(self):
        fake = FakeGitHub()
        client = _client(fake)
        await client.put_file("fitness_data/2024/03.json", b"[]")
        assert "sha" not in fake.puts[0]
        assert fake.puts[0]["message"] == "Update fitness_data/2024/03.json"
        assert fake.content("fitness_data/2024/03.json") == b"[]"

    @pytest.mark.asyncio
    async def test_overwrite_sends_current_sha(self):
        fake = FakeGitHub({"fitness_data/2024/03.json": b"[1]"})
        _, sha = fake.files["fitness_data/2024/03.json"]
        client = _client(fake)
        await client.put_file("fitness_data/2024/03.json", b"[2]")
        assert fake.puts[0]["sha"] == sha
        assert fake.content("fitness_data/2024/03.json") == b"[2]"

    @pytest.mark.asyncio
    async def test_auth_header(self):
        fake = FakeGitHub()
        await _client(fake).get_sha("missing.json")
        assert fake.requests[0].headers["Authorization"] == "token secret-token"

    @pytest.mark.asyncio
    async def test_branch_passed(self):
        fake = FakeGitHub()
        client = _client(fake, branch="data")
        await client.put_file("a.json", b"{}")
        assert fake.requests[0].url.params["ref"] == "data"
        assert fake.puts[0]["branch"] == "data"

    @pytest.mark.asyncio
    async def test_get_missing_file(self):
        assert await _client(FakeGitHub()).get_file("nope.json") is None

    @pytest.mark.asyncio
    async def test_put_failure_raises(self):
        fake = FakeGitHub()
        fake.fail_puts = True
        with pytest.raises(StorageError) as exc_info:
            await _client(fake).put_file("a.json", b"{}")
        assert exc_info.value.status_code == 500


class TestGitHubBackend:
    @pytest.mark.asyncio
    async def test_load_month_tree(self):
        fake = FakeGitHub(
            {
                "fitness_data/2024/02.json": encode_records([make_record("2024-02-10")]),
                "fitness_data/2024/03.json": encode_records([make_record("2024-03-01"), make_record("2024-03-02")]),
                "fitness_data/README.md": b"not data",
            }
        )
        backend = GitHubBackend(_client(fake))
        records = await backend.load()
        assert [r.date for r in records] == ["2024-02-10", "2024-03-01", "2024-03-02"]

    @pytest.mark.asyncio
    async def test_load_empty_repo(self):
        assert await GitHubBackend(_client(FakeGitHub())).load() == []

    @pytest.mark.asyncio
    async def test_save_changed_partition_only(self):
        fake = FakeGitHub()
        backend = GitHubBackend(_client(fake))
        records = [make_record("2024-02-10"), make_record("2024-03-01")]
        await backend.save(records, changed_date="2024-03-01")
        assert [p["path"] for p in fake.puts] == ["fitness_data/2024/03.json"]
        saved = json.loads(fake.content("fitness_data/2024/03.json"))
        assert [r["date"] for r in saved] == ["2024-03-01"]

    @pytest.mark.asyncio
    async def test_day_layout(self):
        fake = FakeGitHub()
        backend = GitHubBackend(_client(fake), layout="day")
        await backend.save([make_record("2024-03-05")])
        assert json.loads(fake.content("fitness_data/2024/03/05.json"))["date"] == "2024-03-05"
        records = await backend.load()
        assert [r.date for r in records] == ["2024-03-05"]

    @pytest.mark.asyncio
    async def test_save_failure_raises_storage_error(self):
        fake = FakeGitHub()
        fake.fail_puts = True
        backend = GitHubBackend(_client(fake))
        with pytest.raises(StorageError):
            await backend.save([make_record("2024-03-01")])
