"""Persistence backends — single JSON file, date-partitioned tree, GitHub repo.

All backends share one contract:

    await backend.load() -> list[FitnessData]
    await backend.save(records, changed_date=None)

``changed_date`` narrows a partitioned save to the partition holding that
date. Loading tolerates missing storage (empty list) and skips corrupt local
partitions with a warning; storage that cannot be reached at all raises
StorageError. Writes raise StorageError too; the service decides what to do
with it. Local file I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

from pydantic import ValidationError

from app.config import Settings
from app.fitness.errors import StorageError
from app.fitness.github import GitHubContentsClient
from app.fitness.models import FitnessData
from app.fitness.store import parse_record_date

logger = logging.getLogger(__name__)


class Backend(Protocol):
    name: str

    async def load(self) -> list[FitnessData]: ...

    async def save(self, records: Sequence[FitnessData], changed_date: str | None = None) -> None: ...

    async def aclose(self) -> None: ...


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


def encode_records(records: Iterable[FitnessData]) -> bytes:
    return json.dumps([r.to_json_dict() for r in records], indent=2, ensure_ascii=False).encode("utf-8")


def encode_record(record: FitnessData) -> bytes:
    return json.dumps(record.to_json_dict(), indent=2, ensure_ascii=False).encode("utf-8")


def decode_records(raw: bytes | str, source: str) -> list[FitnessData]:
    """Decode a JSON array (or a single object) of records; [] when corrupt."""
    try:
        data = json.loads(raw)
    except ValueError as exc:
        logger.warning("Skipping %s: invalid JSON (%s)", source, exc)
        return []
    items: list[Any] = data if isinstance(data, list) else [data]
    records: list[FitnessData] = []
    for item in items:
        try:
            records.append(FitnessData.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping record in %s: %s", source, exc.errors()[0].get("msg"))
    return records


# ---------------------------------------------------------------------------
# Partitioning
# ---------------------------------------------------------------------------


def partition_key(record_date: str, layout: str = "month") -> str | None:
    """Relative file path for a date: '2024/03.json' or '2024/03/15.json'."""
    d = parse_record_date(record_date)
    if d is None:
        return None
    if layout == "day":
        return f"{d.year}/{d.month:02d}/{d.day:02d}.json"
    return f"{d.year}/{d.month:02d}.json"


def group_by_partition(records: Iterable[FitnessData], layout: str = "month") -> dict[str, list[FitnessData]]:
    grouped: dict[str, list[FitnessData]] = {}
    for record in records:
        key = partition_key(record.date, layout)
        if key is None:
            logger.warning("Record with unparseable date %r not partitioned", record.date)
            continue
        grouped.setdefault(key, []).append(record)
    return grouped


def encode_partition(records: list[FitnessData], layout: str) -> bytes:
    # Day files hold one record object, month files an array.
    if layout == "day":
        return encode_record(records[-1])
    return encode_records(records)


def _select_partitions(
    records: Sequence[FitnessData], changed_date: str | None, layout: str
) -> dict[str, list[FitnessData]]:
    grouped = group_by_partition(records, layout)
    if changed_date is None:
        return grouped
    key = partition_key(changed_date, layout)
    return {key: grouped[key]} if key in grouped else {}


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class JsonFileBackend:
    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> list[FitnessData]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read %s: %s", self.path, exc)
            return []
        records = decode_records(raw, str(self.path))
        logger.info("Loaded %d records from %s", len(records), self.path)
        return records

    def _write(self, records: Sequence[FitnessData]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(encode_records(records))
        except OSError as exc:
            raise StorageError(f"Error saving {self.path}: {exc}") from exc

    async def load(self) -> list[FitnessData]:
        return await asyncio.to_thread(self._read)

    async def save(self, records: Sequence[FitnessData], changed_date: str | None = None) -> None:
        await asyncio.to_thread(self._write, list(records))

    async def aclose(self) -> None:
        return None


class DirectoryTreeBackend:
    """``data_dir/YYYY/MM.json`` (month layout) or ``data_dir/YYYY/MM/DD.json`` (day layout)."""

    name = "tree"

    def __init__(self, data_dir: str | Path, layout: str = "month"):
        self.data_dir = Path(data_dir)
        self.layout = layout

    def _read(self) -> list[FitnessData]:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        records: list[FitnessData] = []
        for year_dir in sorted(p for p in self.data_dir.iterdir() if p.is_dir()):
            pattern = "*/*.json" if self.layout == "day" else "*.json"
            for fp in sorted(year_dir.glob(pattern)):
                try:
                    raw = fp.read_bytes()
                except OSError as exc:
                    logger.warning("Cannot read %s: %s", fp, exc)
                    continue
                records.extend(decode_records(raw, str(fp)))
        logger.info("Loaded %d records from %s", len(records), self.data_dir)
        return records

    def _write(self, partitions: dict[str, list[FitnessData]]) -> None:
        failed: list[str] = []
        for key, group in partitions.items():
            path = self.data_dir / key
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(encode_partition(group, self.layout))
            except OSError as exc:
                logger.error("Error saving %s: %s", path, exc)
                failed.append(key)
        if failed:
            raise StorageError(f"Failed to save partitions: {', '.join(failed)}")

    async def load(self) -> list[FitnessData]:
        try:
            return await asyncio.to_thread(self._read)
        except OSError as exc:
            raise StorageError(f"Cannot read {self.data_dir}: {exc}") from exc

    async def save(self, records: Sequence[FitnessData], changed_date: str | None = None) -> None:
        partitions = _select_partitions(records, changed_date, self.layout)
        await asyncio.to_thread(self._write, partitions)

    async def aclose(self) -> None:
        return None


class GitHubBackend:
    """Same partition layout as the tree backend, stored under ``prefix`` in a repo.

    An empty or missing prefix loads as no records; any failed listing or
    fetch raises StorageError so callers never mistake an outage for "empty".
    """

    name = "github"

    def __init__(self, client: GitHubContentsClient, prefix: str = "fitness_data", layout: str = "month"):
        self.client = client
        self.prefix = prefix.strip("/")
        self.layout = layout

    def _remote_path(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    async def _walk(self, path: str, depth: int) -> list[str]:
        files: list[str] = []
        for entry in await self.client.list_dir(path):
            entry_type = entry.get("type")
            entry_path = entry.get("path", "")
            if entry_type == "dir" and depth > 0:
                files.extend(await self._walk(entry_path, depth - 1))
            elif entry_type == "file" and entry_path.endswith(".json") and depth == 0:
                files.append(entry_path)
        return sorted(files)

    async def load(self) -> list[FitnessData]:
        depth = 2 if self.layout == "day" else 1
        records: list[FitnessData] = []
        for path in await self._walk(self.prefix, depth):
            remote = await self.client.get_file(path)
            if remote is not None:
                records.extend(decode_records(remote.content, path))
        logger.info("Loaded %d records from GitHub %s/%s", len(records), self.client.repo, self.prefix)
        return records

    async def save(self, records: Sequence[FitnessData], changed_date: str | None = None) -> None:
        failed: list[str] = []
        for key, group in _select_partitions(records, changed_date, self.layout).items():
            path = self._remote_path(key)
            try:
                await self.client.put_file(path, encode_partition(group, self.layout))
            except StorageError as exc:
                logger.error("GitHub API failed for %s: %s", path, exc)
                failed.append(path)
        if failed:
            raise StorageError(f"Failed to update GitHub: {', '.join(failed)}")

    async def aclose(self) -> None:
        await self.client.aclose()


class MirroredBackend:
    """Local backend of record, with every save pushed to a GitHub mirror."""

    def __init__(self, primary: Backend, mirror: GitHubBackend):
        self.primary = primary
        self.mirror = mirror
        self.name = f"{primary.name}+github"

    async def load(self) -> list[FitnessData]:
        return await self.primary.load()

    async def save(self, records: Sequence[FitnessData], changed_date: str | None = None) -> None:
        try:
            await self.primary.save(records, changed_date)
        finally:
            await self.mirror.save(records, changed_date)

    async def aclose(self) -> None:
        await self.primary.aclose()
        await self.mirror.aclose()


def _github_backend(settings: Settings, transport=None) -> GitHubBackend:
    client = GitHubContentsClient(
        settings.github_token or "",
        settings.github_repo,
        branch=settings.github_branch,
        api_url=settings.github_api_url,
        timeout=settings.github_timeout_seconds,
        transport=transport,
    )
    return GitHubBackend(client, prefix=settings.github_path_prefix, layout=settings.partition_layout)


def build_backend(settings: Settings, transport=None) -> Backend:
    """Pick the configured backend; local backends mirror to GitHub when a token is set."""
    if settings.storage_backend == "github":
        if not settings.github_token:
            raise ValueError("storage_backend=github requires UP_TOK / GITHUB_TOKEN")
        return _github_backend(settings, transport)

    local: Backend
    if settings.storage_backend == "file":
        local = JsonFileBackend(settings.data_file)
    else:
        local = DirectoryTreeBackend(settings.data_dir, layout=settings.partition_layout)

    if settings.github_token:
        return MirroredBackend(local, _github_backend(settings, transport))
    return local
