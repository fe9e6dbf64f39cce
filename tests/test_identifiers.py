from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from userstore.identifiers import UUIDv7Generator, uuid7_timestamp


def test_generated_ids_are_version_seven() -> None:
    value = uuid.UUID(UUIDv7Generator().generate())

    assert value.version == 7
    assert value.variant == uuid.RFC_4122


def test_ids_are_unique_and_lexically_ordered() -> None:
    generator = UUIDv7Generator()
    ids = [generator.generate() for _ in range(2000)]

    assert len(set(ids)) == len(ids)
    assert ids == sorted(ids)


def test_ids_stay_ordered_when_clock_stalls(monkeypatch: pytest.MonkeyPatch) -> None:
    generator = UUIDv7Generator()
    monkeypatch.setattr(generator, "_current_millis", lambda: 1_700_000_000_000)

    ids = [generator.generate() for _ in range(5000)]

    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    # The counter overflowed at least once, pushing the timestamp forward.
    assert uuid7_timestamp(ids[0]) == 1_700_000_000_000
    assert uuid7_timestamp(ids[-1]) > 1_700_000_000_000


def test_ids_stay_ordered_when_clock_goes_backwards(monkeypatch: pytest.MonkeyPatch) -> None:
    generator = UUIDv7Generator()
    readings = iter([1_700_000_000_500, 1_700_000_000_100, 1_700_000_000_200])
    monkeypatch.setattr(generator, "_current_millis", lambda: next(readings))

    ids = [generator.generate() for _ in range(3)]

    assert ids == sorted(ids)
    assert {uuid7_timestamp(value) for value in ids} == {1_700_000_000_500}


def test_timestamp_matches_wall_clock() -> None:
    generator = UUIDv7Generator()
    before = generator._current_millis()
    value = generator.generate()
    after = generator._current_millis()

    assert before <= uuid7_timestamp(value) <= after


def test_uuid7_timestamp_rejects_other_versions() -> None:
    with pytest.raises(ValueError):
        uuid7_timestamp(uuid.uuid4())


def test_concurrent_generation_is_unique() -> None:
    generator = UUIDv7Generator()

    def batch(_: int) -> list[str]:
        return [generator.generate() for _ in range(500)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = [value for chunk in pool.map(batch, range(8)) for value in chunk]

    assert len(ids) == 4000
    assert len(set(ids)) == 4000
