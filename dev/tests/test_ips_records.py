from __future__ import annotations

import io

import pytest

from ipspatch.exceptions import FormatError, TruncatedStreamError
from ipspatch.patching.ips import IpsRecord, iter_records


def test_iter_records_lists_literal_and_fill(ips) -> None:
    patch = ips.build(ips.literal(0x123456, b"\x01\x02\x03"), ips.rle(0x10, 300, 0xAB))

    records = list(iter_records(io.BytesIO(patch)))

    assert records == [
        IpsRecord(offset=0x123456, length=3),
        IpsRecord(offset=0x10, length=0, repeat_count=300, fill_value=0xAB),
    ]
    assert not records[0].is_rle
    assert records[0].end == 0x123459
    assert records[1].is_rle
    assert records[1].size == 300


def test_iter_records_empty_patch(ips) -> None:
    assert list(iter_records(io.BytesIO(ips.build()))) == []


def test_iter_records_skips_large_literal_in_chunks(ips) -> None:
    data = b"\x5A" * 10_000
    patch = ips.build(ips.literal(0, data), ips.literal(20_000, b"\x01"))

    records = list(iter_records(io.BytesIO(patch), chunk_size=256))

    assert [r.offset for r in records] == [0, 20_000]
    assert records[0].size == 10_000


def test_iter_records_validates_header_before_yielding() -> None:
    with pytest.raises(FormatError, match="bad header"):
        next(iter_records(io.BytesIO(b"IPS32EOF")))


def test_iter_records_reports_truncation(ips) -> None:
    patch = b"PATCH" + ips.literal(0, b"\x01") + (5).to_bytes(3, "big") + (40).to_bytes(2, "big") + b"\x00" * 4

    records = iter_records(io.BytesIO(patch))
    assert next(records).offset == 0
    with pytest.raises(TruncatedStreamError):
        next(records)


def test_iter_records_validates_trailer(ips) -> None:
    patch = b"PATCH" + ips.literal(0, b"\x01") + b"END"
    with pytest.raises(FormatError, match="missing trailer"):
        list(iter_records(io.BytesIO(patch)))
