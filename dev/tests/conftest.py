from __future__ import annotations

import logging

import pytest


class IpsBuilder:
    """Encodes IPS records for tests."""

    @staticmethod
    def literal(offset: int, data: bytes) -> bytes:
        return offset.to_bytes(3, "big") + len(data).to_bytes(2, "big") + data

    @staticmethod
    def rle(offset: int, count: int, value: int) -> bytes:
        return offset.to_bytes(3, "big") + b"\x00\x00" + count.to_bytes(2, "big") + bytes([value])

    @staticmethod
    def build(*records: bytes) -> bytes:
        return b"PATCH" + b"".join(records) + b"EOF"


@pytest.fixture
def ips() -> type[IpsBuilder]:
    return IpsBuilder


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by setup_logging so captured streams don't leak between tests."""
    yield
    logger = logging.getLogger("ipspatch")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
