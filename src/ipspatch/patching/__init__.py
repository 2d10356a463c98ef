"""Patch application module.

- ips: stream-level IPS decoder and applier
- patcher: file-level API returning PatchResult
"""

from .ips import (
    IpsRecord,
    PatchStats,
    apply_patch,
    iter_records,
    read_u16_be,
    read_u24_be,
    try_apply_patch,
)
from .patcher import (
    Patcher,
    PatchFormat,
    PatchResult,
    apply_ips_patch,
)

__all__ = [
    # stream level
    "IpsRecord",
    "PatchStats",
    "apply_patch",
    "iter_records",
    "read_u16_be",
    "read_u24_be",
    "try_apply_patch",
    # file level
    "Patcher",
    "PatchFormat",
    "PatchResult",
    "apply_ips_patch",
]
