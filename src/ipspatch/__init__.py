"""IPS Patcher - apply IPS binary patches to files and streams."""

from .exceptions import (
    FormatError,
    PatchError,
    PreconditionError,
    TruncatedStreamError,
)
from .patching import (
    IpsRecord,
    Patcher,
    PatchFormat,
    PatchResult,
    PatchStats,
    apply_ips_patch,
    apply_patch,
    iter_records,
    try_apply_patch,
)

__all__ = [
    "FormatError",
    "IpsRecord",
    "PatchError",
    "PatchFormat",
    "PatchResult",
    "PatchStats",
    "Patcher",
    "PreconditionError",
    "TruncatedStreamError",
    "apply_ips_patch",
    "apply_patch",
    "iter_records",
    "try_apply_patch",
]
