"""IPS Patcher - file-level API.

Opens the patch and target files, hands the streams to the IPS applier and
reports the outcome as a PatchResult.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Union

from ..config.models import PatcherConfig
from ..exceptions import PatchError
from .ips import IPS_HEADER, apply_patch

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PatchFormat(Enum):
    """Supported patch formats."""

    IPS = auto()  # International Patching System
    UNKNOWN = auto()


@dataclass
class PatchResult:
    """Result of a patch operation."""

    success: bool
    output_path: Optional[str] = None
    original_size: int = 0
    patched_size: int = 0
    format_used: PatchFormat = PatchFormat.UNKNOWN
    records_applied: int = 0
    bytes_written: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


class Patcher:
    """Applies IPS patches to files."""

    IPS_MAGIC = IPS_HEADER

    def __init__(self, config: Optional[PatcherConfig] = None):
        """Initialize patcher.

        Args:
            config: Patcher settings (defaults when omitted)
        """
        self.config = config or PatcherConfig()

    def _format_from_header(self, patch_path: PathLike) -> PatchFormat:
        with open(patch_path, "rb") as f:
            header = f.read(len(self.IPS_MAGIC))
        if header == self.IPS_MAGIC:
            return PatchFormat.IPS
        return PatchFormat.UNKNOWN

    def detect_format(self, patch_path: PathLike) -> PatchFormat:
        """Detect patch format from file.

        Args:
            patch_path: Path to patch file

        Returns:
            Detected PatchFormat (UNKNOWN when the file cannot be read)
        """
        try:
            return self._format_from_header(patch_path)
        except OSError as exc:
            logger.warning("Cannot read patch %s: %s", patch_path, exc)
            return PatchFormat.UNKNOWN

    def apply(
        self,
        target_path: PathLike,
        patch_path: PathLike,
        output_path: Optional[PathLike] = None,
    ) -> PatchResult:
        """Apply a patch to a file.

        Args:
            target_path: File to patch
            patch_path: Path to patch file
            output_path: Write the patched copy here instead of modifying
                target_path in place

        Returns:
            PatchResult with status and details
        """
        try:
            patch_format = self._format_from_header(patch_path)
        except OSError as e:
            logger.error("Cannot read patch %s: %s", patch_path, e)
            return PatchResult(
                success=False,
                error=str(e),
                error_code="FILE_OP_ERROR",
            )

        if patch_format == PatchFormat.UNKNOWN:
            return PatchResult(
                success=False,
                error=f"Unknown patch format: {patch_path}",
                error_code="FORMAT_ERROR",
            )

        target = Path(target_path)
        destination = Path(output_path) if output_path is not None else target

        try:
            original_size = target.stat().st_size
            if destination.resolve() != target.resolve():
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(target, destination)

            with open(patch_path, "rb") as source, open(destination, "r+b") as out:
                stats = apply_patch(source, out, chunk_size=self.config.chunk_size)

            patched_size = destination.stat().st_size

        except PatchError as e:
            logger.error("Patching %s failed: %s [%s]", destination, e, e.error_code)
            return PatchResult(
                success=False,
                output_path=str(destination),
                format_used=patch_format,
                error=str(e),
                error_code=e.error_code,
            )
        except OSError as e:
            logger.error("Patching %s failed: %s", destination, e)
            return PatchResult(
                success=False,
                output_path=str(destination),
                format_used=patch_format,
                error=str(e),
                error_code="FILE_OP_ERROR",
            )

        logger.info("Patched %s (%d -> %d bytes)", destination, original_size, patched_size)
        return PatchResult(
            success=True,
            output_path=str(destination),
            original_size=original_size,
            patched_size=patched_size,
            format_used=patch_format,
            records_applied=stats.records,
            bytes_written=stats.bytes_written,
        )


# Convenience functions
def apply_ips_patch(
    target_path: PathLike,
    patch_path: PathLike,
    output_path: Optional[PathLike] = None,
    *,
    config: Optional[PatcherConfig] = None,
) -> PatchResult:
    """Apply IPS patch to a file."""
    patcher = Patcher(config)
    return patcher.apply(target_path, patch_path, output_path)
