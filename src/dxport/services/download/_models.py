"""
Models for download service.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

MIB = 1024 * 1024


def _mbps(size: int, seconds: float) -> float:
    return size / MIB / seconds if seconds > 0 else 0.0


class DownloadJob(BaseModel):
    """One remote file to fetch and where to put it."""

    object_id: str
    out_dir: Path
    container_id: str | None = None
    output: str | None = None


class DownloadMetrics(BaseModel):
    """Timing and sizes of one file download."""

    # seconds; total includes describe and descriptor requests
    total_time: float = 0.0
    transfer_time: float = 0.0

    # bytes; remote_size is what describe reported
    remote_size: int = 0
    transferred_size: int = 0

    chunks_count: int = 0

    @property
    def transfer_speed_mbps(self) -> float:
        return _mbps(self.transferred_size, self.transfer_time)

    @property
    def total_speed_mbps(self) -> float:
        return _mbps(self.transferred_size, self.total_time)

    @property
    def overhead_time(self) -> float:
        """Seconds spent on API calls around the body transfer."""
        return max(self.total_time - self.transfer_time, 0.0)

    def summary(self) -> str:
        parts = [
            f"{self.transferred_size:,} bytes in {self.total_time:.1f}s "
            f"({self.total_speed_mbps:.1f} MB/s)",
        ]
        if self.chunks_count:
            parts.append(f"{self.chunks_count} chunks")
        if self.overhead_time:
            parts.append(f"{self.overhead_time:.2f}s api")
        return ", ".join(parts)


class DownloadResult(BaseModel):
    """Outcome of one file download; ``local_path`` is None for stdout."""

    success: bool
    object_id: str
    local_path: Path | None = None
    size: int = 0
    error: str | None = None
    metrics: DownloadMetrics = Field(default_factory=DownloadMetrics)

    def __repr__(self) -> str:
        if self.success:
            return f"DownloadResult(ok, {self.object_id}, {self.metrics.summary()})"
        return f"DownloadResult(failed, {self.object_id}: {self.error})"

    def __str__(self) -> str:
        target = self.local_path or "stdout"
        if self.success:
            return f"{self.object_id} => {target}"
        return f"{self.object_id}: {self.error}"
