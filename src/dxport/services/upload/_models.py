"""
Models for upload service.
"""

from __future__ import annotations

from pydantic import BaseModel


class UploadResult(BaseModel):
    """Result of uploading one local file."""

    success: bool
    source: str
    object_id: str | None = None
    size: int = 0
    parts_count: int = 0
    elapsed: float = 0.0
    error: str | None = None

    @property
    def speed_mbps(self) -> float:
        """Upload speed in MB/s."""
        if self.elapsed <= 0:
            return 0.0
        return (self.size / 1024 / 1024) / self.elapsed

    def __repr__(self) -> str:
        if self.success:
            size_mb = self.size / 1024 / 1024
            return (
                f"UploadResult(ok, {self.object_id}, {size_mb:.1f}MB, "
                f"{self.parts_count} parts, {self.elapsed:.1f}s)"
            )
        return f"UploadResult(failed: {self.error})"

    def __str__(self) -> str:
        if self.success:
            return f"{self.source} => {self.object_id}"
        return f"{self.source}: {self.error}"
