"""Per-frame records: an exposed image and the shell kept for every tracked frame."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from dsokit.numtypes import AffLight


class ImageAndExposure:
    """Irradiance image (values between 0 and 256) with its exposure time in ms."""

    def __init__(self, w: int, h: int, timestamp: float = 0.0) -> None:
        self.w = int(w)
        self.h = int(h)
        self.timestamp = float(timestamp)
        self.image = np.zeros((self.h, self.w), dtype=np.float32)
        self.exposure_time = 1.0

    def copy_meta_to(self, other: "ImageAndExposure") -> None:
        """Give ``other`` this image's exposure time."""
        other.exposure_time = self.exposure_time

    def deep_copy(self) -> "ImageAndExposure":
        """Return a copy with its own pixel buffer."""
        img = ImageAndExposure(self.w, self.h, self.timestamp)
        img.exposure_time = self.exposure_time
        img.image = self.image.copy()
        return img


def _identity_pose() -> np.ndarray:
    return np.eye(4)


@dataclass(eq=False)
class FrameShell:
    """Minimal record kept for each tracked frame; poses are 4x4 matrices."""

    id: int = 0
    incoming_id: int = 0
    timestamp: float = 0.0
    cam_to_tracking_ref: np.ndarray = field(default_factory=_identity_pose)
    tracking_ref: Optional["FrameShell"] = None
    cam_to_world: np.ndarray = field(default_factory=_identity_pose)
    aff_g2l: AffLight = field(default_factory=AffLight)
    pose_valid: bool = True
    statistics_outlier_res_on_this: int = 0
    statistics_good_res_on_this: int = 0
    marginalized_at: int = -1
    moved_by_opt: float = 0.0