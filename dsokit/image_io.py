"""Reading and writing images as MinimalImage objects.

Colour images are held in blue-green-red channel order, both when read and
when written.
"""

from __future__ import annotations

import io
from os import PathLike
from typing import BinaryIO, Union

import numpy as np
from PIL import Image

from dsokit.minimal_image import MinimalImage

PathType = Union[str, "PathLike[str]"]

_SIXTEEN_BIT_MODES = ("I;16", "I;16L", "I;16B", "I;16N")


class ImageReadError(OSError):
    """Raised when an image cannot be read or has the wrong pixel format."""


def _open(source: Union[PathType, BinaryIO], what: str) -> Image.Image:
    try:
        img = Image.open(source)
        img.load()
    except (OSError, ValueError) as exc:
        raise ImageReadError(f"could not read image {what}: {exc}") from exc
    if img.width * img.height == 0:
        raise ImageReadError(f"image {what} is empty")
    return img


def _wrap(arr: np.ndarray) -> MinimalImage:
    h, w = arr.shape[:2]
    return MinimalImage(w, h, np.ascontiguousarray(arr))


def _gray8(img: Image.Image) -> MinimalImage:
    if img.mode != "L":
        img = img.convert("L")
    return _wrap(np.asarray(img, dtype=np.uint8))


def read_image_bw_8u(filename: PathType) -> MinimalImage:
    """Read a file as an 8-bit grayscale image."""
    with _open(filename, str(filename)) as img:
        return _gray8(img)


def read_image_rgb_8u(filename: PathType) -> MinimalImage:
    """Read a file as an 8-bit three-channel image in BGR order."""
    with _open(filename, str(filename)) as img:
        rgb = img if img.mode == "RGB" else img.convert("RGB")
        arr = np.asarray(rgb, dtype=np.uint8)
    return _wrap(arr[:, :, ::-1])


def read_image_bw_16u(filename: PathType) -> MinimalImage:
    """Read a file that must hold a 16-bit grayscale image."""
    with _open(filename, str(filename)) as img:
        mode = img.mode
        arr = np.asarray(img)
    if mode in _SIXTEEN_BIT_MODES:
        return _wrap(arr.astype(np.uint16))
    if mode == "I" and arr.size and arr.min() >= 0 and arr.max() <= 0xFFFF:
        return _wrap(arr.astype(np.uint16))
    raise ImageReadError(
        f"{filename} is not a 16-bit grayscale image (mode {mode})"
    )


def read_stream_bw_8u(data: bytes) -> MinimalImage:
    """Decode an encoded image held in memory as 8-bit grayscale."""
    if not data:
        raise ImageReadError("could not read stream (0 bytes)")
    with _open(io.BytesIO(bytes(data)), f"stream ({len(data)} bytes)") as img:
        return _gray8(img)


def _to_pil(arr: np.ndarray) -> Image.Image:
    if arr.dtype != np.uint8 and arr.dtype != np.uint16:
        arr = np.clip(np.rint(arr.astype(np.float64)), 0, 255).astype(np.uint8)
    if arr.ndim == 2:
        if arr.dtype == np.uint16:
            return Image.fromarray(np.ascontiguousarray(arr))
        return Image.fromarray(np.ascontiguousarray(arr))
    if arr.ndim == 3 and arr.shape[2] == 3:
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        return Image.fromarray(np.ascontiguousarray(arr[:, :, ::-1]))
    raise ValueError(f"cannot write image data of shape {arr.shape}")


def write_image(filename: PathType, img: MinimalImage) -> None:
    """Write an image; the format follows the file extension.

    Float pixels are rounded and saturated to 8 bits; three-channel data is
    taken as BGR.
    """
    arr = np.asarray(img.data)
    _to_pil(arr).save(filename)