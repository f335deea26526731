"""Resampling and float conversion kernels."""
from __future__ import annotations

import cv2
import numpy as np

from image_steps.data.members import FloatsPayload, image_size

CHANNEL_MODES = ("Interleaved", "Planar")
CHANNEL_ORDERS = ("RGB", "BGR", "RGBA", "BGRA", "Mono")
SCALE_FUNCTIONS = ("Default", "Custom")

_INTERPOLATION = {
    "Default": cv2.INTER_LINEAR,
    "Custom": cv2.INTER_AREA,
}

_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def scale(image: np.ndarray, width: int, height: int, function: str = "Default") -> np.ndarray:
    """Resize ``image`` to ``width`` x ``height``."""

    if image.size == 0:
        return image.copy()
    interpolation = _INTERPOLATION.get(function, cv2.INTER_LINEAR)
    return cv2.resize(image, (width, height), interpolation=interpolation)


def _ordered_channels(pixels: np.ndarray, channel_order: str) -> np.ndarray:
    if pixels.ndim == 2:
        pixels = pixels[..., np.newaxis]
    rgb = pixels[..., :3] if pixels.shape[2] >= 3 else np.repeat(pixels[..., :1], 3, axis=2)
    if pixels.shape[2] == 4:
        alpha = pixels[..., 3:4]
    else:
        alpha = np.ones(pixels.shape[:2] + (1,), dtype=np.float32)

    if channel_order == "Mono":
        return (rgb @ _LUMA)[..., np.newaxis]
    if channel_order == "BGR":
        return rgb[..., ::-1]
    if channel_order == "RGBA":
        return np.concatenate([rgb, alpha], axis=2)
    if channel_order == "BGRA":
        return np.concatenate([rgb[..., ::-1], alpha], axis=2)
    return rgb


def to_float(image: np.ndarray, channel_mode: str, channel_order: str) -> FloatsPayload:
    """Convert an RGB(A) ``uint8`` image into normalised ``float32`` values.

    ``Interleaved`` stores channels pixel by pixel, ``Planar`` stores one
    full plane per channel.
    """

    width, height = image_size(image)
    pixels = np.asarray(image, dtype=np.float32) / 255.0
    ordered = _ordered_channels(pixels, channel_order).astype(np.float32)
    channels = int(ordered.shape[2])

    if channel_mode == "Planar":
        data = np.ascontiguousarray(ordered.transpose(2, 0, 1)).reshape(-1)
    else:
        data = ordered.reshape(-1)

    return FloatsPayload(
        data=data,
        width=width,
        height=height,
        channels=channels,
        channel_mode=channel_mode,
        channel_order=channel_order,
    )
