from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

import numpy as np


class ColorFormat(str, Enum):
    RGB = "rgb"
    BGR = "bgr"


@dataclass(frozen=True)
class ImageDimensions:
    height: int
    width: int


# Fixed input resolution of the exported encoder. Shared by coordinate
# transforms, image pre-processing and the `orig_im_size` decoder input.
MODEL_INPUT_SIZE = ImageDimensions(height=684, width=1024)
EMBEDDINGS_SHAPE = (1, 256, 64, 64)
LOW_RES_MASK_SIZE = 256


class PointRole(str, Enum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"


class BoxCorner(str, Enum):
    TOP_LEFT = "top_left"
    BOTTOM_RIGHT = "bottom_right"


@dataclass(frozen=True)
class SamPoint:
    x: float
    y: float
    role: PointRole = PointRole.FOREGROUND


@dataclass(frozen=True)
class SamBoxPoint:
    x: float
    y: float
    corner: BoxCorner


@dataclass(frozen=True)
class EncodedPrompt:
    coords: np.ndarray
    labels: np.ndarray

    def __len__(self) -> int:
        return self.labels.shape[0]


@dataclass(frozen=True)
class EncodeResult:
    """Image embeddings computed once per image and shared by decode calls.

    The embeddings are copied into a read-only array on construction, so any
    number of decode calls may reference them while the source array stays
    free to change.
    """

    embeddings: np.ndarray
    original_size: ImageDimensions
    image_hash: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        embeddings = np.array(self.embeddings, copy=True)
        embeddings.flags.writeable = False
        object.__setattr__(self, "embeddings", embeddings)


@dataclass(frozen=True)
class PromptTensorSet:
    image_embeddings: np.ndarray
    point_coords: np.ndarray
    point_labels: np.ndarray
    mask_input: np.ndarray
    has_mask_input: np.ndarray
    orig_im_size: np.ndarray

    def as_onnx_inputs(self) -> Dict[str, np.ndarray]:
        return {
            "image_embeddings": self.image_embeddings,
            "point_coords": self.point_coords,
            "point_labels": self.point_labels,
            "mask_input": self.mask_input,
            "has_mask_input": self.has_mask_input,
            "orig_im_size": self.orig_im_size,
        }


@dataclass(frozen=True)
class DecodeResult:
    masks: np.ndarray
    iou_predictions: np.ndarray
    low_res_masks: np.ndarray

    def to_binary_masks(self, threshold: float = 0.0) -> np.ndarray:
        return self.masks > threshold
