from typing import List, Sequence

import numpy as np

from sam_onnx.coordinates import to_model_space
from sam_onnx.entities import (
    BoxCorner,
    EncodedPrompt,
    ImageDimensions,
    PointRole,
    SamBoxPoint,
    SamPoint,
)
from sam_onnx.errors import PromptValidationError

FOREGROUND_LABEL = 1.0
BACKGROUND_LABEL = 0.0
PADDING_LABEL = -1.0
BOX_TOP_LEFT_LABEL = 2.0
BOX_BOTTOM_RIGHT_LABEL = 3.0

POINT_ROLE_LABELS = {
    PointRole.FOREGROUND: FOREGROUND_LABEL,
    PointRole.BACKGROUND: BACKGROUND_LABEL,
}
BOX_CORNER_LABELS = {
    BoxCorner.TOP_LEFT: BOX_TOP_LEFT_LABEL,
    BoxCorner.BOTTOM_RIGHT: BOX_BOTTOM_RIGHT_LABEL,
}


def encode_point_prompts(
    points: Sequence[SamPoint],
    original_size: ImageDimensions,
) -> EncodedPrompt:
    """Build decoder coordinates and labels for click prompts.

    Points are transformed into model space and labelled `1.0` (foreground) or
    `0.0` (background). A single `(0, 0)` point labelled `-1.0` is always
    appended - the decoder requires this padding entry whenever no box is
    given, so an empty list still yields a one-element prompt.
    """
    coords: List[List[float]] = []
    labels: List[float] = []
    for point in points:
        if not isinstance(point, SamPoint):
            raise PromptValidationError(
                message=f"Point prompts must be `SamPoint` instances, got {type(point).__name__}.",
            )
        if point.role not in POINT_ROLE_LABELS:
            raise PromptValidationError(
                message=f"Point role must be one of {[role.value for role in PointRole]}, got {point.role!r}.",
            )
        coords.append(list(to_model_space(point.x, point.y, original_size)))
        labels.append(POINT_ROLE_LABELS[point.role])
    coords.append([0.0, 0.0])
    labels.append(PADDING_LABEL)
    return EncodedPrompt(
        coords=np.array(coords, dtype=np.float32).reshape(-1, 2),
        labels=np.array(labels, dtype=np.float32),
    )


def encode_box_prompts(
    box_points: Sequence[SamBoxPoint],
    original_size: ImageDimensions,
) -> EncodedPrompt:
    """Build decoder coordinates and labels for box prompts.

    Every box contributes two consecutive corners, labelled `2.0` (top-left)
    and `3.0` (bottom-right) in the order given. Boxes are concatenated, no
    padding entry is added.
    """
    validate_box_points(box_points=box_points)
    coords = [
        list(to_model_space(point.x, point.y, original_size)) for point in box_points
    ]
    labels = [BOX_CORNER_LABELS[point.corner] for point in box_points]
    return EncodedPrompt(
        coords=np.array(coords, dtype=np.float32).reshape(-1, 2),
        labels=np.array(labels, dtype=np.float32),
    )


def validate_box_points(box_points: Sequence[SamBoxPoint]) -> None:
    if len(box_points) == 0:
        raise PromptValidationError(
            message="Box prompt requires at least one box (top-left and bottom-right corner), got no points.",
        )
    if len(box_points) % 2 != 0:
        raise PromptValidationError(
            message=f"Box prompt requires pairs of corners, got odd number of points: {len(box_points)}.",
        )
    for point in box_points:
        if not isinstance(point, SamBoxPoint):
            raise PromptValidationError(
                message=f"Box prompts must be `SamBoxPoint` instances, got {type(point).__name__}.",
            )
        if point.corner not in BOX_CORNER_LABELS:
            raise PromptValidationError(
                message=f"Box corner must be one of {[corner.value for corner in BoxCorner]}, "
                f"got {point.corner!r}.",
            )
    for box_idx in range(0, len(box_points), 2):
        corners = [box_points[box_idx].corner, box_points[box_idx + 1].corner]
        if set(corners) != {BoxCorner.TOP_LEFT, BoxCorner.BOTTOM_RIGHT}:
            raise PromptValidationError(
                message=f"Box #{box_idx // 2} must consist of one top-left and one bottom-right corner, "
                f"got: {[corner.value for corner in corners]}.",
            )
