from typing import Tuple

from sam_onnx.entities import MODEL_INPUT_SIZE, ImageDimensions


def to_model_space(
    x: float,
    y: float,
    original_size: ImageDimensions,
    model_size: ImageDimensions = MODEL_INPUT_SIZE,
) -> Tuple[float, float]:
    """Scale a point from original image pixels into encoder input pixels.

    Each axis is scaled independently, mirroring the stretch resize applied to
    the image before encoding. No clamping is performed - points outside the
    image stay outside after the transform.

    Args:
        x: Horizontal coordinate in original image pixels.
        y: Vertical coordinate in original image pixels.
        original_size: Dimensions of the image the point refers to.
        model_size: Dimensions of the encoder input, defaults to the fixed
            model resolution.

    Returns:
        Tuple `(x, y)` expressed in model input pixels.
    """
    return (
        x * model_size.width / original_size.width,
        y * model_size.height / original_size.height,
    )


def to_original_space(
    x: float,
    y: float,
    original_size: ImageDimensions,
    model_size: ImageDimensions = MODEL_INPUT_SIZE,
) -> Tuple[float, float]:
    return (
        x * original_size.width / model_size.width,
        y * original_size.height / model_size.height,
    )
