from time import perf_counter
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL.Image import Image

from sam_onnx.entities import (
    EMBEDDINGS_SHAPE,
    MODEL_INPUT_SIZE,
    ColorFormat,
    EncodeResult,
    ImageDimensions,
)
from sam_onnx.errors import ImageEncodingError
from sam_onnx.logger import verbose_debug
from sam_onnx.sessions import SessionManager
from sam_onnx.tensors import ENCODER_INPUT_NAME, ENCODER_OUTPUT_NAME

ImageInput = Union[np.ndarray, Image]


def encode_image(
    session_manager: SessionManager,
    image: ImageInput,
    input_color_format: Optional[ColorFormat] = None,
    image_hash: Optional[str] = None,
    log_severity_level: Optional[int] = None,
) -> EncodeResult:
    """Compute image embeddings with a single encoder pass.

    This is the expensive step of the pipeline - run it once per image and
    reuse the returned `EncodeResult` for any number of decode calls.

    Args:
        session_manager: Manager holding loaded encoder / decoder sessions.
        image: RGB (default) or BGR numpy image of shape (H, W, 3), or PIL image.
        input_color_format: Channel order of numpy input, ignored for PIL images.
        image_hash: Optional identifier stored along the embeddings.
        log_severity_level: Optional onnxruntime log severity for this call.

    Returns:
        `EncodeResult` holding embeddings and dimensions of the image before resize.

    Raises:
        SessionNotLoadedError: When sessions were not initialized.
        ImageEncodingError: When the image cannot be converted into encoder input.
        InferenceRunError: When the encoder fails.
        OutputMissingError: When the encoder does not return `image_embeddings`.
    """
    session_manager.ensure_loaded()
    model_input, original_size = pre_process_image(
        image=image, input_color_format=input_color_format
    )
    start = perf_counter()
    outputs = session_manager.run_encoder(
        inputs={ENCODER_INPUT_NAME: model_input},
        output_names=[ENCODER_OUTPUT_NAME],
        log_severity_level=log_severity_level,
    )
    verbose_debug(f"SAM image encoding took {perf_counter() - start:.3f}s")
    embeddings = np.asarray(outputs[ENCODER_OUTPUT_NAME], dtype=np.float32)
    if embeddings.ndim == len(EMBEDDINGS_SHAPE) - 1:
        embeddings = np.expand_dims(embeddings, axis=0)
    return EncodeResult(
        embeddings=embeddings,
        original_size=original_size,
        image_hash=image_hash,
    )


def pre_process_image(
    image: ImageInput,
    input_color_format: Optional[ColorFormat] = None,
) -> Tuple[np.ndarray, ImageDimensions]:
    if isinstance(image, Image):
        image = np.asarray(image.convert("RGB"))
        input_color_format = ColorFormat.RGB
    if not isinstance(image, np.ndarray):
        raise ImageEncodingError(
            message=f"Unsupported image type: {type(image).__name__}. Expected numpy array or PIL image.",
        )
    if image.ndim != 3 or image.shape[2] != 3:
        raise ImageEncodingError(
            message=f"Expected image of shape (H, W, 3), got {image.shape}.",
        )
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ImageEncodingError(
            message=f"Cannot encode empty image of shape {image.shape}.",
        )
    original_size = ImageDimensions(height=image.shape[0], width=image.shape[1])
    if input_color_format is ColorFormat.BGR:
        image = image[:, :, ::-1]
    try:
        resized_image = cv2.resize(
            np.ascontiguousarray(image),
            (MODEL_INPUT_SIZE.width, MODEL_INPUT_SIZE.height),
        )
    except cv2.error as error:
        raise ImageEncodingError(
            message=f"Could not resize image to model input size: {error}",
        ) from error
    return resized_image.astype(np.float32), original_size
