import numpy as np

from sam_onnx.entities import (
    LOW_RES_MASK_SIZE,
    MODEL_INPUT_SIZE,
    EncodedPrompt,
    EncodeResult,
    PromptTensorSet,
)
from sam_onnx.errors import PromptValidationError

ENCODER_INPUT_NAME = "input_image"
ENCODER_OUTPUT_NAME = "image_embeddings"
DECODER_INPUT_NAMES = (
    "image_embeddings",
    "point_coords",
    "point_labels",
    "mask_input",
    "has_mask_input",
    "orig_im_size",
)
MASKS_OUTPUT_NAME = "masks"
IOU_PREDICTIONS_OUTPUT_NAME = "iou_predictions"
LOW_RES_MASKS_OUTPUT_NAME = "low_res_masks"
DECODER_OUTPUT_NAMES = (
    MASKS_OUTPUT_NAME,
    IOU_PREDICTIONS_OUTPUT_NAME,
    LOW_RES_MASKS_OUTPUT_NAME,
)


def build_prompt_tensors(
    encode_result: EncodeResult,
    encoded_prompt: EncodedPrompt,
) -> PromptTensorSet:
    """Package embeddings and prompt arrays into the decoder input set.

    `orig_im_size` carries the fixed model input size rather than the size of
    the original image: masks are upscaled by the decoder into the model
    coordinate frame, which is what the exported network expects.
    """
    coords = encoded_prompt.coords
    labels = encoded_prompt.labels
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise PromptValidationError(
            message=f"Prompt coordinates must have shape [N, 2], got {list(coords.shape)}.",
        )
    if labels.ndim != 1 or labels.shape[0] != coords.shape[0]:
        raise PromptValidationError(
            message=f"Prompt labels must have shape [{coords.shape[0]}] to match coordinates, "
            f"got {list(labels.shape)}.",
        )
    return PromptTensorSet(
        image_embeddings=encode_result.embeddings.astype(np.float32, copy=False),
        point_coords=np.expand_dims(coords.astype(np.float32), axis=0),
        point_labels=np.expand_dims(labels.astype(np.float32), axis=0),
        mask_input=np.zeros(
            (1, 1, LOW_RES_MASK_SIZE, LOW_RES_MASK_SIZE), dtype=np.float32
        ),
        has_mask_input=np.zeros(1, dtype=np.float32),
        orig_im_size=np.array(
            [MODEL_INPUT_SIZE.width, MODEL_INPUT_SIZE.height], dtype=np.float32
        ),
    )
