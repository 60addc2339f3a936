from time import perf_counter
from typing import Optional, Sequence

from sam_onnx.entities import (
    DecodeResult,
    EncodedPrompt,
    EncodeResult,
    SamBoxPoint,
    SamPoint,
)
from sam_onnx.logger import verbose_debug
from sam_onnx.prompts import encode_box_prompts, encode_point_prompts
from sam_onnx.sessions import SessionManager
from sam_onnx.tensors import (
    DECODER_OUTPUT_NAMES,
    IOU_PREDICTIONS_OUTPUT_NAME,
    LOW_RES_MASKS_OUTPUT_NAME,
    MASKS_OUTPUT_NAME,
    build_prompt_tensors,
)


def decode_points(
    session_manager: SessionManager,
    encode_result: EncodeResult,
    points: Sequence[SamPoint],
    log_severity_level: Optional[int] = None,
) -> DecodeResult:
    session_manager.ensure_loaded()
    encoded_prompt = encode_point_prompts(
        points=points, original_size=encode_result.original_size
    )
    return decode_prompt(
        session_manager=session_manager,
        encode_result=encode_result,
        encoded_prompt=encoded_prompt,
        log_severity_level=log_severity_level,
    )


def decode_box(
    session_manager: SessionManager,
    encode_result: EncodeResult,
    box_points: Sequence[SamBoxPoint],
    log_severity_level: Optional[int] = None,
) -> DecodeResult:
    session_manager.ensure_loaded()
    encoded_prompt = encode_box_prompts(
        box_points=box_points, original_size=encode_result.original_size
    )
    return decode_prompt(
        session_manager=session_manager,
        encode_result=encode_result,
        encoded_prompt=encoded_prompt,
        log_severity_level=log_severity_level,
    )


def decode_prompt(
    session_manager: SessionManager,
    encode_result: EncodeResult,
    encoded_prompt: EncodedPrompt,
    log_severity_level: Optional[int] = None,
) -> DecodeResult:
    """Run the mask decoder for an already encoded prompt.

    All tensors are built per call, the shared `EncodeResult` is only read.
    Either all three decoder outputs are returned or an error is raised.
    """
    session_manager.ensure_loaded()
    prompt_tensors = build_prompt_tensors(
        encode_result=encode_result, encoded_prompt=encoded_prompt
    )
    start = perf_counter()
    outputs = session_manager.run_decoder(
        inputs=prompt_tensors.as_onnx_inputs(),
        output_names=DECODER_OUTPUT_NAMES,
        log_severity_level=log_severity_level,
    )
    verbose_debug(
        f"SAM mask decoding of {len(encoded_prompt)} prompt points took {perf_counter() - start:.3f}s"
    )
    return DecodeResult(
        masks=outputs[MASKS_OUTPUT_NAME],
        iou_predictions=outputs[IOU_PREDICTIONS_OUTPUT_NAME],
        low_res_masks=outputs[LOW_RES_MASKS_OUTPUT_NAME],
    )
