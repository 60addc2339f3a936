import numpy as np
import pytest

from sam_onnx.entities import (
    EncodedPrompt,
    EncodeResult,
    ImageDimensions,
    PointRole,
    SamPoint,
)
from sam_onnx.errors import PromptValidationError
from sam_onnx.prompts import encode_point_prompts
from sam_onnx.tensors import DECODER_INPUT_NAMES, build_prompt_tensors


def test_build_prompt_tensors_produces_decoder_contract(
    encode_result: EncodeResult,
) -> None:
    # given
    encoded_prompt = encode_point_prompts(
        points=[SamPoint(x=100, y=50, role=PointRole.FOREGROUND)],
        original_size=encode_result.original_size,
    )

    # when
    result = build_prompt_tensors(
        encode_result=encode_result, encoded_prompt=encoded_prompt
    )

    # then
    inputs = result.as_onnx_inputs()
    assert tuple(inputs.keys()) == DECODER_INPUT_NAMES
    assert inputs["image_embeddings"].shape == (1, 256, 64, 64)
    assert np.array_equal(inputs["image_embeddings"], encode_result.embeddings)
    assert inputs["point_coords"].shape == (1, 2, 2)
    assert inputs["point_labels"].shape == (1, 2)
    assert inputs["point_labels"].tolist() == [[1.0, -1.0]]
    assert inputs["mask_input"].shape == (1, 1, 256, 256)
    assert not inputs["mask_input"].any()
    assert inputs["has_mask_input"].tolist() == [0.0]
    assert all(value.dtype == np.float32 for value in inputs.values())


@pytest.mark.parametrize(
    "original_size",
    [
        ImageDimensions(height=480, width=640),
        ImageDimensions(height=684, width=1024),
        ImageDimensions(height=4000, width=3000),
    ],
)
def test_build_prompt_tensors_uses_model_size_as_orig_im_size(
    original_size: ImageDimensions,
) -> None:
    # given
    encode_result = EncodeResult(
        embeddings=np.zeros((1, 256, 64, 64), dtype=np.float32),
        original_size=original_size,
    )
    encoded_prompt = encode_point_prompts(points=[], original_size=original_size)

    # when
    result = build_prompt_tensors(
        encode_result=encode_result, encoded_prompt=encoded_prompt
    )

    # then
    assert result.orig_im_size.tolist() == [1024.0, 684.0]


def test_build_prompt_tensors_when_labels_do_not_match_coordinates(
    encode_result: EncodeResult,
) -> None:
    # given
    encoded_prompt = EncodedPrompt(
        coords=np.zeros((3, 2), dtype=np.float32),
        labels=np.zeros((2,), dtype=np.float32),
    )

    # when
    with pytest.raises(PromptValidationError):
        _ = build_prompt_tensors(
            encode_result=encode_result, encoded_prompt=encoded_prompt
        )


def test_build_prompt_tensors_when_coordinates_have_invalid_shape(
    encode_result: EncodeResult,
) -> None:
    # given
    encoded_prompt = EncodedPrompt(
        coords=np.zeros((3, 3), dtype=np.float32),
        labels=np.zeros((3,), dtype=np.float32),
    )

    # when
    with pytest.raises(PromptValidationError):
        _ = build_prompt_tensors(
            encode_result=encode_result, encoded_prompt=encoded_prompt
        )


def test_build_prompt_tensors_creates_fresh_auxiliary_tensors_per_call(
    encode_result: EncodeResult,
) -> None:
    # given
    encoded_prompt = encode_point_prompts(
        points=[], original_size=encode_result.original_size
    )

    # when
    first = build_prompt_tensors(
        encode_result=encode_result, encoded_prompt=encoded_prompt
    )
    second = build_prompt_tensors(
        encode_result=encode_result, encoded_prompt=encoded_prompt
    )

    # then
    assert first.mask_input is not second.mask_input
    assert first.point_coords is not second.point_coords
