from unittest import mock

import numpy as np
import pytest

from sam_onnx import onnx
from sam_onnx.errors import InferenceRunError, OutputMissingError
from sam_onnx.onnx import (
    create_session_options,
    get_selected_onnx_execution_providers,
    run_onnx_session,
)
from tests.unit_tests.conftest import FakeInferenceSession


def test_run_onnx_session_returns_outputs_by_name() -> None:
    # given
    session = FakeInferenceSession(
        outputs={"a": np.array([1.0]), "b": np.array([2.0])},
    )

    # when
    result = run_onnx_session(
        session=session,
        inputs={"x": np.zeros(1, dtype=np.float32)},
        output_names=["b", "a"],
    )

    # then
    assert result["a"].tolist() == [1.0]
    assert result["b"].tolist() == [2.0]
    assert session.calls[0]["output_names"] == ["b", "a"]
    assert session.calls[0]["run_options"] is None


def test_run_onnx_session_passes_log_severity_level_to_run_options() -> None:
    # given
    session = FakeInferenceSession(outputs={"a": np.array([1.0])})

    # when
    _ = run_onnx_session(
        session=session,
        inputs={},
        output_names=["a"],
        log_severity_level=1,
    )

    # then
    assert session.calls[0]["run_options"].log_severity_level == 1


def test_run_onnx_session_when_output_not_declared_by_model() -> None:
    # given
    session = FakeInferenceSession(outputs={"a": np.array([1.0])})

    # when
    with pytest.raises(OutputMissingError):
        _ = run_onnx_session(session=session, inputs={}, output_names=["a", "b"])

    # then
    assert session.calls == [], "Expected engine not to be invoked"


def test_run_onnx_session_when_engine_does_not_return_output() -> None:
    # given
    session = FakeInferenceSession(
        outputs={"a": np.array([1.0])},
        declared_outputs=["a", "b"],
    )

    # when
    with pytest.raises(OutputMissingError):
        _ = run_onnx_session(session=session, inputs={}, output_names=["a", "b"])


def test_run_onnx_session_when_engine_fails() -> None:
    # given
    engine_error = RuntimeError("invalid input name: some")
    session = FakeInferenceSession(
        outputs={"a": np.array([1.0])},
        error=engine_error,
    )

    # when
    with pytest.raises(InferenceRunError) as error:
        _ = run_onnx_session(session=session, inputs={}, output_names=["a"])

    # then
    assert error.value.__cause__ is engine_error


def test_create_session_options() -> None:
    # when
    result = create_session_options(
        log_severity_level=2,
        intra_op_num_threads=3,
        model_format_hint="ONNX",
    )

    # then
    assert result.log_severity_level == 2
    assert result.intra_op_num_threads == 3
    assert result.get_session_config_entry("session.load_model_format") == "ONNX"


@mock.patch.object(
    onnx,
    "ONNXRUNTIME_EXECUTION_PROVIDERS",
    ["CUDAExecutionProvider", "CPUExecutionProvider"],
)
@mock.patch.object(onnx.onnxruntime, "get_available_providers")
def test_get_selected_onnx_execution_providers_filters_unavailable_providers(
    get_available_providers_mock: mock.MagicMock,
) -> None:
    # given
    get_available_providers_mock.return_value = ["CPUExecutionProvider"]
    get_selected_onnx_execution_providers.cache_clear()

    # when
    result = get_selected_onnx_execution_providers()
    get_selected_onnx_execution_providers.cache_clear()

    # then
    assert result == ["CPUExecutionProvider"]
