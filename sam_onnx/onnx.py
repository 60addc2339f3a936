from functools import cache
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from sam_onnx.configuration import ONNXRUNTIME_EXECUTION_PROVIDERS
from sam_onnx.errors import (
    InferenceRunError,
    MissingDependencyError,
    OutputMissingError,
)

try:
    import onnxruntime
except ImportError as import_error:
    raise MissingDependencyError(
        message="Running SAM with ONNX backend requires onnxruntime installation. Install `onnxruntime` "
        "(CPU) or `onnxruntime-gpu` (CUDA) matching your environment.",
    ) from import_error


@cache
def get_selected_onnx_execution_providers() -> List[str]:
    """Get the list of ONNX execution providers that are both requested and available.

    Requested providers come from the `ONNXRUNTIME_EXECUTION_PROVIDERS` environment
    variable and are filtered against `onnxruntime.get_available_providers()`.
    The result is cached for the lifetime of the process.
    """
    available_providers = set(onnxruntime.get_available_providers())
    return [ep for ep in ONNXRUNTIME_EXECUTION_PROVIDERS if ep in available_providers]


def create_session_options(
    log_severity_level: int,
    intra_op_num_threads: int,
    model_format_hint: str,
) -> onnxruntime.SessionOptions:
    session_options = onnxruntime.SessionOptions()
    session_options.log_severity_level = log_severity_level
    session_options.intra_op_num_threads = intra_op_num_threads
    session_options.add_session_config_entry(
        "session.load_model_format", model_format_hint
    )
    return session_options


def create_run_options(
    log_severity_level: Optional[int],
) -> Optional[onnxruntime.RunOptions]:
    if log_severity_level is None:
        return None
    run_options = onnxruntime.RunOptions()
    run_options.log_severity_level = log_severity_level
    return run_options


def run_onnx_session(
    session: Any,
    inputs: Dict[str, np.ndarray],
    output_names: Sequence[str],
    log_severity_level: Optional[int] = None,
) -> Dict[str, np.ndarray]:
    """Execute a forward pass and return requested outputs keyed by name.

    Args:
        session: `onnxruntime.InferenceSession` (or an object exposing the same
            `get_outputs()` / `run(...)` interface).
        inputs: Mapping of network input names to arrays.
        output_names: Names of outputs that must be present in the result.
        log_severity_level: Optional per-call onnxruntime log severity.

    Returns:
        Dictionary with exactly the requested output names.

    Raises:
        OutputMissingError: When the session does not declare, or does not
            return, one of the requested outputs.
        InferenceRunError: When the engine rejects inputs or fails while running.
    """
    declared_outputs = {output.name for output in session.get_outputs()}
    missing_outputs = [name for name in output_names if name not in declared_outputs]
    if missing_outputs:
        raise OutputMissingError(
            message=f"Model does not declare expected outputs: {missing_outputs}. Declared outputs: "
            f"{sorted(declared_outputs)}. This indicates a model exported with a different tensor contract.",
        )
    try:
        results = session.run(
            list(output_names), inputs, create_run_options(log_severity_level)
        )
    except Exception as error:
        raise InferenceRunError(
            message=f"Inference engine failed to run the model: {error}",
        ) from error
    if results is None or len(results) != len(output_names):
        raise OutputMissingError(
            message=f"Inference engine returned {0 if results is None else len(results)} outputs while "
            f"{len(output_names)} were requested: {list(output_names)}.",
        )
    named_results = dict(zip(output_names, results))
    for name, value in named_results.items():
        if value is None:
            raise OutputMissingError(
                message=f"Inference engine response lacks expected output `{name}`.",
            )
    return named_results


def create_inference_session(
    model_path: str,
    session_options: onnxruntime.SessionOptions,
    execution_providers: List[Union[str, tuple]],
) -> onnxruntime.InferenceSession:
    return onnxruntime.InferenceSession(
        path_or_bytes=model_path,
        sess_options=session_options,
        providers=execution_providers,
    )


def set_default_log_severity(log_severity_level: int) -> None:
    onnxruntime.set_default_logger_severity(log_severity_level)
