import os

from sam_onnx.utils.environment import (
    get_boolean_from_env,
    get_integer_from_env,
    parse_comma_separated_values,
)

ONNXRUNTIME_EXECUTION_PROVIDERS = parse_comma_separated_values(
    values=os.getenv(
        "ONNXRUNTIME_EXECUTION_PROVIDERS",
        "CUDAExecutionProvider,OpenVINOExecutionProvider,CoreMLExecutionProvider,CPUExecutionProvider",
    )
    .strip("[")
    .strip("]")
)
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
VERBOSE_LOG_LEVEL = os.getenv("VERBOSE_LOG_LEVEL", "INFO")
DISABLE_VERBOSE_LOGGER = get_boolean_from_env(
    variable_name="DISABLE_VERBOSE_LOGGER", default=False
)
# onnxruntime severity: 0 verbose, 1 info, 2 warning, 3 error, 4 fatal
SAM_ONNX_LOG_SEVERITY_LEVEL = get_integer_from_env(
    variable_name="SAM_ONNX_LOG_SEVERITY_LEVEL", default=3
)
SAM_INTRA_OP_NUM_THREADS = get_integer_from_env(
    variable_name="SAM_INTRA_OP_NUM_THREADS", default=4
)
SAM_MAX_INTRA_OP_NUM_THREADS = get_integer_from_env(
    variable_name="SAM_MAX_INTRA_OP_NUM_THREADS", default=16
)
SAM_SERIALIZE_SESSION_RUNS = get_boolean_from_env(
    variable_name="SAM_SERIALIZE_SESSION_RUNS", default=False
)
SAM_EMBEDDINGS_CACHE_SIZE = get_integer_from_env(
    variable_name="SAM_EMBEDDINGS_CACHE_SIZE", default=16
)
SAM_ENCODER_FILE_NAME = os.getenv("SAM_ENCODER_FILE_NAME", "encoder.onnx")
SAM_DECODER_FILE_NAME = os.getenv("SAM_DECODER_FILE_NAME", "decoder.onnx")
SAM_MODEL_FORMAT_HINT = "ONNX"
