"""
This is a definition of public interface of the `sam-onnx-inference` package.
Client code should import only from this module, like this:
```python
from sam_onnx import SegmentAnythingOnnx, SamPoint, PointRole
```
"""
import importlib.metadata as importlib_metadata

try:
    # This will read version from package metadata
    __version__ = importlib_metadata.version("sam-onnx-inference")
except importlib_metadata.PackageNotFoundError:
    __version__ = "development"

from sam_onnx.cache import (
    SamEmbeddingsCache,
    SamEmbeddingsCacheNullObject,
    SamEmbeddingsInMemoryCache,
    compute_image_hash,
)
from sam_onnx.coordinates import to_model_space, to_original_space
from sam_onnx.entities import (
    MODEL_INPUT_SIZE,
    BoxCorner,
    ColorFormat,
    DecodeResult,
    EncodedPrompt,
    EncodeResult,
    ImageDimensions,
    PointRole,
    PromptTensorSet,
    SamBoxPoint,
    SamPoint,
)
from sam_onnx.image_encoder import encode_image
from sam_onnx.mask_decoder import decode_box, decode_points
from sam_onnx.model import SegmentAnythingOnnx
from sam_onnx.prompts import encode_box_prompts, encode_point_prompts
from sam_onnx.sessions import InferenceEnvironment, SessionManager, SessionState
from sam_onnx.tensors import build_prompt_tensors
