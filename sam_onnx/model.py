from typing import Optional, Sequence

from sam_onnx.cache import (
    SamEmbeddingsCache,
    SamEmbeddingsCacheNullObject,
    compute_image_hash,
)
from sam_onnx.configuration import (
    SAM_DECODER_FILE_NAME,
    SAM_ENCODER_FILE_NAME,
    SAM_INTRA_OP_NUM_THREADS,
    SAM_ONNX_LOG_SEVERITY_LEVEL,
    SAM_SERIALIZE_SESSION_RUNS,
)
from sam_onnx.entities import (
    ColorFormat,
    DecodeResult,
    EncodeResult,
    SamBoxPoint,
    SamPoint,
)
from sam_onnx.image_encoder import ImageInput, encode_image
from sam_onnx.mask_decoder import decode_box, decode_points
from sam_onnx.model_packages import get_model_package_contents
from sam_onnx.sessions import ExecutionProviders, SessionFactory, SessionManager


class SegmentAnythingOnnx:

    @classmethod
    def from_pretrained(
        cls,
        model_name_or_path: str,
        onnx_execution_providers: Optional[ExecutionProviders] = None,
        log_severity_level: int = SAM_ONNX_LOG_SEVERITY_LEVEL,
        intra_op_num_threads: int = SAM_INTRA_OP_NUM_THREADS,
        serialize_session_runs: bool = SAM_SERIALIZE_SESSION_RUNS,
        embeddings_cache: Optional[SamEmbeddingsCache] = None,
        session_factory: Optional[SessionFactory] = None,
        **kwargs,
    ) -> "SegmentAnythingOnnx":
        if embeddings_cache is None:
            embeddings_cache = SamEmbeddingsCacheNullObject()
        model_package_content = get_model_package_contents(
            model_package_dir=model_name_or_path,
            elements=[
                SAM_ENCODER_FILE_NAME,
                SAM_DECODER_FILE_NAME,
            ],
        )
        session_manager = SessionManager(
            encoder_path=model_package_content[SAM_ENCODER_FILE_NAME],
            decoder_path=model_package_content[SAM_DECODER_FILE_NAME],
            execution_providers=onnx_execution_providers,
            log_severity_level=log_severity_level,
            intra_op_num_threads=intra_op_num_threads,
            serialize_session_runs=serialize_session_runs,
            session_factory=session_factory,
        )
        session_manager.initialize()
        return cls(
            session_manager=session_manager,
            embeddings_cache=embeddings_cache,
        )

    def __init__(
        self,
        session_manager: SessionManager,
        embeddings_cache: SamEmbeddingsCache,
    ):
        self._session_manager = session_manager
        self._embeddings_cache = embeddings_cache

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    def embed_image(
        self,
        image: ImageInput,
        input_color_format: Optional[ColorFormat] = None,
        use_embeddings_cache: bool = True,
        log_severity_level: Optional[int] = None,
    ) -> EncodeResult:
        if not use_embeddings_cache:
            return encode_image(
                session_manager=self._session_manager,
                image=image,
                input_color_format=input_color_format,
                log_severity_level=log_severity_level,
            )
        color_format = input_color_format or ColorFormat.RGB
        image_hash = (
            f"{compute_image_hash(image=image)}-{color_format.value}"
            f"-v{self._session_manager.version}"
        )
        cached = self._embeddings_cache.retrieve_embeddings(key=image_hash)
        if cached is not None:
            return cached
        encode_result = encode_image(
            session_manager=self._session_manager,
            image=image,
            input_color_format=input_color_format,
            image_hash=image_hash,
            log_severity_level=log_severity_level,
        )
        self._embeddings_cache.save_embeddings(key=image_hash, embeddings=encode_result)
        return encode_result

    def segment_with_points(
        self,
        encode_result: EncodeResult,
        points: Sequence[SamPoint],
        log_severity_level: Optional[int] = None,
    ) -> DecodeResult:
        return decode_points(
            session_manager=self._session_manager,
            encode_result=encode_result,
            points=points,
            log_severity_level=log_severity_level,
        )

    def segment_with_box(
        self,
        encode_result: EncodeResult,
        box_points: Sequence[SamBoxPoint],
        log_severity_level: Optional[int] = None,
    ) -> DecodeResult:
        return decode_box(
            session_manager=self._session_manager,
            encode_result=encode_result,
            box_points=box_points,
            log_severity_level=log_severity_level,
        )

    def reload(self) -> None:
        self._session_manager.reload()

    def close(self) -> None:
        self._session_manager.close()
