import hashlib
from abc import ABC, abstractmethod
from collections import OrderedDict
from threading import Lock
from typing import Optional, Union

import numpy as np
from PIL.Image import Image

from sam_onnx.configuration import SAM_EMBEDDINGS_CACHE_SIZE
from sam_onnx.entities import EncodeResult
from sam_onnx.errors import EnvironmentConfigurationError, ImageEncodingError


class SamEmbeddingsCache(ABC):

    @abstractmethod
    def retrieve_embeddings(self, key: str) -> Optional[EncodeResult]:
        pass

    @abstractmethod
    def save_embeddings(self, key: str, embeddings: EncodeResult) -> None:
        pass


class SamEmbeddingsCacheNullObject(SamEmbeddingsCache):

    def retrieve_embeddings(self, key: str) -> Optional[EncodeResult]:
        pass

    def save_embeddings(self, key: str, embeddings: EncodeResult) -> None:
        pass


class SamEmbeddingsInMemoryCache(SamEmbeddingsCache):

    @classmethod
    def init(
        cls, size_limit: int = SAM_EMBEDDINGS_CACHE_SIZE
    ) -> "SamEmbeddingsInMemoryCache":
        if size_limit < 1:
            raise EnvironmentConfigurationError(
                message=f"In memory cache size for SAM embeddings was set to invalid value: {size_limit}. "
                f"Adjust `SAM_EMBEDDINGS_CACHE_SIZE` to a positive number.",
            )
        return cls(state=OrderedDict(), size_limit=size_limit)

    def __init__(self, state: OrderedDict, size_limit: int):
        self._state = state
        self._size_limit = size_limit
        self._state_lock = Lock()

    def __len__(self) -> int:
        return len(self._state)

    def retrieve_embeddings(self, key: str) -> Optional[EncodeResult]:
        with self._state_lock:
            embeddings = self._state.get(key)
            if embeddings is not None:
                self._state.move_to_end(key)
            return embeddings

    def save_embeddings(self, key: str, embeddings: EncodeResult) -> None:
        with self._state_lock:
            if key in self._state:
                self._state.move_to_end(key)
                return None
            self._state[key] = embeddings
            while len(self._state) > self._size_limit:
                _ = self._state.popitem(last=False)


def compute_image_hash(image: Union[np.ndarray, Image]) -> str:
    if isinstance(image, Image):
        image = np.asarray(image.convert("RGB"))
    if not isinstance(image, np.ndarray):
        raise ImageEncodingError(
            message=f"Cannot compute hash of image with type: {type(image).__name__}.",
        )
    digest = hashlib.sha256()
    digest.update(str(image.shape).encode("utf-8"))
    digest.update(str(image.dtype).encode("utf-8"))
    digest.update(np.ascontiguousarray(image).tobytes())
    return digest.hexdigest()
