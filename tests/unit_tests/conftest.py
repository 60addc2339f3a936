from threading import Lock
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional

import numpy as np
import pytest

from sam_onnx.entities import EncodeResult, ImageDimensions
from sam_onnx.sessions import SessionManager


class FakeInferenceSession:

    def __init__(
        self,
        outputs: Dict[str, Optional[np.ndarray]],
        model_path: str = "model.onnx",
        declared_outputs: Optional[List[str]] = None,
        error: Optional[Exception] = None,
        run_callback: Optional[Callable[[], None]] = None,
    ):
        self.outputs = outputs
        self.model_path = model_path
        self.declared_outputs = (
            declared_outputs if declared_outputs is not None else list(outputs.keys())
        )
        self.error = error
        self.run_callback = run_callback
        self.calls = []
        self._calls_lock = Lock()

    def get_outputs(self) -> list:
        return [SimpleNamespace(name=name) for name in self.declared_outputs]

    def run(self, output_names, input_feed, run_options=None) -> list:
        with self._calls_lock:
            self.calls.append(
                {
                    "output_names": output_names,
                    "input_feed": input_feed,
                    "run_options": run_options,
                }
            )
        if self.run_callback is not None:
            self.run_callback()
        if self.error is not None:
            raise self.error
        return [self.outputs.get(name) for name in output_names]


def build_encoder_outputs(generation: int = 1) -> Dict[str, np.ndarray]:
    return {
        "image_embeddings": np.full((1, 256, 64, 64), generation, dtype=np.float32)
    }


def build_decoder_outputs(generation: int = 1) -> Dict[str, np.ndarray]:
    return {
        "masks": np.full((1, 4, 8, 8), generation, dtype=np.float32),
        "iou_predictions": np.full((1, 4), 0.5, dtype=np.float32),
        "low_res_masks": np.full((1, 4, 4, 4), generation, dtype=np.float32),
    }


class FakeSessionFactory:
    """Creates a fresh encoder / decoder pair of fake sessions per build."""

    def __init__(self):
        self.generation = 0
        self.created_sessions = []
        self.received_options = []
        self.received_providers = []
        self.fail_on_generations = set()
        self.decoder_run_callbacks = {}

    def __call__(self, model_path, session_options, execution_providers):
        self.received_options.append(session_options)
        self.received_providers.append(execution_providers)
        if model_path.endswith("encoder.onnx"):
            self.generation += 1
            if self.generation in self.fail_on_generations:
                raise RuntimeError("corrupted model file")
            session = FakeInferenceSession(
                outputs=build_encoder_outputs(self.generation),
                model_path=model_path,
            )
        else:
            session = FakeInferenceSession(
                outputs=build_decoder_outputs(self.generation),
                model_path=model_path,
                run_callback=self.decoder_run_callbacks.get(self.generation),
            )
        self.created_sessions.append(session)
        return session


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def session_manager(session_factory: FakeSessionFactory) -> SessionManager:
    return SessionManager(
        encoder_path="/models/sam/encoder.onnx",
        decoder_path="/models/sam/decoder.onnx",
        execution_providers=["CPUExecutionProvider"],
        session_factory=session_factory,
    )


@pytest.fixture
def initialized_session_manager(session_manager: SessionManager) -> SessionManager:
    session_manager.initialize()
    return session_manager


@pytest.fixture
def encode_result() -> EncodeResult:
    return EncodeResult(
        embeddings=np.ones((1, 256, 64, 64), dtype=np.float32),
        original_size=ImageDimensions(height=480, width=640),
    )
