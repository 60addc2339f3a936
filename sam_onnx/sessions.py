from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from threading import Condition, Lock
from time import perf_counter
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence, Union

import numpy as np

from sam_onnx.configuration import (
    SAM_INTRA_OP_NUM_THREADS,
    SAM_MAX_INTRA_OP_NUM_THREADS,
    SAM_MODEL_FORMAT_HINT,
    SAM_ONNX_LOG_SEVERITY_LEVEL,
    SAM_SERIALIZE_SESSION_RUNS,
)
from sam_onnx.errors import (
    EnvironmentConfigurationError,
    ModelLoadingError,
    SessionNotLoadedError,
    SessionStateError,
)
from sam_onnx.logger import LOGGER, verbose_debug, verbose_info
from sam_onnx.onnx import (
    create_inference_session,
    create_session_options,
    get_selected_onnx_execution_providers,
    run_onnx_session,
    set_default_log_severity,
)

ExecutionProviders = List[Union[str, tuple]]
SessionFactory = Callable[[str, Any, ExecutionProviders], Any]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RELOADING = "reloading"


@dataclass(frozen=True)
class InferenceEnvironment:
    execution_providers: ExecutionProviders
    log_severity_level: int
    intra_op_num_threads: int
    model_format_hint: str

    @classmethod
    def create(
        cls,
        execution_providers: Optional[ExecutionProviders] = None,
        log_severity_level: int = SAM_ONNX_LOG_SEVERITY_LEVEL,
        intra_op_num_threads: int = SAM_INTRA_OP_NUM_THREADS,
    ) -> "InferenceEnvironment":
        if execution_providers is None:
            execution_providers = get_selected_onnx_execution_providers()
        if not execution_providers:
            raise EnvironmentConfigurationError(
                message="Could not initialize SAM sessions - ONNX backend requires execution provider to "
                "be specified - explicitly or via env variable `ONNXRUNTIME_EXECUTION_PROVIDERS`.",
            )
        if not 0 <= log_severity_level <= 4:
            raise EnvironmentConfigurationError(
                message=f"ONNX log severity level must be in range [0, 4], got {log_severity_level}.",
            )
        if not 1 <= intra_op_num_threads <= SAM_MAX_INTRA_OP_NUM_THREADS:
            raise EnvironmentConfigurationError(
                message=f"Number of intra-op threads must be in range [1, {SAM_MAX_INTRA_OP_NUM_THREADS}], "
                f"got {intra_op_num_threads}. Adjust `SAM_INTRA_OP_NUM_THREADS` or "
                f"`SAM_MAX_INTRA_OP_NUM_THREADS`.",
            )
        set_default_log_severity(log_severity_level)
        return cls(
            execution_providers=list(execution_providers),
            log_severity_level=log_severity_level,
            intra_op_num_threads=intra_op_num_threads,
            model_format_hint=SAM_MODEL_FORMAT_HINT,
        )

    def session_options(self) -> Any:
        return create_session_options(
            log_severity_level=self.log_severity_level,
            intra_op_num_threads=self.intra_op_num_threads,
            model_format_hint=self.model_format_hint,
        )


@dataclass(frozen=True)
class SessionHandles:
    encoder: Any
    decoder: Any
    version: int


class SessionManager:
    """Owns the encoder and decoder inference sessions of one model.

    Lifecycle is a small state machine: `UNINITIALIZED -> READY <-> RELOADING`.
    Inference calls are admitted only in `READY`; calls arriving during a
    reload wait until new handles are installed. `reload()` waits for in-flight
    calls to drain before replacing both handles at once, so every call runs
    against a complete pair of sessions from a single generation. Generation
    numbers only grow, including across `close()` and `initialize()`.

    Calling `reload()` or `close()` from inside an in-flight call on the same
    manager deadlocks.
    """

    def __init__(
        self,
        encoder_path: str,
        decoder_path: str,
        execution_providers: Optional[ExecutionProviders] = None,
        log_severity_level: int = SAM_ONNX_LOG_SEVERITY_LEVEL,
        intra_op_num_threads: int = SAM_INTRA_OP_NUM_THREADS,
        serialize_session_runs: bool = SAM_SERIALIZE_SESSION_RUNS,
        session_factory: Optional[SessionFactory] = None,
    ):
        self._encoder_path = encoder_path
        self._decoder_path = decoder_path
        self._execution_providers = execution_providers
        self._log_severity_level = log_severity_level
        self._intra_op_num_threads = intra_op_num_threads
        self._serialize_session_runs = serialize_session_runs
        self._session_factory = session_factory or create_inference_session
        self._environment: Optional[InferenceEnvironment] = None
        self._handles: Optional[SessionHandles] = None
        self._generation = 0
        self._state = SessionState.UNINITIALIZED
        self._in_flight_calls = 0
        self._state_condition = Condition()
        self._lifecycle_lock = Lock()
        self._encoder_run_lock = Lock()
        self._decoder_run_lock = Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def environment(self) -> Optional[InferenceEnvironment]:
        return self._environment

    @property
    def version(self) -> int:
        handles = self._handles
        return 0 if handles is None else handles.version

    def initialize(self) -> None:
        with self._lifecycle_lock:
            with self._state_condition:
                if self._state is not SessionState.UNINITIALIZED:
                    raise SessionStateError(
                        message=f"SAM sessions are already initialized (state: {self._state.value}). "
                        f"Use `reload()` to rebuild sessions.",
                    )
            environment = InferenceEnvironment.create(
                execution_providers=self._execution_providers,
                log_severity_level=self._log_severity_level,
                intra_op_num_threads=self._intra_op_num_threads,
            )
            self._generation += 1
            handles = self._build_handles(
                environment=environment, version=self._generation
            )
            with self._state_condition:
                self._environment = environment
                self._handles = handles
                self._state = SessionState.READY
                self._state_condition.notify_all()
        verbose_info(
            f"SAM sessions initialized with providers: {environment.execution_providers}"
        )

    def reload(self) -> None:
        with self._lifecycle_lock:
            with self._state_condition:
                if self._state is SessionState.UNINITIALIZED:
                    raise SessionNotLoadedError(
                        message="Cannot reload SAM sessions before `initialize()` was called.",
                    )
                self._state = SessionState.RELOADING
                while self._in_flight_calls > 0:
                    self._state_condition.wait()
            verbose_info("Reloading SAM sessions")
            self._generation += 1
            try:
                handles = self._build_handles(
                    environment=self._environment, version=self._generation
                )
            except Exception:
                LOGGER.warning(
                    "Reloading SAM sessions failed - keeping previously loaded sessions"
                )
                with self._state_condition:
                    self._state = SessionState.READY
                    self._state_condition.notify_all()
                raise
            with self._state_condition:
                self._handles = handles
                self._state = SessionState.READY
                self._state_condition.notify_all()
        verbose_info(f"SAM sessions reloaded (version: {handles.version})")

    def close(self) -> None:
        with self._lifecycle_lock:
            with self._state_condition:
                if self._state is SessionState.UNINITIALIZED:
                    return None
                self._state = SessionState.RELOADING
                while self._in_flight_calls > 0:
                    self._state_condition.wait()
                self._handles = None
                self._environment = None
                self._state = SessionState.UNINITIALIZED
                self._state_condition.notify_all()
        verbose_info("SAM sessions closed")

    def ensure_loaded(self) -> None:
        if self._state is SessionState.UNINITIALIZED:
            raise SessionNotLoadedError(
                message="SAM sessions are not loaded - call `initialize()` before running inference.",
            )

    @contextmanager
    def acquire_sessions(self) -> Generator[SessionHandles, None, None]:
        handles = self._acquire()
        try:
            yield handles
        finally:
            self._release()

    def run_encoder(
        self,
        inputs: Dict[str, np.ndarray],
        output_names: Sequence[str],
        log_severity_level: Optional[int] = None,
    ) -> Dict[str, np.ndarray]:
        with self.acquire_sessions() as handles:
            return self._run(
                session=handles.encoder,
                run_lock=self._encoder_run_lock,
                inputs=inputs,
                output_names=output_names,
                log_severity_level=log_severity_level,
            )

    def run_decoder(
        self,
        inputs: Dict[str, np.ndarray],
        output_names: Sequence[str],
        log_severity_level: Optional[int] = None,
    ) -> Dict[str, np.ndarray]:
        with self.acquire_sessions() as handles:
            return self._run(
                session=handles.decoder,
                run_lock=self._decoder_run_lock,
                inputs=inputs,
                output_names=output_names,
                log_severity_level=log_severity_level,
            )

    def _run(
        self,
        session: Any,
        run_lock: Lock,
        inputs: Dict[str, np.ndarray],
        output_names: Sequence[str],
        log_severity_level: Optional[int],
    ) -> Dict[str, np.ndarray]:
        if not self._serialize_session_runs:
            return run_onnx_session(
                session=session,
                inputs=inputs,
                output_names=output_names,
                log_severity_level=log_severity_level,
            )
        with run_lock:
            return run_onnx_session(
                session=session,
                inputs=inputs,
                output_names=output_names,
                log_severity_level=log_severity_level,
            )

    def _acquire(self) -> SessionHandles:
        with self._state_condition:
            while self._state is SessionState.RELOADING:
                self._state_condition.wait()
            if self._state is SessionState.UNINITIALIZED or self._handles is None:
                raise SessionNotLoadedError(
                    message="SAM sessions are not loaded - call `initialize()` before running inference.",
                )
            self._in_flight_calls += 1
            return self._handles

    def _release(self) -> None:
        with self._state_condition:
            self._in_flight_calls -= 1
            if self._in_flight_calls == 0:
                self._state_condition.notify_all()

    def _build_handles(
        self, environment: InferenceEnvironment, version: int
    ) -> SessionHandles:
        start = perf_counter()
        encoder = self._load_session(
            model_path=self._encoder_path, environment=environment
        )
        decoder = self._load_session(
            model_path=self._decoder_path, environment=environment
        )
        verbose_debug(
            f"SAM sessions (version {version}) built in {perf_counter() - start:.3f}s"
        )
        return SessionHandles(encoder=encoder, decoder=decoder, version=version)

    def _load_session(self, model_path: str, environment: InferenceEnvironment) -> Any:
        try:
            return self._session_factory(
                model_path,
                environment.session_options(),
                environment.execution_providers,
            )
        except Exception as error:
            raise ModelLoadingError(
                message=f"Could not load ONNX session from `{model_path}`. Verify that the model file exists "
                f"and is a valid ONNX export. Details: {error}",
            ) from error
