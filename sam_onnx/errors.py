from typing import Optional


class BaseSamOnnxError(Exception):

    def __init__(self, message: str, help_url: Optional[str] = None):
        super().__init__(message)
        self._help_url = help_url

    @property
    def help_url(self) -> Optional[str]:
        return self._help_url

    def __str__(self) -> str:
        if self._help_url is None:
            return super().__str__()
        return f"{super().__str__()} - VISIT {self._help_url} FOR FURTHER SUPPORT"


class EnvironmentConfigurationError(BaseSamOnnxError):
    pass


class InvalidEnvVariable(BaseSamOnnxError):
    pass


class MissingDependencyError(BaseSamOnnxError):
    pass


class ModelLoadingError(BaseSamOnnxError):
    pass


class CorruptedModelPackageError(ModelLoadingError):
    pass


class SessionStateError(BaseSamOnnxError):
    pass


class SessionNotLoadedError(SessionStateError):
    pass


class ModelInputError(BaseSamOnnxError):
    pass


class PromptValidationError(ModelInputError):
    pass


class ImageEncodingError(ModelInputError):
    pass


class ModelRuntimeError(BaseSamOnnxError):
    pass


class InferenceRunError(ModelRuntimeError):
    pass


class OutputMissingError(ModelRuntimeError):
    pass
