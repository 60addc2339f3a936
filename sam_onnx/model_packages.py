import os.path
from typing import Dict, List

from sam_onnx.errors import CorruptedModelPackageError


def get_model_package_contents(
    model_package_dir: str,
    elements: List[str],
) -> Dict[str, str]:
    """Get absolute paths to files within a model package directory.

    Args:
        model_package_dir: Path to the directory holding the model files.
        elements: List of file names (relative to package directory) to retrieve.

    Returns:
        Dictionary mapping each element name to its absolute path.

    Raises:
        CorruptedModelPackageError: If any of the requested elements don't exist
            in the package directory.
    """
    result = {}
    for element in elements:
        element_path = os.path.abspath(os.path.join(model_package_dir, element))
        if not os.path.exists(element_path):
            raise CorruptedModelPackageError(
                message=f"Model package is incomplete. Could not find element {element} in "
                f"{model_package_dir}. Inspect the contents of the directory - SAM model package must contain "
                f"both encoder and decoder ONNX exports.",
            )
        result[element] = element_path
    return result
