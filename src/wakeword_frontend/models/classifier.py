"""Classifier boundary: predict(features) -> wake-word probability.

The trained model is opaque to the front end. Anything that maps a
13-float MFCC vector to a probability can be wrapped in
CallableClassifier; load_torchscript_classifier builds one from a
TorchScript model blob.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from wakeword_frontend.errors import ClassifierError, ModelLoadError

logger = logging.getLogger(__name__)

# Model forward: (n_mfcc,) float32 -> scalar or array whose first element is the probability
ModelForward = Callable[[np.ndarray], object]


class BaseClassifier(ABC):
    """Common interface for wake-word classifiers."""

    @abstractmethod
    def predict(self, features: np.ndarray) -> float:
        """Return the wake-word probability in [0, 1] for one feature vector.

        Raises:
            ClassifierError: model unavailable, input size mismatch or model failure.
        """

    def close(self) -> None:
        """Release the model. Override if needed."""

    def __enter__(self) -> "BaseClassifier":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class CallableClassifier(BaseClassifier):
    """Wrap a model forward callable with input/output validation."""

    def __init__(self, forward: Optional[ModelForward], input_size: int = 13):
        self._forward = forward
        self.input_size = input_size

    def predict(self, features: np.ndarray) -> float:
        if self._forward is None:
            raise ClassifierError("Model not initialized")
        x = np.asarray(features, dtype=np.float32).reshape(-1)
        if x.shape[0] != self.input_size:
            raise ClassifierError(
                f"Invalid feature size: expected {self.input_size}, got {x.shape[0]}"
            )
        try:
            output = self._forward(x)
        except Exception as exc:
            raise ClassifierError(f"model forward failed: {exc}") from exc
        try:
            score = float(np.asarray(output, dtype=np.float64).reshape(-1)[0])
        except (TypeError, ValueError, IndexError) as exc:
            raise ClassifierError(f"model returned an unusable output: {output!r}") from exc
        if not np.isfinite(score):
            raise ClassifierError(f"model returned a non-finite score: {score}")
        return min(max(score, 0.0), 1.0)

    def close(self) -> None:
        self._forward = None

    @property
    def ready(self) -> bool:
        return self._forward is not None


def load_torchscript_classifier(
    blob: bytes,
    input_size: int = 13,
    device: Optional[str] = None,
) -> CallableClassifier:
    """Load a TorchScript model from an opaque byte blob.

    The model receives a (1, input_size) float32 tensor and must return a
    tensor whose first element is the wake-word probability.

    Args:
        blob: Serialized TorchScript module (torch.jit.save output).
        input_size: Expected feature length (N_MFCC).
        device: Optional device string ('cuda', 'cpu', etc.). If None,
                uses CUDA if available else CPU.

    Raises:
        ModelLoadError: torch missing, empty blob, or blob not loadable.
    """
    try:
        import torch
    except ImportError as exc:
        raise ModelLoadError("torch is required to load TorchScript models. pip install torch") from exc

    if not blob:
        raise ModelLoadError("model blob is empty")
    if device is None:
        device = "cuda" if torch.cuda.is_available() else "cpu"

    try:
        model = torch.jit.load(io.BytesIO(blob), map_location=torch.device(device))
    except Exception as exc:
        raise ModelLoadError(f"could not load TorchScript model: {exc}") from exc
    model.eval()
    logger.info("Loaded TorchScript classifier (%d bytes) on %s", len(blob), device)

    def forward(features: np.ndarray) -> np.ndarray:
        with torch.no_grad():
            x = torch.from_numpy(features.astype(np.float32)).unsqueeze(0).to(device)
            return model(x).reshape(-1).cpu().numpy()

    return CallableClassifier(forward, input_size=input_size)


def load_classifier_file(
    path: str | Path,
    input_size: int = 13,
    device: Optional[str] = None,
) -> CallableClassifier:
    """Read a TorchScript model file and load it with load_torchscript_classifier."""
    path = Path(path)
    try:
        blob = path.read_bytes()
    except OSError as exc:
        raise ModelLoadError(f"Model not found: {path}") from exc
    return load_torchscript_classifier(blob, input_size=input_size, device=device)
