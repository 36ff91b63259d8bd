"""Classifier adapters for the wake-word front end."""

from wakeword_frontend.models.classifier import (
    BaseClassifier,
    CallableClassifier,
    load_classifier_file,
    load_torchscript_classifier,
)

__all__ = [
    "BaseClassifier",
    "CallableClassifier",
    "load_classifier_file",
    "load_torchscript_classifier",
]
