"""Exceptions raised by the wake-word front end."""


class WakeWordError(Exception):
    """Base exception for wake-word front-end errors."""


class ConfigurationError(WakeWordError, ValueError):
    """Raised when frame/window/step or detection settings are inconsistent."""


class AudioSourceError(WakeWordError):
    """Raised when the audio source cannot be opened or read."""


class FeatureError(WakeWordError):
    """Raised when an analysis window cannot be turned into a feature vector."""


class ClassifierError(WakeWordError):
    """Raised when the classifier cannot score a feature vector."""


class ModelLoadError(ClassifierError):
    """Raised when a model blob cannot be loaded."""
