"""CLI for live or file-based wake-word detection."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from wakeword_frontend.audio import AudioConfig, MfccFeatureExtractor, SoundDeviceSource, WavFileSource, normalize_peak
from wakeword_frontend.audio.features import pcm_to_float
from wakeword_frontend.detection import DetectionConfig, DetectionEvent
from wakeword_frontend.errors import AudioSourceError, ConfigurationError, FeatureError, ModelLoadError
from wakeword_frontend.models import load_classifier_file
from wakeword_frontend.pipeline import CaptureConfig, CaptureLoop


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Listen for a wake word (mono 16 kHz, MFCC front end)")
    parser.add_argument(
        "--model",
        type=Path,
        default=None,
        help="TorchScript classifier taking 13 MFCCs and returning a probability",
    )
    parser.add_argument(
        "--wav",
        type=Path,
        default=None,
        help="Scan a 16 kHz WAV file instead of the microphone",
    )
    parser.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with --list-devices)",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices and exit",
    )
    parser.add_argument(
        "--extract-features",
        action="store_true",
        help="Print the MFCC vector of --wav and exit",
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Peak-normalize the file before --extract-features",
    )
    parser.add_argument("--threshold", type=float, default=0.6, help="Smoothed score threshold (default: 0.6)")
    parser.add_argument("--required-hits", type=int, default=1, help="Consecutive hits to trigger (default: 1)")
    parser.add_argument("--cooldown-ms", type=float, default=2000.0, help="Minimum gap between detections")
    parser.add_argument("--smooth-window", type=int, default=5, help="Scores in the moving average (default: 5)")
    parser.add_argument(
        "--hop",
        type=int,
        default=None,
        help="Hop in samples for sliding windows (default: window length, no overlap)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def file_features(path: Path, config: AudioConfig, normalize: bool = False) -> np.ndarray:
    """Averaged MFCC vector of a whole WAV file, optionally peak-normalized first."""
    with WavFileSource(path, config) as source:
        samples = source.read(sys.maxsize)
    if samples is None:
        raise AudioSourceError(f"{path} contains no audio")
    audio = pcm_to_float(samples)
    if normalize:
        audio = normalize_peak(audio)
    return MfccFeatureExtractor(config).extract(audio)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.list_devices:
        try:
            import sounddevice as sd
            print(sd.query_devices())
        except (ImportError, OSError):
            print("sounddevice (with PortAudio) not installed: pip install sounddevice", file=sys.stderr)
            sys.exit(1)
        return

    try:
        audio_config = AudioConfig()
        if args.hop is not None:
            audio_config = audio_config.with_overlap(args.hop)
        detection_config = DetectionConfig(
            smooth_window=args.smooth_window,
            threshold=args.threshold,
            required_hits=args.required_hits,
            cooldown_ms=args.cooldown_ms,
        )
        capture_config = CaptureConfig(device=args.device)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.extract_features:
        if args.wav is None:
            print("--extract-features needs --wav", file=sys.stderr)
            sys.exit(2)
        try:
            features = file_features(args.wav, audio_config, normalize=args.normalize)
        except (AudioSourceError, FeatureError) as exc:
            print(exc, file=sys.stderr)
            sys.exit(1)
        print(f"MFCC ({features.shape[0]} coefficients): {features}")
        return

    if args.model is None:
        print("--model is required for detection", file=sys.stderr)
        sys.exit(2)
    try:
        classifier = load_classifier_file(args.model, input_size=audio_config.n_mfcc)
    except ModelLoadError as exc:
        print(f"Could not load model: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.wav is not None:
        source = WavFileSource(args.wav, audio_config)
    else:
        source = SoundDeviceSource(audio_config, device=args.device)

    def on_detection(event: DetectionEvent) -> None:
        print(f"Wake word detected! confidence={event.confidence:.0%} t={event.timestamp:.0f}ms")

    loop = CaptureLoop(
        classifier=classifier,
        source=source,
        audio_config=audio_config,
        detection_config=detection_config,
        capture_config=capture_config,
        on_detection=on_detection,
    )
    print("Listening for wake word... Press Ctrl+C to stop.")
    with classifier:
        try:
            loop.run()
        except KeyboardInterrupt:
            loop.stop()
            print("\nStopped.")
    if loop.last_error is not None:
        sys.exit(1)


if __name__ == "__main__":
    main()
