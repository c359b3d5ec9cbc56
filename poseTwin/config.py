from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class DetectorConfig:
    camera_index: int = 0
    width: int = 1280
    height: int = 720
    model_complexity: int = 1
    smooth_landmarks: bool = True
    enable_segmentation: bool = False
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class RenderConfig:
    fps: float = 60.0
    headless: bool = False
    window_width: int = 800
    window_height: int = 600
    # Landmarks below this visibility are treated as unknown (None = keep all)
    min_visibility: Optional[float] = None


@dataclass(frozen=True)
class TwinConfig:
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    verbose: bool = False


def build_arg_parser() -> argparse.ArgumentParser:
    defaults = TwinConfig()
    parser = argparse.ArgumentParser(description="poseTwin - live 3D skeleton from a webcam")
    parser.add_argument("--camera", type=int, default=defaults.detector.camera_index, help="Camera device index")
    parser.add_argument("--width", type=int, default=defaults.detector.width, help="Capture width")
    parser.add_argument("--height", type=int, default=defaults.detector.height, help="Capture height")
    parser.add_argument("--model-complexity", type=int, choices=[0, 1, 2],
                        default=defaults.detector.model_complexity, help="MediaPipe Pose model complexity")
    parser.add_argument("--min-detection-confidence", type=float,
                        default=defaults.detector.min_detection_confidence)
    parser.add_argument("--min-tracking-confidence", type=float,
                        default=defaults.detector.min_tracking_confidence)
    parser.add_argument("--min-visibility", type=float, default=None,
                        help="Hide landmarks whose visibility is below this value")
    parser.add_argument("--headless", action="store_true", help="Run without the OpenGL viewer")
    parser.add_argument("--fps", type=float, default=defaults.render.fps, help="Render loop rate")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> TwinConfig:
    if args.fps <= 0:
        raise ValueError(f"--fps must be positive, got {args.fps}")
    return TwinConfig(
        detector=DetectorConfig(
            camera_index=args.camera,
            width=args.width,
            height=args.height,
            model_complexity=args.model_complexity,
            min_detection_confidence=args.min_detection_confidence,
            min_tracking_confidence=args.min_tracking_confidence,
        ),
        render=RenderConfig(
            fps=args.fps,
            headless=args.headless,
            min_visibility=args.min_visibility,
        ),
        verbose=args.verbose,
    )
