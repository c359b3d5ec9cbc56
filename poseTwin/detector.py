#!/usr/bin/env python3
"""
Pose detector - webcam capture plus MediaPipe Pose on a background thread

This is the ingestion context: every processed frame is handed to the results
callback (normally PoseIngestor.ingest) from the capture thread. MediaPipe and
OpenCV are imported lazily so the rest of the package works without them.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from .config import DetectorConfig

logger = logging.getLogger(__name__)

ResultsCallback = Callable[[Any, float], Any]


class PoseDetector:
    """MediaPipe Pose running on frames from an OpenCV capture device"""

    join_timeout = 2.0  # seconds stop() waits for the capture thread

    def __init__(self, config: Optional[DetectorConfig] = None,
                 on_results: Optional[ResultsCallback] = None):
        try:
            import cv2  # type: ignore
            import mediapipe as mp  # type: ignore
        except ImportError as e:
            raise RuntimeError(
                "MediaPipe/OpenCV are not installed. Install detector deps with: pip install 'poseTwin[detector]'"
            ) from e

        self.config = config or DetectorConfig()
        self._cv2 = cv2
        self._mp = mp
        self._pose = mp.solutions.pose.Pose(
            static_image_mode=False,
            model_complexity=int(self.config.model_complexity),
            smooth_landmarks=self.config.smooth_landmarks,
            enable_segmentation=self.config.enable_segmentation,
            smooth_segmentation=True,
            min_detection_confidence=float(self.config.min_detection_confidence),
            min_tracking_confidence=float(self.config.min_tracking_confidence),
        )

        self.on_results = on_results
        self.capture = None
        self.running = False
        self.capture_thread: Optional[threading.Thread] = None
        self.frames_processed = 0

        # Guards the hand-over of camera/model release between stop() and the capture thread
        self._handoff_lock = threading.Lock()
        self._loop_done = True
        self._release_on_exit = False
        self._close_requested = False

    def set_results_callback(self, callback: ResultsCallback):
        """Set callback called with (results, timestamp) for every processed frame"""
        self.on_results = callback

    def start(self) -> bool:
        """Open the camera and start the capture thread"""
        if self.running:
            logger.warning("Detector already running")
            return True
        if not self._loop_done:
            logger.error("Previous capture thread has not exited yet")
            return False

        cv2 = self._cv2
        self.capture = cv2.VideoCapture(self.config.camera_index)
        if not self.capture.isOpened():
            logger.error(f"Failed to open camera {self.config.camera_index}")
            self.capture = None
            return False

        self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)

        self.running = True
        self._loop_done = False
        self.capture_thread = threading.Thread(target=self._capture_loop, daemon=True)
        self.capture_thread.start()
        logger.info(f"Camera {self.config.camera_index} started at {self.config.width}x{self.config.height}")
        return True

    def process_rgb(self, rgb) -> Any:
        """Run pose estimation on one RGB image (H,W,3 uint8)"""
        return self._pose.process(rgb)

    def _capture_loop(self):
        """Background thread: grab, convert, detect, hand off"""
        cv2 = self._cv2
        try:
            while self.running:
                ok, frame = self.capture.read()
                if not ok:
                    logger.warning("Camera returned no frame")
                    time.sleep(0.01)
                    continue

                timestamp = time.time()
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                rgb.flags.writeable = False
                try:
                    results = self.process_rgb(rgb)
                except Exception:
                    logger.exception("Pose estimation failed, skipping frame")
                    continue
                self.frames_processed += 1

                if self.on_results:
                    try:
                        self.on_results(results, timestamp)
                    except Exception:
                        logger.exception("Results callback failed, continuing with next frame")
        finally:
            with self._handoff_lock:
                self._loop_done = True
                if self._release_on_exit:
                    self._release_on_exit = False
                    self._release_resources()

    def stop(self) -> bool:
        """Stop capturing; the results callback is not called afterwards.

        Returns:
            False if the capture thread is still busy. It then releases the
            camera (and the model, after close()) itself when it exits.
        """
        self.running = False
        thread = self.capture_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.join_timeout)

        with self._handoff_lock:
            if not self._loop_done:
                self._release_on_exit = True
                logger.warning("Capture thread still busy, it releases the camera when it exits")
                return False
            self.capture_thread = None
            self._release_resources()

        logger.info(f"Detector stopped after {self.frames_processed} frames")
        return True

    def close(self):
        self._close_requested = True
        self.stop()

    def _release_resources(self):
        if self.capture is not None:
            self.capture.release()
            self.capture = None
        if self._close_requested and self._pose:
            self._pose.close()
            self._pose = None
