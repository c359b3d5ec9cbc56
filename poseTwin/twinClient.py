# -----------------------------------------------------------------------------
# poseTwin
# -----------------------------------------------------------------------------
# Twin Client - wires detector, ingestion, frame buffer and render loop
# -----------------------------------------------------------------------------

import logging
import sys
import time
from typing import Callable, List, Optional

from .config import TwinConfig, build_arg_parser, config_from_args
from .frame_buffer import FrameBuffer
from .ingestion import PoseIngestor
from .render_sync import RenderSyncLoop

logger = logging.getLogger(__name__)


class TwinClient:
    """Runs the two loops of the pose twin.

    The detector thread calls PoseIngestor.ingest for every analysed frame;
    the render loop (Qt timer or headless loop) ticks RenderSyncLoop at its own
    rate. The two only meet in the FrameBuffer.
    """

    def __init__(self, config: Optional[TwinConfig] = None,
                 detector_factory: Optional[Callable] = None):
        """
        Args:
            config: application configuration (defaults to TwinConfig())
            detector_factory: callable(detector_config, on_results=...) returning
                an object with start()/close(); defaults to PoseDetector
        """
        self.config = config or TwinConfig()
        self.frame_buffer = FrameBuffer()
        self.ingestor = PoseIngestor(self.frame_buffer, min_visibility=self.config.render.min_visibility)
        self.sync = RenderSyncLoop(self.frame_buffer)

        self._detector_factory = detector_factory
        self.detector = None

        self.qt_app = None
        self.qt_viewer = None
        self.main_window = None

    def start_detector(self) -> bool:
        """Create and start the detector (ingestion context)"""
        factory = self._detector_factory
        if factory is None:
            from .detector import PoseDetector
            factory = PoseDetector

        try:
            self.detector = factory(self.config.detector, on_results=self.ingestor.ingest)
        except RuntimeError as e:
            logger.error(str(e))
            return False

        if not self.detector.start():
            self.detector.close()
            self.detector = None
            return False
        return True

    def stop(self):
        """Stop the detector and clear the published pose"""
        if self.detector is not None:
            self.detector.close()
            self.detector = None
        self.frame_buffer.reset()
        logger.info("Shut down")

    def run(self) -> bool:
        """Run the client (blocking)"""
        if self.config.render.headless:
            return self.run_headless()
        return self._run_viz()

    def run_headless(self, max_ticks: Optional[int] = None) -> bool:
        """Tick the render loop at the configured rate without a window.

        Args:
            max_ticks: stop after this many ticks (None = until Ctrl+C)
        """
        if not self.start_detector():
            return False

        interval = 1.0 / self.config.render.fps
        last_report = time.time()
        logger.info("Running headless. Press Ctrl+C to exit...")
        try:
            ticks = 0
            while max_ticks is None or ticks < max_ticks:
                self.sync.tick()
                ticks += 1

                now = time.time()
                if now - last_report >= 1.0:
                    logger.info(f"Joints shown: {len(self.sync.shown_joints())}, "
                                f"bones shown: {len(self.sync.shown_bones())}")
                    last_report = now
                time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()
        return True

    def _run_viz(self) -> bool:
        """Run with the Qt OpenGL viewer"""
        try:
            from PyQt5 import QtWidgets
            from .vizWidget import SkeletonGLWidget
        except ImportError as e:
            logger.error(f"Visualization requires PyQt5 and PyOpenGL: {e}")
            return False

        if not self.start_detector():
            return False

        render = self.config.render
        self.qt_app = QtWidgets.QApplication(sys.argv)
        self.main_window = QtWidgets.QMainWindow()
        self.main_window.setWindowTitle("poseTwin")
        self.main_window.resize(render.window_width, render.window_height)

        self.qt_viewer = SkeletonGLWidget(self.sync, fps=render.fps)
        self.main_window.setCentralWidget(self.qt_viewer)
        self.main_window.show()

        logger.info("Running visualization. Close window to exit...")
        try:
            exit_code = self.qt_app.exec_()
            return exit_code == 0
        finally:
            self.stop()


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.verbose)
    client = TwinClient(config)
    return 0 if client.run() else 1


if __name__ == "__main__":
    sys.exit(main())
