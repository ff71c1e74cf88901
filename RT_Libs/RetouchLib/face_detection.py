"""
Face detection collaborator.

The detector itself lives outside the core; it only has to satisfy the
``FaceDetector`` protocol. ``FaceDetectionSession`` runs it once per retouch
session on an executor and caches the outcome, so slider changes reuse the
same landmarks.
"""

from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
import logging
import threading
from typing import Optional, Protocol

from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.RetouchLib.face_landmarks import FaceLandmarks

logger = logging.getLogger(__name__)


class FaceDetector(Protocol):
    """Protocol for face landmark detectors."""

    def detect(self, image: RasterImage) -> Optional[FaceLandmarks]:
        """Detect the first face in an image.

        Args:
            image: Raster to search.

        Returns:
            Landmarks of the first face in image pixel space, or None.
        """
        ...


@dataclass(frozen=True)
class DetectionOutcome:
    """Result of one detection run: landmarks, or the error that stopped it."""

    landmarks: Optional[FaceLandmarks] = None
    error: Optional[BaseException] = None

    @property
    def has_face(self) -> bool:
        return self.landmarks is not None

    @property
    def failed(self) -> bool:
        return self.error is not None


def run_detection(detector: FaceDetector, image: RasterImage) -> DetectionOutcome:
    """Call the detector and wrap its result or error."""
    try:
        landmarks = detector.detect(image)
    except Exception as e:
        logger.warning(f"Face detection failed: {e}")
        return DetectionOutcome(error=e)
    if landmarks is None:
        logger.info("No face found")
    return DetectionOutcome(landmarks=landmarks)


class FaceDetectionSession:
    """Detects once per session and shares the outcome.

    Example:
        >>> with concurrent.futures.ThreadPoolExecutor() as pool:
        ...     session = FaceDetectionSession(detector, raster, pool)
        ...     outcome = session.result()
    """

    def __init__(
        self,
        detector: FaceDetector,
        image: RasterImage,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        self._detector = detector
        self._image = image
        self._executor = executor
        self._future: Optional[concurrent.futures.Future] = None
        self._lock = threading.Lock()

    @property
    def image(self) -> RasterImage:
        return self._image

    def start(self) -> concurrent.futures.Future:
        """
        Start detection if it has not started yet.

        Returns:
            Future resolving to a DetectionOutcome; the same future on every call
        """
        with self._lock:
            if self._future is None:
                if self._executor is not None:
                    self._future = self._executor.submit(run_detection, self._detector, self._image)
                else:
                    future: concurrent.futures.Future = concurrent.futures.Future()
                    future.set_result(run_detection(self._detector, self._image))
                    self._future = future
            return self._future

    def result(self, timeout: Optional[float] = None) -> DetectionOutcome:
        """Block until the outcome is available."""
        return self.start().result(timeout=timeout)

    def cancel(self) -> bool:
        """Cancel a detection that has not started running."""
        with self._lock:
            if self._future is None:
                return False
            return self._future.cancel()

    @property
    def landmarks(self) -> Optional[FaceLandmarks]:
        """Cached landmarks, or None while pending, cancelled or faceless."""
        with self._lock:
            future = self._future
        if future is None or not future.done() or future.cancelled():
            return None
        return future.result().landmarks
