# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""ECG waveform classifier using an Edge Impulse model.

The runner is loaded once at startup. Each sampled frame is center-cropped
to the model's input size, packed into features and classified.
"""

import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from vitalsign.classification.features import pack_features, resize_and_crop
from vitalsign.models.record import Classification

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"
UNCERTAIN_LABEL = "uncertain"


class ClassifierInitError(RuntimeError):
    """The model file could not be loaded."""


def _impulse_runner(model_path: str):
    """Create an Edge Impulse runner, importing the SDK on first use."""
    try:
        from edge_impulse_linux.runner import ImpulseRunner
    except ImportError as e:
        raise ClassifierInitError(
            "edge_impulse_linux is not installed (pip install .[ecg])"
        ) from e
    return ImpulseRunner(model_path)


class ECGClassifier:
    """Classifies the ECG trace region of a monitor frame.

    Attributes:
        model_path: Path to the Edge Impulse .eim model
        confidence_threshold: Top scores below this are reported as uncertain
        input_width: Model input width (from model metadata once loaded)
        input_height: Model input height (from model metadata once loaded)
    """

    def __init__(
        self,
        model_path: str,
        confidence_threshold: float = 0.7,
        input_width: int = 96,
        input_height: int = 96,
        runner_factory: Optional[Callable[[str], Any]] = None,
    ):
        """Initialize classifier.

        Args:
            model_path: Path to the .eim model file
            confidence_threshold: Minimum score for a confident label
            input_width: Fallback input width if the model does not report one
            input_height: Fallback input height if the model does not report one
            runner_factory: Creates the runner for a model path
                (defaults to the Edge Impulse ImpulseRunner)
        """
        self.model_path = model_path
        self.confidence_threshold = confidence_threshold
        self.input_width = input_width
        self.input_height = input_height
        self._runner_factory = runner_factory or _impulse_runner
        self._runner = None
        self.labels: List[str] = []

    @classmethod
    def from_config(cls, config, runner_factory=None) -> "ECGClassifier":
        ml = config.ml_model
        return cls(
            model_path=str(config.resolve_path(ml.model_path)) if ml.model_path else "",
            confidence_threshold=ml.confidence_threshold,
            input_width=ml.input_width,
            input_height=ml.input_height,
            runner_factory=runner_factory,
        )

    @property
    def is_loaded(self) -> bool:
        return self._runner is not None

    def load(self) -> None:
        """Start the model runner and read its input geometry.

        Raises:
            ClassifierInitError: If the model cannot be started
        """
        if not self.model_path:
            raise ClassifierInitError("ml_model.model_path is not set")

        start_time = time.time()
        runner = self._runner_factory(self.model_path)
        try:
            model_info = runner.init()
        except Exception as e:
            runner.stop()
            raise ClassifierInitError(f"Failed to load model {self.model_path}: {e}") from e

        params = model_info.get("model_parameters", {})
        self.input_width = int(params.get("image_input_width") or self.input_width)
        self.input_height = int(params.get("image_input_height") or self.input_height)
        self.labels = list(params.get("labels", []))
        self._runner = runner

        project = model_info.get("project", {})
        elapsed = time.time() - start_time
        logger.info(
            f"ECG model loaded in {elapsed:.2f}s: {project.get('owner', '?')} / {project.get('name', '?')} "
            f"({self.input_width}x{self.input_height}, labels={self.labels})"
        )

    def classify(self, features: Sequence[float]) -> List[Classification]:
        """Run the model on a packed feature buffer.

        Returns:
            Label/score pairs, highest score first
        """
        if self._runner is None:
            raise RuntimeError("Classifier not loaded")

        if isinstance(features, np.ndarray):
            features = features.tolist()

        result = self._runner.classify(features)
        scores = result.get("result", {}).get("classification", {})
        ranked = [Classification(label, float(score)) for label, score in scores.items()]
        ranked.sort(key=lambda c: c.score, reverse=True)
        return ranked

    def top(self, features: Sequence[float]) -> Classification:
        """Best label for a feature buffer, or unknown if the run failed."""
        try:
            ranked = self.classify(features)
        except Exception as e:
            logger.error(f"Failed to run classifier: {e}")
            return Classification(UNKNOWN_LABEL, 0.0)

        for c in ranked:
            logger.debug(f"  {c.label}: {c.score:.5f}")

        if not ranked:
            return Classification(UNKNOWN_LABEL, 0.0)

        best = ranked[0]
        if best.score < self.confidence_threshold:
            return Classification(UNCERTAIN_LABEL, best.score)
        return best

    def classify_frame(self, frame: np.ndarray) -> Tuple[Classification, np.ndarray]:
        """Crop, pack and classify a full frame.

        Returns:
            Tuple of (classification, cropped model input)
        """
        cropped = resize_and_crop(frame, self.input_width, self.input_height)
        return self.top(pack_features(cropped)), cropped

    def close(self) -> None:
        """Stop the model runner."""
        if self._runner is not None:
            try:
                self._runner.stop()
            finally:
                self._runner = None
            logger.info("ECG classifier stopped")


def get_classifier(config) -> Optional[ECGClassifier]:
    """Factory function to get the ECG classifier, or None when disabled."""
    if not config.ml_model.enabled:
        logger.info("ECG classification disabled")
        return None

    if config.mock_mode:
        from vitalsign.mocks import MockImpulseRunner
        logger.info("Using MockImpulseRunner (mock_mode=True)")
        ml = config.ml_model
        classifier = ECGClassifier.from_config(
            config,
            runner_factory=lambda path: MockImpulseRunner(path, ml.input_width, ml.input_height),
        )
        classifier.model_path = classifier.model_path or "mock.eim"
        return classifier

    return ECGClassifier.from_config(config)
