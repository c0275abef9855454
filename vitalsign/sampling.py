# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Sampling loop for the vital sign extractor.

Pulls frames from the acquisition controller and, on every Nth frame, runs
OCR extraction and ECG classification, then fans the merged record out to
the console, the CSV file and the database.

Everything runs on one control thread. The only state shared with signal
handlers is the ShutdownFlag, which is polled once per iteration so a frame
is never torn down mid-write.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import cv2

from vitalsign.capture.acquisition import AcquisitionController
from vitalsign.models.record import ExtractedRecord

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

DISPLAY_WINDOW = "Vital Sign Extractor"
ECG_WINDOW = "ECG Model Input"


class ShutdownFlag:
    """Boolean set from a signal handler and read by the loop.

    request() has the signal handler signature and does nothing but set
    the flag.
    """

    def __init__(self):
        self.requested = False

    def request(self, signum=None, frame=None) -> None:
        self.requested = True


class SamplingLoop:
    """Drives frame cadence and dispatches sampled frames.

    Attributes:
        frame_count: Frames pulled successfully
        records: Records produced
    """

    def __init__(
        self,
        config,
        acquisition: AcquisitionController,
        ocr,
        extractor,
        classifier=None,
        csv_sink=None,
        orchestrator=None,
        database=None,
        shutdown: Optional[ShutdownFlag] = None,
        display: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize loop.

        Args:
            config: Application configuration
            acquisition: Video acquisition controller
            ocr: OCR engine with recognize(frame) and end()
            extractor: VitalSignExtractor
            classifier: ECGClassifier, or None when classification is disabled
            csv_sink: CSVSink, or None when CSV output is disabled
            orchestrator: PersistenceOrchestrator wrapping the database
            database: Database to close on shutdown
            shutdown: Flag polled once per iteration
            display: Show the frame and model input in OpenCV windows
            clock: Monotonic clock (seconds) for health checks
        """
        self.config = config
        self.acquisition = acquisition
        self.ocr = ocr
        self.extractor = extractor
        self.classifier = classifier
        self.csv_sink = csv_sink
        self.orchestrator = orchestrator
        self.database = database
        self.shutdown = shutdown or ShutdownFlag()
        self.display = display
        self._clock = clock

        self.processing_interval = max(1, config.video.processing_interval)
        self.health_check_interval = config.monitoring.health_check_interval_sec

        self.frame_count = 0
        self.records = 0
        self.zeroed_records = 0
        self._last_health_check = clock()

    # ==================== Main Loop ====================

    async def run(self) -> int:
        """Run until shutdown, end of stream or a fatal capture error.

        Returns:
            Process exit code
        """
        logger.info(f"Sampling every {self.processing_interval} frames")
        exit_code = EXIT_OK

        while not self.shutdown.requested:
            result = self.acquisition.next_frame()

            if result.end_of_stream:
                break
            if result.fatal:
                logger.error(f"Stopping: {result.error}")
                exit_code = EXIT_FAILURE
                break
            if not result.success:
                continue

            self.frame_count += 1
            if self.frame_count % self.processing_interval == 0:
                await self.process_frame(result.frame)

            if self.display:
                self._show(DISPLAY_WINDOW, result.frame)

            await self._maybe_health_check()

            # Let pending callbacks run between frames
            await asyncio.sleep(0)

        if self.shutdown.requested:
            logger.info("Shutdown requested")
        return exit_code

    async def process_frame(self, frame) -> ExtractedRecord:
        """Extract, classify and emit one record for a sampled frame."""
        tokens = list(self.ocr.recognize(frame))
        vitals = self.extractor.extract(tokens)
        if vitals.is_zeroed:
            self.zeroed_records += 1
        else:
            self.extractor.range_warnings(vitals)

        classification = None
        if self.classifier is not None:
            classification, model_input = self.classifier.classify_frame(frame)
            if self.display:
                self._show(ECG_WINDOW, model_input)
        record = ExtractedRecord.from_vitals(vitals, classification)
        self.records += 1

        if self.config.output.console_output:
            print(record.console_line())
        if self.csv_sink is not None:
            self.csv_sink.write(record)
        if self.orchestrator is not None:
            await self.orchestrator.persist(record)

        return record

    def _show(self, window: str, image) -> None:
        cv2.imshow(window, image)
        if cv2.waitKey(1) & 0xFF == ord("q"):
            self.shutdown.request()

    # ==================== Health Check ====================

    async def _maybe_health_check(self) -> None:
        if self.health_check_interval <= 0:
            return
        now = self._clock()
        if now - self._last_health_check < self.health_check_interval:
            return
        self._last_health_check = now

        stats = f"frames={self.frame_count} records={self.records} zeroed={self.zeroed_records}"
        stats += f" reconnects={self.acquisition.reconnects}"
        if self.orchestrator is not None:
            s = self.orchestrator.stats
            stats += f" db_written={s['written']} db_retried={s['retried']} db_dropped={s['dropped']}"
        if self.database is not None:
            healthy = await self.database.health_check()
            stats += f" db={'ok' if healthy else 'down'}"
        logger.info(f"Health: {stats}")

    # ==================== Shutdown ====================

    async def close(self) -> None:
        """Release resources in order: video, windows, CSV, OCR, classifier, database, logs."""
        logger.info("Releasing resources...")

        steps = [
            ("video source", self.acquisition.release),
            ("windows", cv2.destroyAllWindows if self.display else None),
            ("CSV file", self.csv_sink.close if self.csv_sink is not None else None),
            ("OCR engine", self.ocr.end),
            ("classifier", self.classifier.close if self.classifier is not None else None),
        ]
        for name, step in steps:
            if step is None:
                continue
            try:
                step()
            except Exception as e:
                logger.error(f"Error releasing {name}: {e}")

        if self.database is not None:
            try:
                await self.database.close()
            except Exception as e:
                logger.error(f"Error releasing database: {e}")

        logger.info(f"Processed {self.frame_count} frames, {self.records} records")
        for handler in logging.getLogger().handlers:
            handler.flush()
