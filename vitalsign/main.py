# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Vital Sign Extractor - Main Entry Point.

Reads a patient monitor's display from a camera, video file or stream,
extracts HR, SpO2 and ABP with OCR, classifies the ECG trace and writes
one record per sampled frame to the console, a CSV file and the database.

Usage:
    python -m vitalsign.main [--config CONFIG] [--debug] [--mock]

Or, once installed:
    vitalsign [options]

Exit codes:
    0 - normal shutdown (signal, end of file, or 'q' in the debug window)
    1 - configuration, OCR, classifier, output or video initialization
        failure, or the video source was lost for good
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from vitalsign.capture import AcquisitionController, get_video_source
from vitalsign.capture.video_source import mask_descriptor
from vitalsign.classification import ClassifierInitError, get_classifier
from vitalsign.config import load_config
from vitalsign.extraction import OCRInitError, VitalSignExtractor, get_ocr_engine
from vitalsign.persistence import CSVSink, Database, PersistenceOrchestrator
from vitalsign.sampling import EXIT_FAILURE, EXIT_OK, SamplingLoop, ShutdownFlag

logger = logging.getLogger(__name__)


def setup_logging(config, debug: bool = False) -> None:
    """Configure logging based on config settings.

    Args:
        config: Configuration object
        debug: Enable debug mode
    """
    # Determine log level
    level = logging.DEBUG if debug else getattr(
        logging, config.logging.level.upper(), logging.INFO
    )

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if config.logging.console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # File handler (if configured)
    if config.logging.file:
        log_file = str(config.resolve_path(config.logging.file))
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce verbosity of some noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logger.info(f"Logging configured (level: {logging.getLevelName(level)})")


class VitalSignApp:
    """Main application class.

    Builds the components, runs the sampling loop and always releases
    everything on the way out.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        debug: bool = False,
        mock: bool = False,
        shutdown: Optional[ShutdownFlag] = None,
    ):
        """Initialize the application.

        Args:
            config_path: Path to configuration file (None searches defaults)
            debug: Enable debug logging and the preview window
            mock: Force mock mode regardless of config
            shutdown: Flag set by the signal handlers
        """
        self.config_path = config_path
        self.debug = debug
        self.force_mock = mock
        self.shutdown = shutdown or ShutdownFlag()

        # Components (initialized in start())
        self.config = None
        self.video_source = None
        self.acquisition: Optional[AcquisitionController] = None
        self.ocr = None
        self.extractor: Optional[VitalSignExtractor] = None
        self.classifier = None
        self.csv_sink: Optional[CSVSink] = None
        self.database: Optional[Database] = None
        self.orchestrator: Optional[PersistenceOrchestrator] = None
        self.loop: Optional[SamplingLoop] = None

    async def start(self) -> int:
        """Run the application.

        Returns:
            Process exit code
        """
        try:
            self.config = load_config(self.config_path)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_FAILURE

        if self.force_mock:
            self.config.mock_mode = True

        setup_logging(self.config, self.debug)

        logger.info("=" * 50)
        logger.info(f"{self.config.app.name} {self.config.app.version} starting")
        logger.info("=" * 50)
        logger.info(f"Mock mode: {self.config.mock_mode}")

        try:
            if not await self._initialize_components():
                return EXIT_FAILURE

            logger.info("Starting sampling loop")
            return await self.loop.run()
        finally:
            await self._shutdown()

    async def _initialize_components(self) -> bool:
        """Initialize all components. Returns False on a fatal failure."""
        config = self.config
        logger.info("Initializing components...")

        logger.info("  - Video Source")
        self.video_source = get_video_source(config)
        self.acquisition = AcquisitionController.from_config(config, self.video_source)

        logger.info("  - OCR Engine")
        self.ocr = get_ocr_engine(config, self.video_source)
        try:
            self.ocr.init()
        except OCRInitError as e:
            logger.error(f"Could not initialize OCR engine: {e}")
            return False

        self.extractor = VitalSignExtractor.from_config(config)

        logger.info("  - ECG Classifier")
        self.classifier = get_classifier(config)
        if self.classifier is not None:
            try:
                self.classifier.load()
            except ClassifierInitError as e:
                logger.error(f"Could not load ECG model: {e}")
                return False

        if config.output.csv_enabled:
            logger.info("  - CSV Output")
            self.csv_sink = CSVSink(str(config.resolve_path(config.output.csv_file)))
            if not self.csv_sink.open():
                return False

        if config.database.enabled:
            logger.info("  - Database")
            self.database = Database(str(config.resolve_path(config.database.path)))
            if await self.database.initialize():
                await self.database.cleanup_old_vital_signs(config.database.retention_days)
            else:
                logger.warning("Database unavailable, records will be retried per write")
            self.orchestrator = PersistenceOrchestrator.from_config(config, self.database)

        self.loop = SamplingLoop(
            config,
            self.acquisition,
            self.ocr,
            self.extractor,
            classifier=self.classifier,
            csv_sink=self.csv_sink,
            orchestrator=self.orchestrator,
            database=self.database,
            shutdown=self.shutdown,
            display=self.debug or config.app.debug_mode,
        )

        logger.info(f"  - Opening {mask_descriptor(config.video.descriptor)}")
        if not self.acquisition.open():
            return False

        logger.info("All components initialized")
        return True

    async def _shutdown(self) -> None:
        """Clean shutdown of all components."""
        logger.info("Shutting down...")

        if self.loop is not None:
            await self.loop.close()
        else:
            # Startup failed before the loop existed
            if self.acquisition is not None:
                self.acquisition.release()
            if self.csv_sink is not None:
                self.csv_sink.close()
            if self.ocr is not None:
                self.ocr.end()
            if self.classifier is not None:
                self.classifier.close()
            if self.database is not None:
                await self.database.close()

        logger.info("Shutdown complete")

    def stop(self) -> None:
        """Request application stop."""
        self.shutdown.request()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Vital Sign Extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with default config (config.local.yaml, config.yaml or config.json)
    python -m vitalsign.main

    # Run in debug mode with mock video, OCR and model
    python -m vitalsign.main --debug --mock

    # Use custom config file
    python -m vitalsign.main --config /path/to/config.yaml
        """
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (default: search config.local.yaml, config.yaml, config.json)"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging and the preview window"
    )
    parser.add_argument(
        "--mock", "-m",
        action="store_true",
        help="Use mock video, OCR and model (for testing)"
    )
    args = parser.parse_args()

    shutdown = ShutdownFlag()
    app = VitalSignApp(
        config_path=args.config,
        debug=args.debug,
        mock=args.mock,
        shutdown=shutdown,
    )

    signal.signal(signal.SIGINT, shutdown.request)
    signal.signal(signal.SIGTERM, shutdown.request)

    try:
        exit_code = asyncio.run(app.start())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        exit_code = EXIT_FAILURE

    sys.exit(exit_code if exit_code is not None else EXIT_OK)


if __name__ == "__main__":
    main()
