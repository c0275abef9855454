# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""CSV output of extracted records."""

import csv
import logging
import os
from typing import Optional, TextIO

from vitalsign.models.record import ExtractedRecord

logger = logging.getLogger(__name__)

CSV_HEADER = ["Time", "HR", "SpO2", "ABP", "ECG_Classification", "ECG_Confidence"]


class CSVSink:
    """Writes one row per record, flushed immediately."""

    def __init__(self, path: str):
        self.path = path
        self._file: Optional[TextIO] = None
        self._writer = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> bool:
        """Create (truncate) the file and write the header."""
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._file = open(self.path, "w", newline="")
        except OSError as e:
            logger.error(f"Unable to open CSV file {self.path} for writing: {e}")
            return False

        self._writer = csv.writer(self._file)
        self._writer.writerow(CSV_HEADER)
        self._file.flush()
        logger.info(f"Writing CSV output to {self.path}")
        return True

    def write(self, record: ExtractedRecord) -> bool:
        if self._file is None:
            return False
        try:
            self._writer.writerow(record.csv_row())
            self._file.flush()
        except OSError as e:
            logger.error(f"Failed to write CSV row: {e}")
            return False
        self.rows_written += 1
        return True

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None
            logger.info(f"Data saved to {self.path} ({self.rows_written} rows)")
