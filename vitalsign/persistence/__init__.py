# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Record sinks and the persistence retry policy."""

from vitalsign.persistence.csv_sink import CSVSink
from vitalsign.persistence.database import Database
from vitalsign.persistence.orchestrator import PersistenceOrchestrator

__all__ = ["CSVSink", "Database", "PersistenceOrchestrator"]
