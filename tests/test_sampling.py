import asyncio
import csv

from tests.fakes import FakeOCR, FakeRunner, FakeSink, FakeVideoSource, blank_frame
from vitalsign.capture.acquisition import AcquisitionController
from vitalsign.classification.ecg import ECGClassifier
from vitalsign.extraction.extractor import VitalSignExtractor
from vitalsign.persistence.csv_sink import CSVSink
from vitalsign.persistence.orchestrator import PersistenceOrchestrator
from vitalsign.sampling import EXIT_FAILURE, EXIT_OK, SamplingLoop, ShutdownFlag


class Classifier(ECGClassifier):
    def __init__(self, events=None):
        super().__init__("model.eim", runner_factory=lambda path: FakeRunner())
        self.events = events
        self.load()

    def close(self):
        super().close()
        if self.events is not None:
            self.events.append("classifier")


class RecordingCSV(CSVSink):
    def __init__(self, path, events):
        super().__init__(path)
        self.events = events

    def close(self):
        super().close()
        self.events.append("csv")


def _loop(config, frames, tokens, open_results=None, events=None, **kwargs):
    source = FakeVideoSource(frames=frames, open_results=open_results, events=events)
    acquisition = AcquisitionController(
        source, "monitor.mp4", max_attempts=1, delay_ms=0, stop_at_end_of_file=True, sleep=lambda s: None
    )
    acquisition.open()
    ocr = FakeOCR(tokens, events=events)
    return SamplingLoop(config, acquisition, ocr, VitalSignExtractor(), **kwargs), ocr


def test_every_nth_frame_is_processed(config, monitor_tokens, tmp_path):
    config.video.processing_interval = 3
    sink = FakeSink()
    csv_sink = CSVSink(str(tmp_path / "out.csv"))
    csv_sink.open()
    loop, ocr = _loop(
        config,
        [blank_frame() for _ in range(7)],
        monitor_tokens,
        classifier=Classifier(),
        csv_sink=csv_sink,
        orchestrator=PersistenceOrchestrator(sink),
    )

    assert asyncio.run(loop.run()) == EXIT_OK
    asyncio.run(loop.close())

    assert loop.frame_count == 7
    assert ocr.frames_seen == 2
    assert len(sink.records) == 2
    record = sink.records[0]
    assert (record.hr, record.spo2, record.abp) == ("72", "97", "120/80")
    assert (record.ecg_classification, record.ecg_confidence) == ("normal", 0.9)

    with open(tmp_path / "out.csv", newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 3
    assert rows[1][1:4] == ["72", "97", "120/80"]


def test_disabled_classifier_reports_na(config, monitor_tokens):
    config.video.processing_interval = 1
    sink = FakeSink()
    loop, _ = _loop(config, [blank_frame()], monitor_tokens, orchestrator=PersistenceOrchestrator(sink))
    asyncio.run(loop.run())
    assert sink.records[0].ecg_classification == "N/A"
    assert sink.records[0].ecg_confidence == 0.0


def test_unreadable_display_emits_zeroed_record(config):
    config.video.processing_interval = 1
    sink = FakeSink()
    loop, _ = _loop(config, [blank_frame()], [], orchestrator=PersistenceOrchestrator(sink))
    asyncio.run(loop.run())
    record = sink.records[0]
    assert (record.hr, record.spo2, record.abp) == ("0", "0", "0")
    assert loop.zeroed_records == 1


def test_console_output(config, monitor_tokens, capsys):
    config.video.processing_interval = 1
    config.output.console_output = True
    loop, _ = _loop(config, [blank_frame()], monitor_tokens)
    asyncio.run(loop.run())
    out = capsys.readouterr().out
    assert "HR: 72 | SpO2: 97 | ABP: 120/80 | ECG: N/A (0.00)" in out


def test_shutdown_flag_stops_before_next_frame(config, monitor_tokens):
    shutdown = ShutdownFlag()
    shutdown.request()
    loop, ocr = _loop(config, [blank_frame()] * 5, monitor_tokens, shutdown=shutdown)
    assert asyncio.run(loop.run()) == EXIT_OK
    assert loop.frame_count == 0


def test_shutdown_flag_is_a_signal_handler():
    shutdown = ShutdownFlag()
    shutdown.request(2, None)
    assert shutdown.requested


def test_lost_source_exits_with_failure(config, monitor_tokens):
    # One frame, then an empty read mid-file whose reconnect fails
    loop, _ = _loop(config, [blank_frame(), None, blank_frame()], monitor_tokens, open_results=[True, False])
    assert asyncio.run(loop.run()) == EXIT_FAILURE
    assert loop.frame_count == 1


def test_close_releases_in_order(config, monitor_tokens, tmp_path):
    events = []
    csv_sink = RecordingCSV(str(tmp_path / "out.csv"), events)
    csv_sink.open()
    loop, _ = _loop(
        config,
        [],
        monitor_tokens,
        events=events,
        classifier=Classifier(events),
        csv_sink=csv_sink,
        database=FakeSink(events=events),
    )
    asyncio.run(loop.close())
    assert events == ["video", "csv", "ocr", "classifier", "database"]


def test_close_continues_after_a_failing_step(config, monitor_tokens):
    events = []

    class BrokenOCR(FakeOCR):
        def end(self):
            raise RuntimeError("already gone")

    source = FakeVideoSource(events=events)
    acquisition = AcquisitionController(source, 0, sleep=lambda s: None)
    loop = SamplingLoop(config, acquisition, BrokenOCR(), VitalSignExtractor(), database=FakeSink(events=events))
    asyncio.run(loop.close())
    assert events == ["video", "database"]


def test_health_check_runs_on_interval(config, monitor_tokens, caplog):
    config.monitoring.health_check_interval_sec = 10
    ticks = iter([0, 5, 12, 13])
    caplog.set_level("INFO", logger="vitalsign.sampling")
    loop, _ = _loop(config, [blank_frame()] * 3, monitor_tokens, database=FakeSink(), clock=lambda: next(ticks))
    asyncio.run(loop.run())
    health = [r for r in caplog.records if r.getMessage().startswith("Health:")]
    assert len(health) == 1
    assert "frames=2" in health[0].getMessage()
    assert "db=ok" in health[0].getMessage()
