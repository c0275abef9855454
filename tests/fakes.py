"""Hand-rolled collaborators shared by the tests."""

import numpy as np


def blank_frame(width=64, height=48):
    return np.zeros((height, width, 3), dtype=np.uint8)


class FakeVideoSource:
    """Serves a fixed list of frames; None entries simulate dropped reads."""

    def __init__(self, frames=(), open_results=None, events=None):
        self.frames = list(frames)
        self.open_results = list(open_results) if open_results is not None else None
        self.open_calls = 0
        self.release_calls = 0
        self.events = events

    def open(self, descriptor):
        self.open_calls += 1
        if self.open_results is None:
            return True
        return self.open_results.pop(0) if self.open_results else False

    def read(self):
        if not self.frames:
            return None
        return self.frames.pop(0)

    def at_end(self):
        return not self.frames

    def release(self):
        self.release_calls += 1
        if self.events is not None:
            self.events.append("video")


class FakeOCR:
    """Returns the same tokens for every frame."""

    def __init__(self, tokens=(), events=None):
        self.tokens = list(tokens)
        self.frames_seen = 0
        self.events = events

    def init(self):
        pass

    def recognize(self, frame):
        self.frames_seen += 1
        return iter(self.tokens)

    def end(self):
        if self.events is not None:
            self.events.append("ocr")


class FakeSink:
    """Async sink whose write/reconnect outcomes are scripted."""

    def __init__(self, writes=(), reconnects=(), events=None):
        self.write_results = list(writes)
        self.reconnect_results = list(reconnects)
        self.write_calls = 0
        self.reconnect_calls = 0
        self.records = []
        self.events = events

    async def write(self, record):
        self.write_calls += 1
        ok = self.write_results.pop(0) if self.write_results else True
        if ok:
            self.records.append(record)
        return ok

    async def reconnect(self, max_attempts=3, delay_ms=1000):
        self.reconnect_calls += 1
        return self.reconnect_results.pop(0) if self.reconnect_results else True

    async def health_check(self):
        return True

    async def close(self):
        if self.events is not None:
            self.events.append("database")


class FakeRunner:
    """Stands in for the Edge Impulse ImpulseRunner."""

    def __init__(self, scores=None, width=4, height=4, labels=None, fail_init=False, fail_classify=False):
        self.scores = scores if scores is not None else {"normal": 0.9, "afib": 0.1}
        self.width = width
        self.height = height
        self.labels = labels if labels is not None else list(self.scores)
        self.fail_init = fail_init
        self.fail_classify = fail_classify
        self.features = None
        self.stopped = False

    def init(self):
        if self.fail_init:
            raise RuntimeError("bad model file")
        return {
            "project": {"owner": "test", "name": "ecg"},
            "model_parameters": {
                "image_input_width": self.width,
                "image_input_height": self.height,
                "labels": self.labels,
            },
        }

    def classify(self, features):
        if self.fail_classify:
            raise RuntimeError("runner crashed")
        self.features = features
        return {"result": {"classification": dict(self.scores)}}

    def stop(self):
        self.stopped = True
