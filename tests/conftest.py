import pytest

from vitalsign.config import get_default_config
from vitalsign.models import RecognizedToken


@pytest.fixture
def make_token():
    """Build a token whose bounding box is centered on (cx, cy)."""
    def _make(text, cx=0, cy=0, confidence=90.0, w=0, h=0):
        return RecognizedToken(text=text, confidence=confidence, bbox=(cx - w // 2, cy - h // 2, w, h))
    return _make


@pytest.fixture
def monitor_tokens(make_token):
    """Tokens for a display reading HR 72, SpO2 97, ABP 120/80."""
    return [
        make_token("SpO2", 10, 50),
        make_token("97", 60, 50),
        make_token("HR", 10, 0),
        make_token("72", 60, 0),
        make_token("ABP", 10, 100),
        make_token("120/80", 60, 100),
    ]


@pytest.fixture
def config(tmp_path):
    cfg = get_default_config()
    cfg._base_path = tmp_path
    cfg.output.console_output = False
    cfg.output.csv_file = str(tmp_path / "out.csv")
    cfg.database.path = str(tmp_path / "vital_signs.db")
    cfg.logging.file = ""
    return cfg
