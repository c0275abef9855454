from vitalsign.extraction.extractor import VitalSignExtractor
from vitalsign.models import VitalSigns


def test_full_reading(monitor_tokens):
    vitals = VitalSignExtractor().extract(monitor_tokens)
    assert vitals == VitalSigns(hr="72", spo2="97", abp="120/80")


def test_invalid_abp_zeroes_everything(make_token):
    tokens = [
        make_token("HR", 10, 0), make_token("72", 60, 0),
        make_token("SpO2", 10, 50), make_token("97", 60, 50),
        make_token("ABP", 10, 100), make_token("120", 60, 100),
    ]
    extractor = VitalSignExtractor()
    vitals = extractor.extract(tokens)
    assert vitals == VitalSigns("0", "0", "0")
    assert vitals.is_zeroed
    # A zeroed frame never touches the carried SpO2
    assert extractor.carried_spo2 == "81"


def test_no_tokens_zeroes_record():
    assert VitalSignExtractor().extract([]).is_zeroed


def test_missing_spo2_uses_default_before_any_reading(make_token):
    tokens = [make_token("ABP", 0, 0), make_token("120/80", 5, 0)]
    vitals = VitalSignExtractor(default_spo2="81").extract(tokens)
    assert vitals.spo2 == "81"
    assert vitals.abp == "120/80"


def test_missing_spo2_carries_last_valid(monitor_tokens):
    extractor = VitalSignExtractor(default_spo2="81")
    extractor.extract(monitor_tokens)

    # SpO2 row not read at all: the slot stays unmatched
    no_spo2 = [t for t in monitor_tokens if t.text not in ("SpO2", "97")]
    vitals = extractor.extract(no_spo2)
    assert vitals.spo2 == "97"
    assert vitals.spo2 != "81"
    assert vitals.abp == "120/80"
    assert extractor.carried_spo2 == "97"
    assert extractor.spo2_history == ("97",)


def test_low_confidence_spo2_value_is_ignored(make_token):
    tokens = [
        make_token("SpO2", 10, 50), make_token("95", 60, 50, confidence=10),
        make_token("ABP", 10, 100), make_token("120/80", 60, 100),
    ]
    extractor = VitalSignExtractor(default_spo2="81")
    # Without a confident SpO2 value the nearest candidate is the ABP
    values = extractor.match_values(tokens)
    assert values["SpO2"] == "120/80"


def test_spo2_history_is_bounded(make_token):
    extractor = VitalSignExtractor(spo2_history_size=2)
    for value in ("95", "96", "97"):
        extractor.extract([
            make_token("SpO2", 0, 0), make_token(value, 5, 0),
            make_token("ABP", 0, 100), make_token("120/80", 5, 100),
        ])
    assert extractor.spo2_history == ("96", "97")
    assert extractor.carried_spo2 == "97"


def test_last_label_occurrence_wins(make_token):
    tokens = [
        make_token("HR", 0, 0), make_token("60", 5, 0),
        make_token("HR", 0, 200), make_token("88", 5, 200),
    ]
    values = VitalSignExtractor(labels=["HR"]).match_values(tokens)
    assert values == {"HR": "88"}


def test_range_warnings_flag_out_of_range(caplog):
    extractor = VitalSignExtractor(ranges={"hr": (30, 200), "abp_systolic": (70, 200)})
    warnings = extractor.range_warnings(VitalSigns("250", "97", "220/80"))
    assert warnings == ["hr=250 outside 30-200", "abp_systolic=220 outside 70-200"]
    assert "Implausible reading" in caplog.text


def test_range_warnings_skip_zeroed_record():
    extractor = VitalSignExtractor(ranges={"hr": (30, 200)})
    assert extractor.range_warnings(VitalSigns.zeroed()) == []


def test_from_config(config):
    config.vital_signs.default_spo2 = "90"
    config.ocr.confidence_threshold = 70
    extractor = VitalSignExtractor.from_config(config)
    assert extractor.carried_spo2 == "90"
    assert extractor.confidence_threshold == 70
    assert extractor.ranges["spo2"] == (70, 100)
