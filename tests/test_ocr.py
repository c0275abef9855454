from vitalsign.extraction.ocr import TesseractEngine


def test_tokens_from_data_skips_empty_and_structural_rows():
    data = {
        "text": ["", "HR", "  ", "72", "x"],
        "conf": ["-1", "91.5", "-1", 88, -1],
        "left": [0, 10, 0, 60, 5],
        "top": [0, 20, 0, 20, 5],
        "width": [640, 30, 0, 25, 5],
        "height": [480, 15, 0, 15, 5],
    }
    tokens = TesseractEngine._tokens_from_data(data)
    assert [t.text for t in tokens] == ["HR", "72"]
    assert tokens[0].confidence == 91.5
    assert tokens[1].bbox == (60, 20, 25, 15)


def test_config_string():
    assert TesseractEngine(page_segmentation_mode=6).config_string == "--psm 6"
    engine = TesseractEngine(page_segmentation_mode=11, tesseract_config="--oem 1")
    assert engine.config_string == "--psm 11 --oem 1"


def test_from_config(config):
    config.ocr.language = "eng+deu"
    config.ocr.page_segmentation_mode = 6
    engine = TesseractEngine.from_config(config)
    assert engine.language == "eng+deu"
    assert engine.config_string == "--psm 6"
