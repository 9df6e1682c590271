"""Tests for the OCR adapter's coordinate conversion and failure handling."""

import pytest
from PIL import Image

from score_metadata.config import Config
from score_metadata.contracts import BoundingBox, OCRRegion, PageRaster
from score_metadata.extractors.ocr_adapter import MockOCRAdapter, OCRAdapter, poly_to_unit_bbox


def make_raster(width=200, height=100) -> PageRaster:
    return PageRaster(
        image=Image.new("RGB", (width, height), (255, 255, 255)),
        scale=2.0,
        page_width=width / 2,
        page_height=height / 2,
    )


class FakeReader:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.kwargs = None

    def readtext(self, image, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.results


class TestPolyToUnitBBox:
    def test_top_left_quadrant_flips_to_upper_half(self):
        bbox = poly_to_unit_bbox([[0, 0], [100, 0], [100, 50], [0, 50]], 200, 100)
        assert bbox == BoundingBox(x=0.0, y=0.5, width=0.5, height=0.5)
        assert bbox.mid_y == pytest.approx(0.75)

    def test_bottom_right_corner(self):
        bbox = poly_to_unit_bbox([[150, 80], [200, 80], [200, 100], [150, 100]], 200, 100)
        assert bbox.x == pytest.approx(0.75)
        assert bbox.y == pytest.approx(0.0)
        assert bbox.height == pytest.approx(0.2)

    def test_clamped_to_page(self):
        bbox = poly_to_unit_bbox([[-10, -10], [250, -10], [250, 120], [-10, 120]], 200, 100)
        assert bbox == BoundingBox(x=0.0, y=0.0, width=1.0, height=1.0)


class TestOCRAdapter:
    def test_regions_from_reader(self):
        adapter = OCRAdapter()
        adapter._reader = FakeReader([
            ([[50, 5], [150, 5], [150, 15], [50, 15]], "Moonlight Sonata", 0.93),
            ([[0, 0], [10, 0], [10, 10], [0, 10]], "   ", 0.5),
            ([[90, 90], [110, 90], [110, 98], [90, 98]], "1", 1.2),
        ])

        regions = adapter.recognize(make_raster())

        assert [r.text for r in regions] == ["Moonlight Sonata", "1"]
        assert regions[0].bbox.mid_x == pytest.approx(0.5)
        assert regions[0].bbox.mid_y == pytest.approx(0.9)
        assert regions[0].confidence == pytest.approx(0.93)
        assert regions[1].confidence == 1.0

    def test_engine_failure_returns_none(self):
        adapter = OCRAdapter()
        adapter._reader = FakeReader(error=RuntimeError("unsupported image"))
        assert adapter.recognize(make_raster()) is None

    def test_load_failure_returns_none(self, monkeypatch):
        def failing_load(self):
            raise ImportError("No module named 'easyocr'")

        monkeypatch.setattr(OCRAdapter, "load", failing_load)
        assert OCRAdapter().recognize(make_raster()) is None

    @pytest.mark.parametrize("config,decoder", [
        (Config(), "wordbeamsearch"),
        (Config(ocr_language_correction=False), "beamsearch"),
        (Config(ocr_recognition_level="fast"), "greedy"),
    ])
    def test_decoder_follows_accuracy_settings(self, config, decoder):
        adapter = OCRAdapter(config)
        reader = FakeReader()
        adapter._reader = reader
        adapter.recognize(make_raster())
        assert reader.kwargs["decoder"] == decoder
        assert reader.kwargs["paragraph"] is False


def test_mock_adapter():
    region = OCRRegion("Etude", BoundingBox(0.4, 0.8, 0.2, 0.05), 0.9)
    assert MockOCRAdapter([region]).recognize(make_raster()) == [region]
    assert MockOCRAdapter(None).recognize(make_raster()) is None
