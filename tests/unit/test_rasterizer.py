"""Unit tests for page rasterization (scale cap, binarization, JPEG output)."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from insolvency_service.extraction.document import PdfDocument
from insolvency_service.extraction.errors import RasterizationError
from insolvency_service.extraction.rasterizer import binarize, effective_scale, rasterize_page


class TestEffectiveScale:
    def test_default_scale_within_cap(self):
        assert effective_scale(612, scale=2.0, max_width=2000) == 2.0

    def test_wide_page_is_capped(self):
        s = effective_scale(1500, scale=2.0, max_width=2000)
        assert s == pytest.approx(2000 / 1500)
        assert 1500 * s <= 2000

    def test_zero_width_keeps_scale(self):
        assert effective_scale(0, scale=2.0, max_width=2000) == 2.0


class TestBinarize:
    def test_only_black_and_white(self):
        arr = np.array([[[10, 10, 10], [127, 127, 127], [128, 128, 128], [250, 240, 230]]], dtype=np.uint8)
        out = np.asarray(binarize(Image.fromarray(arr)))
        assert out.tolist() == [[0, 0, 255, 255]]

    def test_threshold_uses_channel_average(self):
        # (255 + 0 + 128) // 3 == 127 -> black
        arr = np.array([[[255, 0, 128]]], dtype=np.uint8)
        assert np.asarray(binarize(Image.fromarray(arr))).tolist() == [[0]]


class TestRasterizePage:
    def test_produces_jpeg_within_width_cap(self, fake_document):
        doc = fake_document(["text"], size=(1500.0, 1000.0))
        image = rasterize_page(doc, 1, scale=2.0, max_width=2000)
        assert image.page_number == 1
        assert image.mime_type == "image/jpeg"
        assert image.width <= 2000
        assert image.content[:2] == b"\xff\xd8"
        assert image.data_url.startswith("data:image/jpeg;base64,")

    def test_output_is_monochrome(self, fake_document):
        doc = fake_document(["text"], size=(100.0, 100.0))
        image = rasterize_page(doc, 1)
        with Image.open(io.BytesIO(image.content)) as img:
            assert img.mode == "L"

    def test_render_failure_is_tagged_with_page(self, fake_document):
        doc = fake_document(["a", "b"], render_error=RuntimeError("no renderer"))
        with pytest.raises(RasterizationError) as exc_info:
            rasterize_page(doc, 2)
        assert exc_info.value.page_number == 2
        assert "no renderer" in str(exc_info.value)

    def test_real_pdf_page(self, text_pdf_bytes: bytes):
        with PdfDocument.open(text_pdf_bytes) as doc:
            image = rasterize_page(doc, 1, scale=1.0, max_width=2000)
        assert image.width == pytest.approx(595, abs=1)
        assert image.height > image.width  # A4 portrait
