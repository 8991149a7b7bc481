"""
Unit tests for luminance measurements.

Tests both the normalized BT.601 average and the Rec.709 tonal analysis.
"""

import math

import pytest

from pixelscope.services.analysis.errors import DimensionMismatch, EmptyImage, InvalidBufferLength
from pixelscope.services.analysis.luminance import (
    IDEAL_GAMMA, TONAL_ZONES, analyze_luminance, compute_average_luminance
)
from pixelscope.services.analysis.statistics import compute_statistics


class TestAverageLuminance:
    """Test the 0-1 normalized luminance"""

    def test_pure_red(self, red_2x2):
        assert compute_average_luminance(red_2x2, 2, 2) == pytest.approx(0.299)

    def test_matches_grayscale_average(self, make_rgba):
        pixels = make_rgba([(12, 200, 99), (255, 255, 0), (3, 4, 5), (80, 0, 160)])

        luminance = compute_average_luminance(pixels, 4, 1)
        grayscale = compute_statistics(pixels).grayscale_average

        assert luminance == pytest.approx(grayscale / 255)

    def test_white_is_one(self, make_rgba):
        assert compute_average_luminance(make_rgba([(255, 255, 255)]), 1, 1) == pytest.approx(1.0)

    def test_dimension_mismatch(self, red_2x2):
        with pytest.raises(DimensionMismatch):
            compute_average_luminance(red_2x2, 3, 3)
        with pytest.raises(DimensionMismatch):
            compute_average_luminance(red_2x2, -2, -2)

    def test_empty_buffer(self):
        with pytest.raises(EmptyImage):
            compute_average_luminance(b"", 0, 0)

    def test_buffer_length(self):
        with pytest.raises(InvalidBufferLength):
            compute_average_luminance(bytes(7), 1, 1)


class TestTonalAnalysis:
    """Test analyze_luminance on images with known tonal content"""

    def test_white_image(self, make_rgba):
        analysis = analyze_luminance(make_rgba([(255, 255, 255)] * 4))

        brightness = analysis.brightness_distribution
        assert brightness.mean_brightness == pytest.approx(255.0)
        assert brightness.distribution[-1].label == "Very Bright"
        assert brightness.distribution[-1].percentage == pytest.approx(100.0)
        assert "bright" in brightness.assessment

        assert analysis.histogram[255] == pytest.approx(100.0)
        assert analysis.regions.light_regions.percentage == pytest.approx(100.0)
        assert analysis.regions.light_regions.significance == "Large bright areas might cause glare"

        assert analysis.clipping.highlight_clipping == pytest.approx(100.0)
        assert analysis.clipping.shadow_clipping == 0.0
        assert analysis.clipping.assessment == "Significant highlight clipping"
        assert analysis.clipping.recommendations == ("Reduce exposure to recover highlight detail",)

    def test_black_image(self, make_rgba):
        analysis = analyze_luminance(make_rgba([(0, 0, 0)] * 3))

        assert analysis.brightness_distribution.distribution[0].label == "Very Dark"
        assert analysis.brightness_distribution.distribution[0].percentage == pytest.approx(100.0)
        assert "dark" in analysis.brightness_distribution.assessment
        assert analysis.clipping.assessment == "Notable shadow detail loss"
        assert analysis.dynamic_range.range == 0.0
        assert analysis.dynamic_range.effective_range == 0.0
        assert analysis.dynamic_range.assessment.startswith("Limited dynamic range")

    def test_histogram_is_percent_per_level(self, make_rgba):
        analysis = analyze_luminance(make_rgba([(0, 0, 0), (255, 255, 255), (255, 255, 255), (0, 0, 0)]))

        assert len(analysis.histogram) == 256
        assert sum(analysis.histogram) == pytest.approx(100.0)
        assert analysis.histogram[0] == pytest.approx(50.0)
        assert analysis.histogram[255] == pytest.approx(50.0)

    def test_high_contrast_image(self, make_rgba):
        analysis = analyze_luminance(make_rgba([(0, 0, 0), (255, 255, 255)]))

        assert analysis.regions.dark_regions.percentage == pytest.approx(50.0)
        assert analysis.regions.light_regions.percentage == pytest.approx(50.0)
        assert analysis.regions.assessment == "High contrast image with potential loss of mid-tone details"

        dynamic_range = analysis.dynamic_range
        assert dynamic_range.range == pytest.approx(255.0)
        assert dynamic_range.effective_range == 255.0
        assert dynamic_range.assessment.startswith("Very high dynamic range")

        zones = {z.zone: z.presence for z in dynamic_range.zones}
        assert list(zones) == list(TONAL_ZONES)
        assert zones["Shadows"] == pytest.approx(50.0)
        assert zones["Highlights"] == pytest.approx(50.0)
        assert zones["Mid-tones"] == 0.0

        clipping = analysis.clipping
        assert clipping.assessment == "Significant detail loss in both shadows and highlights"
        assert len(clipping.recommendations) == 3

    def test_brightness_ranges_sum_to_hundred(self, make_rgba):
        pixels = make_rgba([(v, v, v) for v in range(0, 256, 5)])

        analysis = analyze_luminance(pixels)

        total = sum(r.percentage for r in analysis.brightness_distribution.distribution)
        assert total == pytest.approx(100.0)
        assert sum(z.presence for z in analysis.dynamic_range.zones) == pytest.approx(100.0)

    def test_mid_gray_gamma(self, make_rgba):
        analysis = analyze_luminance(make_rgba([(128, 128, 128)] * 2))
        gamma = analysis.gamma_curve

        expected = math.log(128 / 255) / math.log(0.5)
        assert gamma.estimated_gamma == pytest.approx(expected)
        assert gamma.ideal_gamma == IDEAL_GAMMA
        assert gamma.correction == pytest.approx(IDEAL_GAMMA / expected)
        assert gamma.assessment.startswith("Image appears dark")
        assert analysis.regions.assessment == "Low contrast image that might appear flat"
        assert analysis.clipping.assessment == "Good detail preservation across tonal range"
        assert analysis.clipping.recommendations == ()

    def test_gamma_needs_mid_gray_pixels(self, make_rgba):
        gamma = analyze_luminance(make_rgba([(255, 255, 255)])).gamma_curve

        assert gamma.estimated_gamma is None
        assert gamma.correction is None
        assert gamma.ideal_gamma == IDEAL_GAMMA

    def test_empty_buffer(self):
        with pytest.raises(EmptyImage):
            analyze_luminance(b"")
