"""
API integration tests for the analysis endpoints.

Tests the complete request path:
- base64 buffer decoding
- success responses for every analysis
- 400 for malformed requests, 422 for rejected buffers
"""

import pytest


class TestStatisticsEndpoint:
    """Test /v1/analysis/statistics"""

    def test_red_image(self, test_client, red_2x2, encode_pixels):
        response = test_client.post("/v1/analysis/statistics", json={"pixels_b64": encode_pixels(red_2x2)})

        assert response.status_code == 200
        data = response.json()
        assert data["pixel_count"] == 4
        assert data["histogram"]["red"][255] == 4
        assert len(data["histogram"]["green"]) == 256
        assert data["balance"]["red_pct"] == pytest.approx(100.0)
        assert data["grayscale_average"] == pytest.approx(76.245)

    def test_data_url_prefix_is_stripped(self, test_client, red_2x2, encode_pixels):
        payload = "data:application/octet-stream;base64," + encode_pixels(red_2x2)

        response = test_client.post("/v1/analysis/statistics", json={"pixels_b64": payload})

        assert response.status_code == 200

    def test_invalid_base64(self, test_client):
        response = test_client.post("/v1/analysis/statistics", json={"pixels_b64": "not base64!!"})

        assert response.status_code == 400
        assert "Invalid base64" in response.json()["detail"]

    def test_buffer_length(self, test_client, encode_pixels):
        response = test_client.post(
            "/v1/analysis/statistics",
            json={"pixels_b64": encode_pixels(bytes([255, 0, 0, 255, 1]))}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_buffer_length"

    def test_empty_buffer(self, test_client):
        response = test_client.post("/v1/analysis/statistics", json={"pixels_b64": ""})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "empty_image"

    def test_black_image(self, test_client, make_rgba, encode_pixels):
        response = test_client.post(
            "/v1/analysis/statistics",
            json={"pixels_b64": encode_pixels(make_rgba([(0, 0, 0)] * 4))}
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "degenerate_balance"
        assert detail["message"]

    def test_missing_body_field(self, test_client):
        response = test_client.post("/v1/analysis/statistics", json={})
        assert response.status_code == 422


class TestSaturationAndLuminanceEndpoints:

    def test_saturation(self, test_client, red_2x2, encode_pixels):
        response = test_client.post("/v1/analysis/saturation", json={"pixels_b64": encode_pixels(red_2x2)})

        assert response.status_code == 200
        assert response.json() == {"pixel_count": 4, "saturation": pytest.approx(1.0)}

    def test_luminance(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/luminance",
            json={"pixels_b64": encode_pixels(red_2x2), "width": 2, "height": 2}
        )

        assert response.status_code == 200
        assert response.json()["average_luminance"] == pytest.approx(0.299)

    def test_luminance_requires_dimensions(self, test_client, red_2x2, encode_pixels):
        response = test_client.post("/v1/analysis/luminance", json={"pixels_b64": encode_pixels(red_2x2)})
        assert response.status_code == 400

    def test_luminance_dimension_mismatch(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/luminance",
            json={"pixels_b64": encode_pixels(red_2x2), "width": 3, "height": 3}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "dimension_mismatch"

    def test_tonal_analysis(self, test_client, make_rgba, encode_pixels):
        pixels = make_rgba([(0, 0, 0), (255, 255, 255)])

        response = test_client.post("/v1/analysis/luminance/tonal", json={"pixels_b64": encode_pixels(pixels)})

        assert response.status_code == 200
        data = response.json()
        assert len(data["histogram"]) == 256
        assert data["regions"]["dark_regions"]["percentage"] == pytest.approx(50.0)
        assert data["dynamic_range"]["effective_range"] == 255.0
        assert data["gamma_curve"]["estimated_gamma"] is None
        assert len(data["clipping"]["recommendations"]) == 3
        assert [r["range"] for r in data["brightness_distribution"]["distribution"]] == [
            "Very Dark", "Dark", "Medium", "Bright", "Very Bright"
        ]


class TestDominantColorsEndpoint:
    """Test /v1/analysis/dominant-colors"""

    def test_single_color(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/dominant-colors?k=1&seed=7",
            json={"pixels_b64": encode_pixels(red_2x2)}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["k"] == 1
        assert data["seed"] == 7
        assert data["colors"] == [{"r": 255, "g": 0, "b": 0, "hex": "#FF0000"}]
        assert data["cluster_sizes"] == [4]
        assert data["converged"] is True

    def test_same_seed_same_colors(self, test_client, encode_pixels):
        raw = bytes((i * 37 + 11) % 256 for i in range(4 * 300))
        body = {"pixels_b64": encode_pixels(raw)}

        first = test_client.post("/v1/analysis/dominant-colors?k=4&seed=123", json=body)
        second = test_client.post("/v1/analysis/dominant-colors?k=4&seed=123", json=body)

        assert first.status_code == 200
        assert first.json() == second.json()
        assert len(first.json()["colors"]) == 4

    def test_k_above_pixel_count(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/dominant-colors?k=5&seed=1",
            json={"pixels_b64": encode_pixels(red_2x2)}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_k"

    def test_k_above_configured_limit(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/dominant-colors?k=1000",
            json={"pixels_b64": encode_pixels(red_2x2)}
        )
        assert response.status_code == 400

    def test_k_zero_rejected_by_query_validation(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/dominant-colors?k=0",
            json={"pixels_b64": encode_pixels(red_2x2)}
        )
        assert response.status_code == 422

    def test_zero_iterations(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/dominant-colors?k=2&max_iterations=0&seed=3",
            json={"pixels_b64": encode_pixels(red_2x2)}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["iterations"] == 0
        assert data["converged"] is False
        assert len(data["colors"]) == 2


class TestReportEndpoint:
    """Test /v1/analysis/report"""

    def test_full_report(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/report?k=1&seed=0&include_luminance=true",
            json={"pixels_b64": encode_pixels(red_2x2), "width": 2, "height": 2}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["request_id"].startswith("analysis-")
        assert data["pixel_count"] == 4
        assert data["saturation"] == pytest.approx(1.0)
        assert data["average_luminance"] == pytest.approx(0.299)
        assert data["dominant_colors"]["colors"][0]["hex"] == "#FF0000"
        assert data["luminance"] is not None
        assert data["aspect_ratio"] == {"width": 1.0, "height": 1.0}
        assert data["footprint"]["rendering_impact"] == "Low"

    def test_minimal_report(self, test_client, red_2x2, encode_pixels):
        response = test_client.post("/v1/analysis/report", json={"pixels_b64": encode_pixels(red_2x2)})

        assert response.status_code == 200
        data = response.json()
        assert data["dominant_colors"] is None
        assert data["luminance"] is None
        assert data["average_luminance"] is None
        assert data["footprint"] is None

    def test_single_dimension(self, test_client, red_2x2, encode_pixels):
        response = test_client.post(
            "/v1/analysis/report",
            json={"pixels_b64": encode_pixels(red_2x2), "width": 2}
        )
        assert response.status_code == 400

    def test_black_image(self, test_client, make_rgba, encode_pixels):
        response = test_client.post(
            "/v1/analysis/report",
            json={"pixels_b64": encode_pixels(make_rgba([(0, 0, 0)]))}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "degenerate_balance"


class TestUtilityEndpoints:

    def test_aspect_ratio(self, test_client):
        response = test_client.get("/v1/utils/aspect-ratio?width=1920&height=1080")

        assert response.status_code == 200
        assert response.json() == {"width": 16.0, "height": 9.0}

    def test_aspect_ratio_zero(self, test_client):
        response = test_client.get("/v1/utils/aspect-ratio?width=0&height=0")
        assert response.status_code == 400

    def test_format_size(self, test_client):
        response = test_client.get("/v1/utils/format-size?size_in_bytes=2048")

        assert response.status_code == 200
        assert response.json()["formatted"] == "2.00 KB"


class TestDecodeOversize:

    def test_buffer_above_limit(self, test_client, monkeypatch, encode_pixels):
        from pixelscope.config import Config
        monkeypatch.setattr(Config, "MAX_BUFFER_MB", 0)

        response = test_client.post(
            "/v1/analysis/saturation",
            json={"pixels_b64": encode_pixels(bytes(8))}
        )

        assert response.status_code == 400
        assert "too large" in response.json()["detail"]

