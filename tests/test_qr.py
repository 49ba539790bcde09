"""
Tests for the login code endpoints GET /qr/text and GET /qr/photo.
"""

import io

from PIL import Image

from wabridge.utils import render_qr_png


CODE = "2@Yk0nQx8r5Z1vJt3sNfWm9cQ==,AbCdEfGhIjKlMnOp=,QrStUvWxYz0123=,4567890abc="


class TestQRText:
    """Test the text endpoint."""

    def test_returns_code_verbatim(self, client, bridge):
        bridge.codes.save(CODE)

        response = client.get("/qr/text")

        assert response.status_code == 200
        assert response.json() == {"qr_code": CODE}

    def test_latest_code_wins(self, client, bridge):
        bridge.codes.save("2@first")
        bridge.codes.save(CODE)

        assert client.get("/qr/text").json()["qr_code"] == CODE

    def test_missing_code(self, client):
        response = client.get("/qr/text")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate QR code"}


class TestQRPhoto:
    """Test the image endpoint."""

    def test_returns_png(self, client, bridge):
        bridge.codes.save(CODE)

        response = client.get("/qr/photo")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        image = Image.open(io.BytesIO(response.content))
        assert image.format == "PNG"
        assert image.size == (256, 256)

    def test_image_is_black_and_white(self, client, bridge):
        bridge.codes.save(CODE)

        image = Image.open(io.BytesIO(client.get("/qr/photo").content)).convert("L")
        assert set(image.getdata()) == {0, 255}

    def test_configured_size(self, client, bridge):
        bridge.settings.QR_IMAGE_SIZE = 512
        bridge.codes.save(CODE)

        image = Image.open(io.BytesIO(client.get("/qr/photo").content))
        assert image.size == (512, 512)

    def test_missing_code(self, client):
        response = client.get("/qr/photo")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate QR code"}


class TestRenderQR:
    """Test the renderer directly."""

    def test_fixed_dimension_regardless_of_length(self):
        short = Image.open(io.BytesIO(render_qr_png("x", 256)))
        long = Image.open(io.BytesIO(render_qr_png(CODE * 3, 256)))
        assert short.size == long.size == (256, 256)
