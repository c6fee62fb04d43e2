"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import io
import os
import struct
import sys
import zlib

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# PIP3 modules
import PIL.Image
import pytest

# local repo modules
import pdf_field_stamper.fields


#============================================
def make_image_uri(
	width: int,
	height: int,
	image_format: str = "PNG",
	color: tuple[int, int, int] = (0, 0, 0),
) -> str:
	"""
	Build a solid-color bitmap data URI.

	Args:
		width: Image width in pixels.
		height: Image height in pixels.
		image_format: Pillow format name.
		color: RGB fill color.

	Returns:
		Data URI string.
	"""
	image = PIL.Image.new("RGB", (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format=image_format)
	mime_type = "image/png" if image_format == "PNG" else "image/jpeg"
	return pdf_field_stamper.fields.build_data_uri(buffer.getvalue(), mime_type)


#============================================
def make_oversized_png_uri(width: int = 20000, height: int = 20000) -> str:
	"""
	Build a header-only PNG that claims a huge pixel size.

	Args:
		width: Declared width in pixels.
		height: Declared height in pixels.

	Returns:
		Data URI string.
	"""
	def chunk(tag: bytes, body: bytes) -> bytes:
		crc = zlib.crc32(tag + body) & 0xFFFFFFFF
		return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", crc)

	header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
	data = b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b"")
	return pdf_field_stamper.fields.build_data_uri(data, "image/png")


@pytest.fixture
def png_uri() -> str:
	return make_image_uri(40, 20)


@pytest.fixture
def jpeg_uri() -> str:
	return make_image_uri(30, 60, image_format="JPEG")
