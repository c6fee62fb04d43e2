"""
Bitmap decoding for signature and image field payloads.
"""

# Standard Library
import io
import warnings

# PIP3 modules
import PIL.Image

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields


DecodeError = pfs.errors.DecodeError
ValidationError = pfs.errors.ValidationError
parse_data_uri = pfs.fields.parse_data_uri

IMAGE_CODECS = pfs.config.IMAGE_CODECS


#============================================
def decode_bitmap(data: bytes, codecs: tuple[str, ...] = IMAGE_CODECS) -> PIL.Image.Image:
	"""
	Decode bitmap bytes, trying each codec in order.

	Args:
		data: Encoded image bytes.
		codecs: Pillow format names, primary first.

	Returns:
		Loaded PIL image.
	"""
	failures: list[str] = []
	for codec in codecs:
		try:
			with warnings.catch_warnings():
				# oversized images fail instead of decoding in full
				warnings.simplefilter("error", PIL.Image.DecompressionBombWarning)
				image = PIL.Image.open(io.BytesIO(data), formats=[codec])
				image.load()
		except (OSError, ValueError, PIL.Image.DecompressionBombError, PIL.Image.DecompressionBombWarning) as error:
			failures.append(f"{codec}: {error}")
			continue
		if image.width <= 0 or image.height <= 0:
			failures.append(f"{codec}: empty image")
			continue
		return image
	raise DecodeError("Bitmap could not be decoded (" + "; ".join(failures) + ")")


#============================================
def decode_data_uri(text: str, codecs: tuple[str, ...] = IMAGE_CODECS) -> PIL.Image.Image:
	"""
	Decode a data URI bitmap.

	Args:
		text: Data URI string.
		codecs: Pillow format names, primary first.

	Returns:
		Loaded PIL image.
	"""
	try:
		_mime_type, data = parse_data_uri(text)
	except ValidationError as error:
		raise DecodeError(str(error)) from error
	return decode_bitmap(data, codecs)


#============================================
def validate_bitmap_uri(text: str) -> None:
	"""
	Reject a data URI that does not hold a decodable bitmap.

	Args:
		text: Data URI string.
	"""
	_mime_type, data = parse_data_uri(text)
	try:
		decode_bitmap(data)
	except DecodeError as error:
		raise ValidationError(str(error)) from error
