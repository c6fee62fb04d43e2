"""
Burn rendered fields into an existing PDF.
"""

# Standard Library
import datetime
import io
import pathlib

# PIP3 modules
import pypdf
import pypdf.errors

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields
import pdf_field_stamper.render


Field = pfs.fields.Field
RenderConfig = pfs.config.RenderConfig
StampResult = pfs.config.StampResult
ValidationError = pfs.errors.ValidationError


#============================================
def open_pdf(pdf_bytes: bytes) -> pypdf.PdfReader:
	"""
	Open PDF bytes, mapping parse failures to ValidationError.

	Args:
		pdf_bytes: PDF file content.

	Returns:
		PdfReader with at least one page.
	"""
	try:
		reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
		page_count = len(reader.pages)
	except (pypdf.errors.PyPdfError, ValueError, OSError) as error:
		raise ValidationError(f"Input is not a readable PDF: {error}") from error
	if page_count == 0:
		raise ValidationError("Input PDF has no pages")
	return reader


#============================================
def read_page_size(pdf_bytes: bytes) -> tuple[float, float]:
	"""
	Read the first page's size in points.

	Args:
		pdf_bytes: PDF file content.

	Returns:
		Tuple of (width, height).
	"""
	reader = open_pdf(pdf_bytes)
	box = reader.pages[0].mediabox
	return (float(box.width), float(box.height))


#============================================
def stamp_pdf(
	pdf_bytes: bytes,
	fields: list[Field],
	config: RenderConfig | None = None,
	today: datetime.date | None = None,
	verbose: bool = False,
) -> StampResult:
	"""
	Render fields at the first page's size and merge them onto that page.

	Other pages are copied unchanged.

	Args:
		pdf_bytes: Source PDF content.
		fields: Fields in drawing order.
		config: Render configuration.
		today: Date used for unfilled date fields.
		verbose: Print per-field progress.

	Returns:
		StampResult with the finished PDF bytes.
	"""
	reader = open_pdf(pdf_bytes)
	first_page = reader.pages[0]
	box = first_page.mediabox
	page_width = float(box.width)
	page_height = float(box.height)
	if verbose:
		print(f"Dimensions: {page_width:.1f} x {page_height:.1f} points")
		print(f"Fields to process: {len(fields)}")

	render_result = pfs.render.render_page(
		fields,
		page_width,
		page_height,
		config=config,
		today=today,
		verbose=verbose,
	)
	overlay_reader = pypdf.PdfReader(io.BytesIO(render_result.pdf_bytes))
	overlay_page = overlay_reader.pages[0]

	writer = pypdf.PdfWriter()
	for index, page in enumerate(reader.pages):
		if index == 0:
			# overlay origin is the page's lower-left corner, mediabox may be offset
			transform = pypdf.Transformation().translate(float(box.left), float(box.bottom))
			page.merge_transformed_page(overlay_page, transform)
		writer.add_page(page)

	output = io.BytesIO()
	writer.write(output)
	return StampResult(
		pdf_bytes=output.getvalue(),
		page_count=len(reader.pages),
		render=render_result,
	)


#============================================
def stamp_file(
	input_path: pathlib.Path,
	fields_path: pathlib.Path,
	output_path: pathlib.Path,
	config: RenderConfig | None = None,
	verbose: bool = False,
) -> StampResult:
	"""
	Stamp a fields JSON file onto a PDF file.

	Args:
		input_path: Source PDF path.
		fields_path: Fields JSON path.
		output_path: Output PDF path.
		config: Render configuration.
		verbose: Print per-field progress.

	Returns:
		StampResult.
	"""
	fields = pfs.fields.load_fields_json(fields_path.read_text(encoding="utf-8"))
	result = stamp_pdf(input_path.read_bytes(), fields, config=config, verbose=verbose)
	output_path.write_bytes(result.pdf_bytes)
	return result
