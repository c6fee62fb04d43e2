"""
Render placed fields onto a fixed-size PDF page.
"""

# Standard Library
import datetime
import io

# PIP3 modules
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields
import pdf_field_stamper.geometry
import pdf_field_stamper.imaging


Field = pfs.fields.Field
PageBox = pfs.geometry.PageBox
RenderConfig = pfs.config.RenderConfig
RenderResult = pfs.config.RenderResult
DecodeError = pfs.errors.DecodeError
ValidationError = pfs.errors.ValidationError

FIELD_SIGNATURE = pfs.config.FIELD_SIGNATURE
FIELD_TEXT = pfs.config.FIELD_TEXT
FIELD_IMAGE = pfs.config.FIELD_IMAGE
FIELD_DATE = pfs.config.FIELD_DATE
FIELD_CHOICE = pfs.config.FIELD_CHOICE
DEFAULT_CHOICE_OPTIONS = pfs.config.DEFAULT_CHOICE_OPTIONS
UNSET_DRAWN_KINDS = pfs.config.UNSET_DRAWN_KINDS
TEXT_SIZE_RATIO = pfs.config.TEXT_SIZE_RATIO
CHOICE_TEXT_SIZE_RATIO = pfs.config.CHOICE_TEXT_SIZE_RATIO
BASELINE_DROP_RATIO = pfs.config.BASELINE_DROP_RATIO
CHOICE_RADIUS_RATIO = pfs.config.CHOICE_RADIUS_RATIO
CHOICE_DOT_RATIO = pfs.config.CHOICE_DOT_RATIO
CHOICE_BORDER_WIDTH = pfs.config.CHOICE_BORDER_WIDTH
CHOICE_LABEL_GAP = pfs.config.CHOICE_LABEL_GAP
CHOICE_LABEL_TRIM = pfs.config.CHOICE_LABEL_TRIM


#============================================
def compute_font_size(box_height: float, ratio: float, max_size: float) -> float:
	"""
	Derive a font size from the box height, capped at max_size.
	"""
	return min(box_height * ratio, max_size)


#============================================
def fit_text_to_width(text: str, font_name: str, font_size: float, max_width: float) -> str:
	"""
	Trim text from the right until it fits a width.

	Args:
		text: Text to draw.
		font_name: ReportLab font name.
		font_size: Font size in points.
		max_width: Available width in points.

	Returns:
		The longest prefix of text that fits, possibly empty.
	"""
	if max_width <= 0:
		return ""
	string_width = reportlab.pdfbase.pdfmetrics.stringWidth
	if string_width(text, font_name, font_size) <= max_width:
		return text
	low = 0
	high = len(text)
	# binary search on prefix length; widths grow with length
	while low < high:
		middle = (low + high + 1) // 2
		if string_width(text[:middle], font_name, font_size) <= max_width:
			low = middle
		else:
			high = middle - 1
	return text[:low]


#============================================
def draw_text_line(
	pdf: reportlab.pdfgen.canvas.Canvas,
	text: str,
	box: PageBox,
	font_name: str,
	font_size: float,
	left: float,
	max_width: float,
) -> str:
	"""
	Draw one left-aligned line vertically centered in a box.

	Args:
		pdf: ReportLab canvas.
		text: Text to draw.
		box: Page-space box.
		font_name: ReportLab font name.
		font_size: Font size in points.
		left: Text x position.
		max_width: Width available for the text.

	Returns:
		The text actually drawn after clipping.
	"""
	clipped = fit_text_to_width(text, font_name, font_size, max_width)
	if not clipped or font_size <= 0:
		return ""
	pdf.setFont(font_name, font_size)
	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	baseline_y = box.y + box.height / 2.0 - font_size * BASELINE_DROP_RATIO
	pdf.drawString(left, baseline_y, clipped)
	return clipped


#============================================
def draw_image_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: Field,
	box: PageBox,
	config: RenderConfig,
	today: datetime.date,
) -> str:
	"""
	Draw a signature or image bitmap, fitted and centered in its box.

	Args:
		pdf: ReportLab canvas.
		field: Field with a data URI value.
		box: Page-space box.
		config: Render configuration.
		today: Current date (unused).

	Returns:
		Short description of what was drawn.
	"""
	image = pfs.imaging.decode_data_uri(field.value, config.image_codecs)
	if image.mode in ("RGBA", "LA", "P"):
		image = image.convert("RGBA")
	elif image.mode != "RGB":
		image = image.convert("RGB")
	fit = pfs.geometry.aspect_fit(image.width, image.height, box.width, box.height)
	image_reader = reportlab.lib.utils.ImageReader(image)
	pdf.drawImage(
		image_reader,
		box.x + fit.offset_x,
		box.y + fit.offset_y,
		width=fit.width,
		height=fit.height,
		mask="auto",
		preserveAspectRatio=False,
		anchor="sw",
	)
	return f"{image.width}x{image.height} -> {fit.width:.1f}x{fit.height:.1f}"


#============================================
def draw_text_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: Field,
	box: PageBox,
	config: RenderConfig,
	today: datetime.date,
) -> str:
	text_value = field.value or config.text_placeholder
	font_size = compute_font_size(box.height, TEXT_SIZE_RATIO, config.text_max_size)
	drawn = draw_text_line(
		pdf,
		text_value,
		box,
		config.font_name,
		font_size,
		box.x + config.text_padding,
		box.width - 2.0 * config.text_padding,
	)
	return f'Text: "{drawn}"'


#============================================
def draw_date_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: Field,
	box: PageBox,
	config: RenderConfig,
	today: datetime.date,
) -> str:
	date_value = field.value or today.isoformat()
	font_size = compute_font_size(box.height, TEXT_SIZE_RATIO, config.date_max_size)
	drawn = draw_text_line(
		pdf,
		date_value,
		box,
		config.font_name,
		font_size,
		box.x + config.text_padding,
		box.width - 2.0 * config.text_padding,
	)
	return f"Date: {drawn}"


#============================================
def draw_choice_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: Field,
	box: PageBox,
	config: RenderConfig,
	today: datetime.date,
) -> str:
	"""
	Draw a single-choice indicator and the selected option's label.

	The outer ring is always drawn; the inner dot only when a selection is
	stored. An unknown key falls back to the first option's label.

	Args:
		pdf: ReportLab canvas.
		field: Choice field.
		box: Page-space box.
		config: Render configuration.
		today: Current date (unused).

	Returns:
		Short description of what was drawn.
	"""
	options = field.options or list(DEFAULT_CHOICE_OPTIONS)
	selected_key = field.value or pfs.fields.option_key(0)
	index = pfs.fields.option_index(selected_key, options)
	if index is None:
		index = 0
	label = options[index]

	radius = min(box.height, box.width) * CHOICE_RADIUS_RATIO
	center_x = box.x + radius + config.text_padding
	center_y = box.y + box.height / 2.0
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	pdf.setLineWidth(CHOICE_BORDER_WIDTH)
	pdf.circle(center_x, center_y, radius, stroke=1, fill=0)
	if field.value:
		pdf.setFillColorRGB(0.0, 0.0, 0.0)
		pdf.circle(center_x, center_y, radius * CHOICE_DOT_RATIO, stroke=0, fill=1)

	font_size = compute_font_size(box.height, CHOICE_TEXT_SIZE_RATIO, config.choice_max_size)
	drawn = draw_text_line(
		pdf,
		label,
		box,
		config.font_name,
		font_size,
		box.x + radius * 2.0 + CHOICE_LABEL_GAP,
		box.width - radius * 2.0 - CHOICE_LABEL_TRIM,
	)
	return f"Choice: {drawn} ({selected_key})"


#============================================
def draw_generic_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: Field,
	box: PageBox,
	config: RenderConfig,
	today: datetime.date,
) -> str:
	font_size = compute_font_size(box.height, TEXT_SIZE_RATIO, config.text_max_size)
	drawn = draw_text_line(
		pdf,
		str(field.value),
		box,
		config.font_name,
		font_size,
		box.x + config.text_padding,
		box.width - 2.0 * config.text_padding,
	)
	return f'{field.kind}: "{drawn}"'


FIELD_DRAWERS = {
	FIELD_SIGNATURE: draw_image_field,
	FIELD_IMAGE: draw_image_field,
	FIELD_TEXT: draw_text_field,
	FIELD_DATE: draw_date_field,
	FIELD_CHOICE: draw_choice_field,
}


#============================================
def validate_page_size(page_width: float, page_height: float) -> None:
	"""
	Reject missing or non-positive page dimensions.
	"""
	for name, value in (("pageWidth", page_width), ("pageHeight", page_height)):
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			raise ValidationError(f"{name} must be a number, got {value!r}")
		if not value > 0:
			raise ValidationError(f"{name} must be positive, got {value!r}")


#============================================
def validate_field_geometry(fields: list[Field]) -> None:
	"""
	Reject fields whose geometry leaves normalized percentage space.
	"""
	for field in fields:
		if not pfs.fields.is_geometry_valid(field):
			raise ValidationError(
				f"Invalid coordinates for {field.kind} field {field.id}: "
				f"x={field.x} y={field.y} width={field.width} height={field.height}"
			)


#============================================
def render_page(
	fields: list[Field],
	page_width: float,
	page_height: float,
	config: RenderConfig | None = None,
	today: datetime.date | None = None,
	verbose: bool = False,
) -> RenderResult:
	"""
	Render fields onto a single blank page of the given size.

	Fields are drawn in order, so later fields overlap earlier ones. A field
	whose bitmap cannot be decoded is skipped and noted in the result; the
	remaining fields are still drawn.

	Args:
		fields: Fields in drawing order.
		page_width: Page width in points.
		page_height: Page height in points.
		config: Render configuration, defaults when None.
		today: Date used for unfilled date fields, defaults to today.
		verbose: Print per-field progress.

	Returns:
		RenderResult with the PDF bytes and per-field outcome.
	"""
	validate_page_size(page_width, page_height)
	validate_field_geometry(fields)
	if config is None:
		config = pfs.config.default_render_config()
	if today is None:
		today = datetime.date.today()

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(page_width, page_height),
		invariant=1,
	)
	drawn_ids: list[str] = []
	skipped_ids: list[str] = []
	messages: list[str] = []

	for field in fields:
		if field.value is None and field.kind not in UNSET_DRAWN_KINDS:
			skipped_ids.append(field.id)
			messages.append(f"Skipping empty {field.kind} field {field.id}")
			continue
		box = pfs.geometry.to_page_space(field, page_width, page_height)
		drawer = FIELD_DRAWERS.get(field.kind, draw_generic_field)
		try:
			detail = drawer(pdf, field, box, config, today)
		except DecodeError as error:
			skipped_ids.append(field.id)
			messages.append(f"Failed to embed {field.kind} field {field.id}: {error}")
			continue
		drawn_ids.append(field.id)
		if verbose:
			print(
				f"Processing {field.kind} field: x={field.x:.1f}% y={field.y:.1f}% "
				f"-> x={box.x:.1f}pt y={box.y:.1f}pt ({detail})"
			)

	pdf.showPage()
	pdf.save()

	if verbose:
		for message in messages:
			print(message)
		print(f"Fields drawn: {len(drawn_ids)}, skipped: {len(skipped_ids)}")

	return RenderResult(
		pdf_bytes=buffer.getvalue(),
		page_width=float(page_width),
		page_height=float(page_height),
		drawn_ids=drawn_ids,
		skipped_ids=skipped_ids,
		messages=messages,
	)


#============================================
def render_request(
	request: dict,
	config: RenderConfig | None = None,
	require_fields: bool = True,
	today: datetime.date | None = None,
	verbose: bool = False,
) -> bytes:
	"""
	Render a request of the form {pageWidth, pageHeight, fields}.

	Args:
		request: Render request with serialized field records.
		config: Render configuration.
		require_fields: Reject a request with no fields.
		today: Date used for unfilled date fields.
		verbose: Print per-field progress.

	Returns:
		PDF bytes.
	"""
	if not isinstance(request, dict):
		raise ValidationError("Render request must be an object")
	page_width = request.get("pageWidth")
	page_height = request.get("pageHeight")
	validate_page_size(page_width, page_height)
	records = request.get("fields")
	if records is None:
		records = []
	if not isinstance(records, list):
		raise ValidationError("Render request fields must be a list")
	if require_fields and not records:
		raise ValidationError("Render request has no fields")
	fields = [pfs.fields.field_from_dict(record) for record in records]
	result = render_page(
		fields,
		page_width,
		page_height,
		config=config,
		today=today,
		verbose=verbose,
	)
	return result.pdf_bytes
