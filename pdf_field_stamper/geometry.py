"""
Coordinate transform between preview percentages and PDF page space,
plus aspect-ratio fitting for bitmap content.
"""

# Standard Library
import dataclasses

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields


Field = pfs.fields.Field
GeometryPrecondition = pfs.errors.GeometryPrecondition

PERCENT_SCALE = pfs.config.PERCENT_SCALE


@dataclasses.dataclass
class PageBox:
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass
class FitBox:
	width: float
	height: float
	offset_x: float
	offset_y: float


#============================================
def clamp(value: float, low: float, high: float) -> float:
	"""
	Clamp a value into [low, high].

	When high < low the range collapses to low.

	Args:
		value: Input value.
		low: Lower bound.
		high: Upper bound.

	Returns:
		Clamped value.
	"""
	return max(low, min(value, high))


#============================================
def to_page_space(field: Field, page_width: float, page_height: float) -> PageBox:
	"""
	Convert a field's percentage geometry to PDF points.

	The preview has a top-left origin and the PDF page a bottom-left origin,
	so y is flipped and then lowered by the box height to land on the box's
	bottom edge. No clamping: out-of-range input yields off-page boxes.

	Args:
		field: Field with percentage geometry.
		page_width: Page width in points.
		page_height: Page height in points.

	Returns:
		PageBox with the lower-left corner and size in points.
	"""
	width = field.width / PERCENT_SCALE * page_width
	height = field.height / PERCENT_SCALE * page_height
	x = field.x / PERCENT_SCALE * page_width
	y = page_height - (field.y / PERCENT_SCALE * page_height) - height
	return PageBox(x=x, y=y, width=width, height=height)


#============================================
def from_page_space(
	box: PageBox,
	page_width: float,
	page_height: float,
) -> tuple[float, float, float, float]:
	"""
	Convert a page-space box back to percentage geometry.

	Args:
		box: PageBox in points.
		page_width: Page width in points.
		page_height: Page height in points.

	Returns:
		Tuple of (x, y, width, height) in percent, top-left origin.
	"""
	width = box.width / page_width * PERCENT_SCALE
	height = box.height / page_height * PERCENT_SCALE
	x = box.x / page_width * PERCENT_SCALE
	y = (page_height - box.y - box.height) / page_height * PERCENT_SCALE
	return (x, y, width, height)


#============================================
def aspect_fit(
	content_width: float,
	content_height: float,
	box_width: float,
	box_height: float,
) -> FitBox:
	"""
	Scale content into a box without distortion and center it.

	Args:
		content_width: Content width (any unit).
		content_height: Content height.
		box_width: Box width in points.
		box_height: Box height in points.

	Returns:
		FitBox with the fitted size and centering offsets.
	"""
	if min(content_width, content_height, box_width, box_height) <= 0:
		raise GeometryPrecondition(
			f"aspect_fit needs positive sizes, got content {content_width}x{content_height} "
			f"box {box_width}x{box_height}"
		)
	content_aspect = content_width / content_height
	box_aspect = box_width / box_height
	if content_aspect > box_aspect:
		final_width = box_width
		final_height = min(box_height, box_width / content_aspect)
	else:
		final_height = box_height
		final_width = min(box_width, box_height * content_aspect)
	# rounding can push a derived side a hair past the box
	offset_x = max(0.0, (box_width - final_width) / 2.0)
	offset_y = max(0.0, (box_height - final_height) / 2.0)
	return FitBox(
		width=final_width,
		height=final_height,
		offset_x=offset_x,
		offset_y=offset_y,
	)
