"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0
PERCENT_SCALE = 100.0

FIELD_SIGNATURE = "signature"
FIELD_TEXT = "text"
FIELD_IMAGE = "image"
FIELD_DATE = "date"
FIELD_CHOICE = "choice"
IMAGE_KINDS = {FIELD_SIGNATURE, FIELD_IMAGE}
# kinds drawn even without a value
UNSET_DRAWN_KINDS = {FIELD_TEXT, FIELD_DATE, FIELD_CHOICE}
KIND_ALIASES = {
	"radio": FIELD_CHOICE,
}

# (width, height) in percent of the container
DEFAULT_FOOTPRINTS = {
	FIELD_SIGNATURE: (25.0, 15.0),
	FIELD_TEXT: (20.0, 8.0),
	FIELD_IMAGE: (15.0, 15.0),
	FIELD_DATE: (18.0, 8.0),
	FIELD_CHOICE: (12.0, 12.0),
}
GENERIC_FOOTPRINT = (20.0, 10.0)

MIN_FIELD_WIDTH = 5.0
MAX_FIELD_WIDTH = 50.0
MIN_FIELD_HEIGHT = 3.0
MAX_FIELD_HEIGHT = 30.0

DEFAULT_CHOICE_OPTIONS = ("Option 1", "Option 2", "Option 3")
CHOICE_KEY_PREFIX = "option"

STATE_IDLE = "idle"
STATE_DRAGGING = "dragging"
STATE_RESIZING = "resizing"
STATE_EDITING = "editing"

DEFAULT_FONT_REGULAR = "Helvetica"
TEXT_PLACEHOLDER = "Text Field"
TEXT_SIZE_RATIO = 0.6
TEXT_MAX_SIZE = 12.0
DATE_MAX_SIZE = 10.0
CHOICE_TEXT_SIZE_RATIO = 0.5
CHOICE_MAX_SIZE = 10.0
TEXT_PADDING = 4.0
BASELINE_DROP_RATIO = 1.0 / 3.0
CHOICE_RADIUS_RATIO = 0.15
CHOICE_DOT_RATIO = 0.35
CHOICE_BORDER_WIDTH = 1.5
CHOICE_LABEL_GAP = 10.0
CHOICE_LABEL_TRIM = 15.0

IMAGE_CODECS = ("PNG", "JPEG")
DEFAULT_PAGE_SIZE = "letter"


@dataclasses.dataclass
class RenderConfig:
	font_name: str
	text_placeholder: str
	text_max_size: float
	date_max_size: float
	choice_max_size: float
	text_padding: float
	image_codecs: tuple[str, ...]


@dataclasses.dataclass
class RenderResult:
	pdf_bytes: bytes
	page_width: float
	page_height: float
	drawn_ids: list[str]
	skipped_ids: list[str]
	messages: list[str]


@dataclasses.dataclass
class StampResult:
	pdf_bytes: bytes
	page_count: int
	render: RenderResult


#============================================
def default_render_config() -> RenderConfig:
	"""
	Build the render configuration used when callers pass none.

	Returns:
		RenderConfig.
	"""
	return RenderConfig(
		font_name=DEFAULT_FONT_REGULAR,
		text_placeholder=TEXT_PLACEHOLDER,
		text_max_size=TEXT_MAX_SIZE,
		date_max_size=DATE_MAX_SIZE,
		choice_max_size=CHOICE_MAX_SIZE,
		text_padding=TEXT_PADDING,
		image_codecs=IMAGE_CODECS,
	)


#============================================
def inches_to_points(value: float) -> float:
	"""
	Convert inches to points.

	Args:
		value: Inches value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH
