"""
Interactive placement of fields on a resolution-dependent preview.

Every operation takes pixel input together with the container size it was
measured against and stores the result as percentages, so the field set
stays valid for any preview size and any output page.
"""

# Standard Library
import dataclasses
import datetime
from typing import Callable

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields
import pdf_field_stamper.geometry
import pdf_field_stamper.imaging


Field = pfs.fields.Field
FieldSet = pfs.fields.FieldSet
ValidationError = pfs.errors.ValidationError
clamp = pfs.geometry.clamp

PERCENT_SCALE = pfs.config.PERCENT_SCALE
FIELD_SIGNATURE = pfs.config.FIELD_SIGNATURE
FIELD_TEXT = pfs.config.FIELD_TEXT
FIELD_IMAGE = pfs.config.FIELD_IMAGE
FIELD_DATE = pfs.config.FIELD_DATE
FIELD_CHOICE = pfs.config.FIELD_CHOICE
IMAGE_KINDS = pfs.config.IMAGE_KINDS
DEFAULT_FOOTPRINTS = pfs.config.DEFAULT_FOOTPRINTS
GENERIC_FOOTPRINT = pfs.config.GENERIC_FOOTPRINT
DEFAULT_CHOICE_OPTIONS = pfs.config.DEFAULT_CHOICE_OPTIONS
MIN_FIELD_WIDTH = pfs.config.MIN_FIELD_WIDTH
MAX_FIELD_WIDTH = pfs.config.MAX_FIELD_WIDTH
MIN_FIELD_HEIGHT = pfs.config.MIN_FIELD_HEIGHT
MAX_FIELD_HEIGHT = pfs.config.MAX_FIELD_HEIGHT
STATE_IDLE = pfs.config.STATE_IDLE
STATE_DRAGGING = pfs.config.STATE_DRAGGING
STATE_RESIZING = pfs.config.STATE_RESIZING
STATE_EDITING = pfs.config.STATE_EDITING

Point = tuple[float, float]
Size = tuple[float, float]
Rect = tuple[float, float, float, float]
CaptureCallback = Callable[[Field], str | None]


@dataclasses.dataclass
class Interaction:
	state: str = STATE_IDLE
	grab_offset: Point = (0.0, 0.0)
	changed: bool = False
	suppress_click: bool = False


#============================================
def default_footprint(kind: str) -> Size:
	"""
	Look up the default (width, height) in percent for a field kind.

	Unknown kinds get the generic footprint.
	"""
	return DEFAULT_FOOTPRINTS.get(kind, GENERIC_FOOTPRINT)


#============================================
def pixels_to_percent(value: float, dimension: float) -> float:
	"""
	Express a pixel distance as a percentage of a container dimension.
	"""
	return value / dimension * PERCENT_SCALE


#============================================
def _validate_bitmap_value(field: Field, value: str | None) -> None:
	if field.value is not None:
		raise ValidationError(f"{field.kind} field {field.id} is already filled")
	if value is None:
		raise ValidationError(f"{field.kind} field needs a bitmap data URL")
	pfs.imaging.validate_bitmap_uri(value)


#============================================
def _validate_text_value(field: Field, value: str | None) -> None:
	if value is not None and not isinstance(value, str):
		raise ValidationError(f"Text value must be a string, got {type(value).__name__}")


#============================================
def _validate_date_value(field: Field, value: str | None) -> None:
	if value is None:
		return
	if not isinstance(value, str):
		raise ValidationError(f"Date value must be a string, got {type(value).__name__}")
	try:
		parsed = datetime.date.fromisoformat(value)
	except ValueError as error:
		raise ValidationError(f"Date value is not an ISO date: {value!r}") from error
	if parsed.isoformat() != value:
		raise ValidationError(f"Date value must be YYYY-MM-DD: {value!r}")


#============================================
def _validate_choice_value(field: Field, value: str | None) -> None:
	options = field.options or list(DEFAULT_CHOICE_OPTIONS)
	if pfs.fields.option_index(value, options) is None:
		raise ValidationError(f"Unknown option {value!r} for choice field {field.id}")


VALUE_VALIDATORS = {
	FIELD_SIGNATURE: _validate_bitmap_value,
	FIELD_IMAGE: _validate_bitmap_value,
	FIELD_TEXT: _validate_text_value,
	FIELD_DATE: _validate_date_value,
	FIELD_CHOICE: _validate_choice_value,
}


class PlacementEngine:
	"""
	Create and manipulate the fields of one document.

	Each field carries an interaction state (idle, dragging, resizing or
	editing). Dragging and resizing exclude each other and suppress the
	click that follows the pointer release.
	"""

	def __init__(
		self,
		fields: FieldSet | None = None,
		capture: CaptureCallback | None = None,
	) -> None:
		self.fields = fields if fields is not None else FieldSet()
		self.capture = capture
		self._interactions: dict[str, Interaction] = {}

	def _interaction(self, field_id: str) -> Interaction:
		# raises KeyError for unknown ids
		self.fields.get(field_id)
		return self._interactions.setdefault(field_id, Interaction())

	def state_of(self, field_id: str) -> str:
		return self._interaction(field_id).state

	#============================================
	def create(self, kind: str, drop_position: Point, container_size: Size) -> Field:
		"""
		Create a field where content was dropped.

		Args:
			kind: Field kind.
			drop_position: Drop point in pixels relative to the container.
			container_size: Container (width, height) in pixels.

		Returns:
			The new field, appended to the field set.
		"""
		container_width, container_height = container_size
		if container_width <= 0 or container_height <= 0:
			raise ValidationError(f"Container size must be positive, got {container_size}")
		kind = pfs.fields.normalize_kind(kind)
		width, height = default_footprint(kind)
		x = clamp(pixels_to_percent(drop_position[0], container_width), 0.0, PERCENT_SCALE - width)
		y = clamp(pixels_to_percent(drop_position[1], container_height), 0.0, PERCENT_SCALE - height)
		value = None
		options = None
		if kind == FIELD_CHOICE:
			options = list(DEFAULT_CHOICE_OPTIONS)
			value = pfs.fields.option_key(0)
		field = Field(
			id=pfs.fields.new_field_id(),
			kind=kind,
			x=x,
			y=y,
			width=width,
			height=height,
			value=value,
			options=options,
		)
		self.fields.add(field)
		self._interactions[field.id] = Interaction()
		return field

	#============================================
	def begin_drag(self, field_id: str, pointer_offset: Point) -> bool:
		"""
		Start dragging a field.

		Args:
			field_id: Field identifier.
			pointer_offset: Pointer offset from the field's top-left corner in pixels.

		Returns:
			True if the drag started, False if the field is busy.
		"""
		interaction = self._interaction(field_id)
		if interaction.state != STATE_IDLE:
			return False
		interaction.state = STATE_DRAGGING
		interaction.grab_offset = (float(pointer_offset[0]), float(pointer_offset[1]))
		interaction.changed = False
		interaction.suppress_click = False
		return True

	#============================================
	def continue_drag(self, field_id: str, pointer_position: Point, container_rect: Rect) -> Point:
		"""
		Move a dragged field so the grab point follows the pointer.

		Args:
			field_id: Field identifier.
			pointer_position: Pointer position in pixels (same frame as container_rect).
			container_rect: Container (left, top, width, height) in pixels.

		Returns:
			The field's (x, y) in percent after clamping.
		"""
		field = self.fields.get(field_id)
		interaction = self._interaction(field_id)
		left, top, container_width, container_height = container_rect
		if interaction.state != STATE_DRAGGING or container_width <= 0 or container_height <= 0:
			return (field.x, field.y)
		new_x = pointer_position[0] - left - interaction.grab_offset[0]
		new_y = pointer_position[1] - top - interaction.grab_offset[1]
		x = clamp(pixels_to_percent(new_x, container_width), 0.0, PERCENT_SCALE - field.width)
		y = clamp(pixels_to_percent(new_y, container_height), 0.0, PERCENT_SCALE - field.height)
		if (x, y) != (field.x, field.y):
			interaction.changed = True
		field.x = x
		field.y = y
		return (x, y)

	def end_drag(self, field_id: str) -> None:
		interaction = self._interaction(field_id)
		if interaction.state != STATE_DRAGGING:
			return
		interaction.state = STATE_IDLE
		interaction.suppress_click = interaction.changed
		interaction.changed = False

	#============================================
	def begin_resize(self, field_id: str) -> bool:
		interaction = self._interaction(field_id)
		if interaction.state != STATE_IDLE:
			return False
		interaction.state = STATE_RESIZING
		interaction.changed = False
		interaction.suppress_click = False
		return True

	#============================================
	def continue_resize(
		self,
		field_id: str,
		pointer_position: Point,
		field_origin: Point,
		container_rect: Rect,
	) -> Size:
		"""
		Resize a field from its fixed top-left corner toward the pointer.

		Width is clamped to [MIN_FIELD_WIDTH, MAX_FIELD_WIDTH] and height to
		[MIN_FIELD_HEIGHT, MAX_FIELD_HEIGHT]; within those bounds the far edge
		is also kept inside the container. Position never changes.

		Args:
			field_id: Field identifier.
			pointer_position: Pointer position in pixels.
			field_origin: Field top-left corner in pixels (same frame as the pointer).
			container_rect: Container (left, top, width, height) in pixels.

		Returns:
			The field's (width, height) in percent after clamping.
		"""
		field = self.fields.get(field_id)
		interaction = self._interaction(field_id)
		_left, _top, container_width, container_height = container_rect
		if interaction.state != STATE_RESIZING or container_width <= 0 or container_height <= 0:
			return (field.width, field.height)
		raw_width = pixels_to_percent(pointer_position[0] - field_origin[0], container_width)
		raw_height = pixels_to_percent(pointer_position[1] - field_origin[1], container_height)
		width_limit = min(MAX_FIELD_WIDTH, PERCENT_SCALE - field.x)
		height_limit = min(MAX_FIELD_HEIGHT, PERCENT_SCALE - field.y)
		width = clamp(raw_width, MIN_FIELD_WIDTH, width_limit)
		height = clamp(raw_height, MIN_FIELD_HEIGHT, height_limit)
		if (width, height) != (field.width, field.height):
			interaction.changed = True
		field.width = width
		field.height = height
		return (width, height)

	def end_resize(self, field_id: str) -> None:
		interaction = self._interaction(field_id)
		if interaction.state != STATE_RESIZING:
			return
		interaction.state = STATE_IDLE
		interaction.suppress_click = interaction.changed
		interaction.changed = False

	#============================================
	def begin_edit(self, field_id: str) -> bool:
		interaction = self._interaction(field_id)
		if interaction.state != STATE_IDLE:
			return False
		interaction.state = STATE_EDITING
		return True

	def cancel_edit(self, field_id: str) -> None:
		interaction = self._interaction(field_id)
		if interaction.state == STATE_EDITING:
			interaction.state = STATE_IDLE

	#============================================
	def edit(self, field_id: str, new_value: str | None) -> Field:
		"""
		Validate and store a new value.

		Args:
			field_id: Field identifier.
			new_value: Type-dependent payload.

		Returns:
			The updated field.
		"""
		field = self.fields.get(field_id)
		interaction = self._interaction(field_id)
		if interaction.state in (STATE_DRAGGING, STATE_RESIZING):
			raise ValidationError(f"Field {field_id} is busy ({interaction.state})")
		if new_value == "" and field.kind not in IMAGE_KINDS:
			new_value = None
		validator = VALUE_VALIDATORS.get(field.kind, _validate_text_value)
		validator(field, new_value)
		field.value = new_value
		if interaction.state == STATE_EDITING:
			interaction.state = STATE_IDLE
		return field

	#============================================
	def click(self, field_id: str) -> bool:
		"""
		Handle a click on a field.

		A click on an unfilled signature field in the idle state asks the
		capture callback for a bitmap. The click right after a drag or
		resize that moved the field is swallowed.

		Args:
			field_id: Field identifier.

		Returns:
			True if the capture callback was invoked.
		"""
		field = self.fields.get(field_id)
		interaction = self._interaction(field_id)
		if interaction.suppress_click:
			interaction.suppress_click = False
			return False
		if interaction.state != STATE_IDLE:
			return False
		if field.kind != FIELD_SIGNATURE or field.value is not None:
			return False
		if self.capture is None:
			return False
		data_uri = self.capture(field)
		if data_uri:
			self.edit(field_id, data_uri)
		return True

	#============================================
	def remove(self, field_id: str) -> bool:
		"""
		Delete a field. Unknown ids are ignored.

		Returns:
			True if a field was removed.
		"""
		self._interactions.pop(field_id, None)
		return self.fields.remove(field_id)
