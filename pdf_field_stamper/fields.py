"""
Field model, field sets and serialization.
"""

# Standard Library
import base64
import binascii
import dataclasses
import json
import uuid

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors


ValidationError = pfs.errors.ValidationError

PERCENT_SCALE = pfs.config.PERCENT_SCALE
KIND_ALIASES = pfs.config.KIND_ALIASES
CHOICE_KEY_PREFIX = pfs.config.CHOICE_KEY_PREFIX
GEOMETRY_KEYS = ("x", "y", "width", "height")
IDENTITY_KEYS = ("id", "kind")


@dataclasses.dataclass
class Field:
	"""
	One placed field. Geometry is in percent of the page, top-left origin.

	id and kind are fixed once set; value, options and geometry are mutable.
	"""
	id: str
	kind: str
	x: float
	y: float
	width: float
	height: float
	value: str | None = None
	options: list[str] | None = None

	def __setattr__(self, name: str, value) -> None:
		if name in IDENTITY_KEYS and name in self.__dict__ and self.__dict__[name] != value:
			raise AttributeError(f"Field {name} cannot change once set")
		super().__setattr__(name, value)


#============================================
def new_field_id() -> str:
	"""
	Generate an opaque field identifier.

	Returns:
		Identifier string.
	"""
	return f"field-{uuid.uuid4().hex}"


#============================================
def normalize_kind(kind: str) -> str:
	"""
	Map legacy kind names onto their current name.

	Args:
		kind: Kind string from a field record.

	Returns:
		Normalized kind string.
	"""
	lowered = kind.strip().lower()
	return KIND_ALIASES.get(lowered, lowered)


#============================================
def option_key(index: int) -> str:
	"""
	Build the option key for a 0-based option index.
	"""
	return f"{CHOICE_KEY_PREFIX}{index + 1}"


#============================================
def option_index(key: str | None, options: list[str]) -> int | None:
	"""
	Resolve an option key to a 0-based index.

	Args:
		key: Option key like "option2".
		options: Option labels.

	Returns:
		Index into options, or None when the key is malformed or out of range.
	"""
	if not key or not key.startswith(CHOICE_KEY_PREFIX):
		return None
	digits = key[len(CHOICE_KEY_PREFIX):]
	if not digits.isdigit():
		return None
	index = int(digits) - 1
	if index < 0 or index >= len(options):
		return None
	return index


#============================================
def parse_data_uri(text: str) -> tuple[str, bytes]:
	"""
	Split a base64 data URI into its MIME type and payload bytes.

	Args:
		text: Data URI like "data:image/png;base64,....".

	Returns:
		Tuple of (mime_type, payload).
	"""
	if not isinstance(text, str) or not text.startswith("data:"):
		raise ValidationError("Invalid data URL")
	parts = text.split(",")
	if len(parts) != 2:
		raise ValidationError("Invalid data URL format")
	header, payload = parts
	media = header[len("data:"):]
	if not media.endswith(";base64"):
		raise ValidationError("Data URL is not base64 encoded")
	mime_type = media[:-len(";base64")] or "application/octet-stream"
	try:
		data = base64.b64decode(payload, validate=True)
	except (binascii.Error, ValueError) as error:
		raise ValidationError(f"Data URL payload is not valid base64: {error}") from error
	if not data:
		raise ValidationError("Data URL payload is empty")
	return (mime_type, data)


#============================================
def build_data_uri(data: bytes, mime_type: str) -> str:
	"""
	Encode bytes as a base64 data URI.

	Args:
		data: Payload bytes.
		mime_type: MIME type such as "image/png".

	Returns:
		Data URI string.
	"""
	encoded = base64.b64encode(data).decode("ascii")
	return f"data:{mime_type};base64,{encoded}"


#============================================
def is_geometry_valid(field: Field) -> bool:
	"""
	Check that field geometry lies in normalized percentage space.

	Args:
		field: Field to check.

	Returns:
		True when position is within [0, 100] and size within (0, 100].
	"""
	return (
		0.0 <= field.x <= PERCENT_SCALE
		and 0.0 <= field.y <= PERCENT_SCALE
		and 0.0 < field.width <= PERCENT_SCALE
		and 0.0 < field.height <= PERCENT_SCALE
	)


#============================================
def field_to_dict(field: Field) -> dict:
	"""
	Serialize a field into its exchange record.

	Args:
		field: Field to serialize.

	Returns:
		Record with keys id, type, x, y, width, height, value, options.
	"""
	options = None
	if field.options is not None:
		options = list(field.options)
	return {
		"id": field.id,
		"type": field.kind,
		"x": field.x,
		"y": field.y,
		"width": field.width,
		"height": field.height,
		"value": field.value,
		"options": options,
	}


#============================================
def field_from_dict(data: dict) -> Field:
	"""
	Load a field from an exchange record.

	Args:
		data: Record with at least type, x, y, width and height.

	Returns:
		Field.
	"""
	if not isinstance(data, dict):
		raise ValidationError("Field record must be an object")
	kind = data.get("type")
	if not isinstance(kind, str) or not kind.strip():
		raise ValidationError("Field record is missing a type")
	geometry: dict[str, float] = {}
	for key in GEOMETRY_KEYS:
		raw = data.get(key)
		# bool is an int subclass
		if isinstance(raw, bool) or not isinstance(raw, (int, float)):
			raise ValidationError(f"Field {key} must be a number, got {raw!r}")
		geometry[key] = float(raw)
	value = data.get("value")
	if value is not None and not isinstance(value, str):
		raise ValidationError(f"Field value must be a string or null, got {type(value).__name__}")
	if value == "":
		value = None
	options = data.get("options")
	if options is not None:
		if not isinstance(options, list) or not all(isinstance(item, str) for item in options):
			raise ValidationError("Field options must be a list of strings")
		options = list(options)
	field_id = data.get("id") or new_field_id()
	return Field(
		id=str(field_id),
		kind=normalize_kind(kind),
		x=geometry["x"],
		y=geometry["y"],
		width=geometry["width"],
		height=geometry["height"],
		value=value,
		options=options,
	)


#============================================
def dump_fields_json(fields: list[Field]) -> str:
	"""
	Serialize fields to JSON text.
	"""
	records = [field_to_dict(field) for field in fields]
	return json.dumps(records, indent=2)


#============================================
def load_fields_json(text: str) -> list[Field]:
	"""
	Load fields from JSON text.

	Accepts either a bare list of records or an object with a "fields" list.

	Args:
		text: JSON text.

	Returns:
		List of fields in input order.
	"""
	try:
		payload = json.loads(text)
	except json.JSONDecodeError as error:
		raise ValidationError(f"Fields JSON is malformed: {error}") from error
	if isinstance(payload, dict):
		payload = payload.get("fields")
	if not isinstance(payload, list):
		raise ValidationError("Fields JSON must hold a list of field records")
	return [field_from_dict(record) for record in payload]


class FieldSet:
	"""
	Ordered fields owned by one document. Sequence order is drawing order.
	"""

	def __init__(self, fields: list[Field] | None = None) -> None:
		self._fields: list[Field] = []
		for field in fields or []:
			self.add(field)

	def __iter__(self):
		return iter(self._fields)

	def __len__(self) -> int:
		return len(self._fields)

	def __contains__(self, field_id: str) -> bool:
		return any(field.id == field_id for field in self._fields)

	def add(self, field: Field) -> Field:
		if field.id in self:
			raise ValidationError(f"Duplicate field id: {field.id}")
		self._fields.append(field)
		return field

	def get(self, field_id: str) -> Field:
		for field in self._fields:
			if field.id == field_id:
				return field
		raise KeyError(field_id)

	def remove(self, field_id: str) -> bool:
		"""
		Delete a field by id.

		Args:
			field_id: Field identifier.

		Returns:
			True if a field was removed, False if the id was not present.
		"""
		for index, field in enumerate(self._fields):
			if field.id == field_id:
				del self._fields[index]
				return True
		return False

	def snapshot(self) -> list[Field]:
		return [dataclasses.replace(field, options=_copy_options(field.options)) for field in self._fields]

	def to_list(self) -> list[dict]:
		return [field_to_dict(field) for field in self._fields]

	@classmethod
	def from_list(cls, records: list[dict]) -> "FieldSet":
		return cls([field_from_dict(record) for record in records])


#============================================
def _copy_options(options: list[str] | None) -> list[str] | None:
	if options is None:
		return None
	return list(options)
