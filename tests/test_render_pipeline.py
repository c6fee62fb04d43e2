import datetime
import io

import pypdf
import pytest
import reportlab.pdfbase.pdfmetrics

import pdf_field_stamper.errors
import pdf_field_stamper.fields
import pdf_field_stamper.render

from conftest import make_image_uri
from conftest import make_oversized_png_uri


Field = pdf_field_stamper.fields.Field
ValidationError = pdf_field_stamper.errors.ValidationError
render_page = pdf_field_stamper.render.render_page
TODAY = datetime.date(2024, 5, 6)
PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0


#============================================
def read_first_page(pdf_bytes: bytes) -> pypdf.PageObject:
	"""
	Open PDF bytes and return the first page.
	"""
	reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
	assert len(reader.pages) == 1
	return reader.pages[0]


#============================================
def make_field(field_id: str, kind: str, value: str | None = None, options: list[str] | None = None) -> Field:
	"""
	Build a field in the upper-left area of the page.
	"""
	return Field(id=field_id, kind=kind, x=10.0, y=20.0, width=30.0, height=8.0, value=value, options=options)


#============================================
def test_output_page_has_requested_size() -> None:
	"""
	The rendered page is exactly the requested size, even with no drawing.
	"""
	result = render_page([], 595.28, 841.89, today=TODAY)
	page = read_first_page(result.pdf_bytes)
	assert float(page.mediabox.width) == pytest.approx(595.28, abs=0.01)
	assert float(page.mediabox.height) == pytest.approx(841.89, abs=0.01)


#============================================
def test_unset_text_field_draws_placeholder() -> None:
	"""
	An empty text field is rendered with the placeholder, not omitted.
	"""
	result = render_page([make_field("t1", "text")], PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == ["t1"]
	assert result.skipped_ids == []
	text = read_first_page(result.pdf_bytes).extract_text()
	assert "Text Field" in text


#============================================
def test_unset_signature_field_draws_nothing() -> None:
	"""
	An empty signature field produces no drawn content.
	"""
	result = render_page([make_field("s1", "signature")], PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == []
	assert result.skipped_ids == ["s1"]
	page = read_first_page(result.pdf_bytes)
	assert len(page.images) == 0
	assert page.extract_text().strip() == ""


#============================================
def test_filled_text_and_date_fields() -> None:
	"""
	Text values are drawn literally; an empty date falls back to today.
	"""
	fields = [
		make_field("t1", "text", "Jane Doe"),
		make_field("d1", "date", "2023-12-31"),
		Field(id="d2", kind="date", x=10.0, y=40.0, width=30.0, height=8.0),
	]
	result = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == ["t1", "d1", "d2"]
	text = read_first_page(result.pdf_bytes).extract_text()
	assert "Jane Doe" in text
	assert "2023-12-31" in text
	assert "2024-05-06" in text


#============================================
def test_choice_field_draws_selected_label() -> None:
	"""
	Choice fields always render, using the selected option's label.
	"""
	selected = make_field("c1", "choice", "option2", ["Approve", "Reject"])
	unset = Field(id="c2", kind="choice", x=50.0, y=50.0, width=30.0, height=8.0, options=["Maybe", "Never"])
	bad_key = Field(id="c3", kind="choice", x=50.0, y=70.0, width=30.0, height=8.0, value="option9", options=["Fallback", "Other"])
	result = render_page([selected, unset, bad_key], PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == ["c1", "c2", "c3"]
	text = read_first_page(result.pdf_bytes).extract_text()
	assert "Reject" in text
	assert "Approve" not in text
	assert "Maybe" in text
	assert "Fallback" in text


#============================================
def test_image_fields_embed_png_and_jpeg(png_uri: str, jpeg_uri: str) -> None:
	"""
	PNG decodes with the primary codec and JPEG with the fallback.
	"""
	fields = [
		make_field("s1", "signature", png_uri),
		Field(id="i1", kind="image", x=60.0, y=60.0, width=15.0, height=15.0, value=jpeg_uri),
	]
	result = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == ["s1", "i1"]
	assert len(read_first_page(result.pdf_bytes).images) == 2


#============================================
def test_bad_bitmap_is_skipped_and_rendering_continues(png_uri: str) -> None:
	"""
	A field whose bitmap cannot be decoded does not abort the document.
	"""
	fields = [
		make_field("bad1", "image", "data:image/png;base64,aGVsbG8="),
		make_field("bad2", "signature", "not even a data url"),
		make_field("good", "signature", png_uri),
		Field(id="t1", kind="text", x=10.0, y=50.0, width=30.0, height=8.0, value="after the failure"),
	]
	result = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.skipped_ids == ["bad1", "bad2"]
	assert result.drawn_ids == ["good", "t1"]
	assert any("bad1" in message for message in result.messages)
	page = read_first_page(result.pdf_bytes)
	assert len(page.images) == 1
	assert "after the failure" in page.extract_text()


#============================================
def test_unknown_kind_uses_generic_renderer() -> None:
	"""
	Unknown kinds draw their value as text instead of failing.
	"""
	result = render_page([make_field("x1", "initials", "J.D.")], PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.drawn_ids == ["x1"]
	assert "J.D." in read_first_page(result.pdf_bytes).extract_text()


#============================================
def test_long_text_is_clipped_to_box_width() -> None:
	"""
	Text wider than the box is cut to the widest prefix that fits.
	"""
	text = "ABCDEFGHIJ" * 20
	clipped = pdf_field_stamper.render.fit_text_to_width(text, "Helvetica", 12.0, 100.0)
	assert text.startswith(clipped)
	assert 0 < len(clipped) < len(text)
	assert reportlab.pdfbase.pdfmetrics.stringWidth(clipped, "Helvetica", 12.0) <= 100.0
	longer = text[:len(clipped) + 1]
	assert reportlab.pdfbase.pdfmetrics.stringWidth(longer, "Helvetica", 12.0) > 100.0
	assert pdf_field_stamper.render.fit_text_to_width(text, "Helvetica", 12.0, 0.0) == ""
	assert pdf_field_stamper.render.fit_text_to_width("short", "Helvetica", 12.0, 100.0) == "short"


#============================================
def test_font_size_is_capped() -> None:
	"""
	Tall boxes do not produce oversized text.
	"""
	assert pdf_field_stamper.render.compute_font_size(10.0, 0.6, 12.0) == pytest.approx(6.0)
	assert pdf_field_stamper.render.compute_font_size(200.0, 0.6, 12.0) == 12.0
	assert pdf_field_stamper.render.compute_font_size(200.0, 0.6, 10.0) == 10.0


#============================================
def test_rendering_is_deterministic(png_uri: str) -> None:
	"""
	The same fields and page give the same bytes.
	"""
	fields = [make_field("s1", "signature", png_uri), make_field("t1", "text", "same")]
	first = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	second = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert first.pdf_bytes == second.pdf_bytes


#============================================
def test_render_rejects_out_of_range_geometry() -> None:
	"""
	Fields from an untrusted source with geometry outside percent space are rejected.
	"""
	bad = Field(id="b", kind="text", x=95.0, y=-1.0, width=10.0, height=10.0, value="x")
	with pytest.raises(ValidationError):
		render_page([make_field("t1", "text", "ok"), bad], PAGE_WIDTH, PAGE_HEIGHT)
	with pytest.raises(ValidationError):
		render_page([make_field("t1", "text", "ok")], 0, PAGE_HEIGHT)


#============================================
def test_render_request_validation() -> None:
	"""
	Structurally invalid requests fail the whole render call.
	"""
	record = {"type": "text", "x": 10, "y": 10, "width": 20, "height": 8, "value": "hello"}
	pdf_bytes = pdf_field_stamper.render.render_request(
		{"pageWidth": 612, "pageHeight": 792, "fields": [record]},
		today=TODAY,
	)
	assert "hello" in read_first_page(pdf_bytes).extract_text()

	bad_requests = [
		{"pageHeight": 792, "fields": [record]},
		{"pageWidth": 612, "pageHeight": -1, "fields": [record]},
		{"pageWidth": "612", "pageHeight": 792, "fields": [record]},
		{"pageWidth": 612, "pageHeight": 792, "fields": []},
		{"pageWidth": 612, "pageHeight": 792},
		{"pageWidth": 612, "pageHeight": 792, "fields": "nope"},
		{"pageWidth": 612, "pageHeight": 792, "fields": [dict(record, x=150)]},
	]
	for request in bad_requests:
		with pytest.raises(ValidationError):
			pdf_field_stamper.render.render_request(request, today=TODAY)

	empty = pdf_field_stamper.render.render_request(
		{"pageWidth": 612, "pageHeight": 792, "fields": []},
		require_fields=False,
	)
	assert read_first_page(empty).extract_text().strip() == ""


#============================================
def test_oversized_bitmap_is_skipped() -> None:
	"""
	Bitmaps claiming an excessive pixel count are skipped, not decoded.
	"""
	fields = [
		make_field("huge", "image", make_oversized_png_uri(20000, 20000)),
		make_field("large", "signature", make_oversized_png_uri(12000, 12000)),
		Field(id="t1", kind="text", x=10.0, y=50.0, width=30.0, height=8.0, value="after"),
	]
	result = render_page(fields, PAGE_WIDTH, PAGE_HEIGHT, today=TODAY)
	assert result.skipped_ids == ["huge", "large"]
	assert result.drawn_ids == ["t1"]
	assert "after" in read_first_page(result.pdf_bytes).extract_text()
