import pytest

import pdf_field_stamper.errors
import pdf_field_stamper.geometry


aspect_fit = pdf_field_stamper.geometry.aspect_fit
EPSILON = 1e-9


#============================================
def test_wide_image_in_square_box() -> None:
	"""
	A 2:1 image in a square box fits the width and centers vertically.
	"""
	fit = aspect_fit(400, 200, 100, 100)
	assert fit.width == pytest.approx(100.0)
	assert fit.height == pytest.approx(50.0)
	assert fit.offset_x == pytest.approx(0.0)
	assert fit.offset_y == pytest.approx(25.0)


#============================================
def test_tall_image_in_wide_box() -> None:
	"""
	A tall image fits the height and centers horizontally.
	"""
	fit = aspect_fit(30, 60, 153.0, 118.8)
	assert fit.height == pytest.approx(118.8)
	assert fit.width == pytest.approx(59.4)
	assert fit.offset_x == pytest.approx((153.0 - 59.4) / 2.0)
	assert fit.offset_y == pytest.approx(0.0)


#============================================
def test_fit_stays_inside_box_and_keeps_ratio() -> None:
	"""
	The fitted size never exceeds the box and keeps the content ratio.
	"""
	contents = [(1, 1), (400, 200), (200, 400), (3, 1000), (1000, 3), (640, 480)]
	boxes = [(100, 100), (153, 118.8), (10, 300), (300, 10), (0.5, 0.25)]
	for content_width, content_height in contents:
		for box_width, box_height in boxes:
			fit = aspect_fit(content_width, content_height, box_width, box_height)
			assert fit.width <= box_width + EPSILON
			assert fit.height <= box_height + EPSILON
			assert fit.offset_x >= 0.0
			assert fit.offset_y >= 0.0
			assert fit.width / fit.height == pytest.approx(content_width / content_height)
			assert fit.offset_x * 2.0 + fit.width == pytest.approx(box_width)
			assert fit.offset_y * 2.0 + fit.height == pytest.approx(box_height)


#============================================
def test_degenerate_sizes_are_a_precondition_violation() -> None:
	"""
	Zero or negative dimensions raise GeometryPrecondition.
	"""
	with pytest.raises(pdf_field_stamper.errors.GeometryPrecondition):
		aspect_fit(100, 0, 50, 50)
	with pytest.raises(pdf_field_stamper.errors.GeometryPrecondition):
		aspect_fit(100, 100, 50, 0)
	with pytest.raises(pdf_field_stamper.errors.GeometryPrecondition):
		aspect_fit(-1, 100, 50, 50)
