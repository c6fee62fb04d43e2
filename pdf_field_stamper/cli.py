"""
CLI entry points for stamping placed fields into a PDF.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# PIP3 modules
import reportlab.lib.pagesizes

# local repo modules
import pdf_field_stamper as pfs
import pdf_field_stamper.config
import pdf_field_stamper.errors
import pdf_field_stamper.fields
import pdf_field_stamper.render
import pdf_field_stamper.stamp


RenderConfig = pfs.config.RenderConfig
ValidationError = pfs.errors.ValidationError

DEFAULT_PAGE_SIZE = pfs.config.DEFAULT_PAGE_SIZE
PAGE_SIZES = {
	"letter": reportlab.lib.pagesizes.letter,
	"legal": reportlab.lib.pagesizes.legal,
	"a4": reportlab.lib.pagesizes.A4,
}


#============================================
def parse_page_size(value: str) -> tuple[float, float]:
	"""
	Parse a page size name or WIDTHxHEIGHT string.

	Dimensions are points unless suffixed with "in".

	Args:
		value: Size like "letter", "612x792" or "8.5x11in".

	Returns:
		Tuple of (width, height) in points.
	"""
	normalized = value.strip().lower()
	if normalized in PAGE_SIZES:
		width, height = PAGE_SIZES[normalized]
		return (float(width), float(height))
	in_inches = normalized.endswith("in")
	if in_inches:
		normalized = normalized[:-2]
	parts = normalized.split("x")
	if len(parts) != 2:
		raise argparse.ArgumentTypeError(f"Unknown page size: {value}")
	try:
		width = float(parts[0])
		height = float(parts[1])
	except ValueError as error:
		raise argparse.ArgumentTypeError(f"Unknown page size: {value}") from error
	if in_inches:
		width = pfs.config.inches_to_points(width)
		height = pfs.config.inches_to_points(height)
	return (width, height)


#============================================
def build_render_config(args: argparse.Namespace) -> RenderConfig:
	"""
	Build render config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderConfig.
	"""
	config = pfs.config.default_render_config()
	if args.placeholder is not None:
		config.text_placeholder = args.placeholder
	return config


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Burn placed fields into a PDF page.")
	parser.add_argument("fields_path", help="Fields JSON file (list of field records).")

	io_group = parser.add_argument_group("Input/Output")
	io_group.add_argument("-i", "--input", dest="input_path", default=None, help="Source PDF to stamp.")
	io_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	io_group.add_argument(
		"-s",
		"--page-size",
		dest="page_size",
		type=parse_page_size,
		default=None,
		help="Blank page size when no input PDF is given (letter, a4, legal, WxH, WxHin).",
	)

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-e", "--allow-empty", dest="allow_empty", action="store_true", help="Accept a fields file with no fields.")
	behavior_group.add_argument("-p", "--placeholder", dest="placeholder", default=None, help="Text drawn for unfilled text fields.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Print per-field progress.")
	behavior_group.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Only print the summary.")

	parser.set_defaults(
		allow_empty=False,
		verbose=True,
	)

	args = parser.parse_args(argv)
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> pfs.config.RenderResult:
	"""
	Load fields, render them and write the output PDF.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderResult of the rendered page.
	"""
	print("PDF field stamping pipeline")
	print(f"Fields: {args.fields_path}")
	print(f"Output PDF: {args.output_path}")
	if args.input_path is not None:
		print(f"Input PDF: {args.input_path}")

	start_time = time.perf_counter()
	fields_path = pathlib.Path(args.fields_path)
	fields = pfs.fields.load_fields_json(fields_path.read_text(encoding="utf-8"))
	print(f"Fields loaded: {len(fields)}")
	if not fields and not args.allow_empty:
		raise ValidationError("Fields file has no fields")

	config = build_render_config(args)
	output_path = pathlib.Path(args.output_path)
	if args.input_path is not None:
		source_bytes = pathlib.Path(args.input_path).read_bytes()
		stamp_result = pfs.stamp.stamp_pdf(source_bytes, fields, config=config, verbose=args.verbose)
		output_path.write_bytes(stamp_result.pdf_bytes)
		render_result = stamp_result.render
		print(f"Pages written: {stamp_result.page_count}")
	else:
		page_width, page_height = args.page_size or parse_page_size(DEFAULT_PAGE_SIZE)
		render_result = pfs.render.render_page(
			fields,
			page_width,
			page_height,
			config=config,
			verbose=args.verbose,
		)
		output_path.write_bytes(render_result.pdf_bytes)
		print("Pages written: 1")

	total_time = time.perf_counter() - start_time
	print(f"Fields drawn: {len(render_result.drawn_ids)}")
	print(f"Fields skipped: {len(render_result.skipped_ids)}")
	print(f"Timing: total={total_time:.2f}s")
	print(f"Output written: {output_path}")
	return render_result


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Returns:
		Process exit code.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except (ValidationError, OSError) as error:
		print(f"Error: {error}", file=sys.stderr)
		return 1
	return 0
