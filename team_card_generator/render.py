"""
Rasterization, output sinks and the run manifest.
"""

# Standard Library
import io
import json
import pathlib
import re

# PIP3 modules
import PIL.Image
import PIL.ImageOps

# local repo modules
import team_card_generator as tcg
import team_card_generator.config
import team_card_generator.errors


RenderError = tcg.errors.RenderError

CANVAS_WIDTH = tcg.config.CANVAS_WIDTH
CANVAS_HEIGHT = tcg.config.CANVAS_HEIGHT
RASTER_BACKGROUND = tcg.config.RASTER_BACKGROUND
PROGRESS_BAR_WIDTH = tcg.config.PROGRESS_BAR_WIDTH

FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9가-힣]")


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def sanitize_token(value: str) -> str:
	"""
	Replace every character outside ASCII letters, digits and Hangul with "_".

	Args:
		value: Input string.

	Returns:
		Sanitized string.
	"""
	if not value:
		value = "unknown"
	return FILENAME_UNSAFE.sub("_", value)


#============================================
def svg_to_png(document: str) -> bytes:
	"""
	Rasterize SVG markup at its natural size.

	Args:
		document: SVG markup.

	Returns:
		PNG bytes.
	"""
	# CairoSVG needs the native cairo library; import on first use
	import cairosvg

	try:
		return cairosvg.svg2png(bytestring=document.encode("utf-8"))
	except Exception as error:
		raise RenderError(f"SVG rasterization failed: {error}") from error


#============================================
def fit_onto_canvas(
	image: PIL.Image.Image,
	width: int,
	height: int,
	fit: str,
	background: tuple[int, int, int, int],
) -> PIL.Image.Image:
	"""
	Place an image on a fixed-size canvas.

	Args:
		image: Source image.
		width: Canvas width.
		height: Canvas height.
		fit: "contain" keeps the aspect ratio, "fill" stretches.
		background: RGBA canvas color.

	Returns:
		Canvas image.
	"""
	image = image.convert("RGBA")
	if fit == "contain":
		scaled = PIL.ImageOps.contain(image, (width, height), method=PIL.Image.LANCZOS)
	elif fit == "fill":
		scaled = image.resize((width, height), PIL.Image.LANCZOS)
	else:
		raise RenderError(f"Unsupported fit mode: {fit}")
	canvas = PIL.Image.new("RGBA", (width, height), background)
	offset_x = (width - scaled.width) // 2
	offset_y = (height - scaled.height) // 2
	canvas.alpha_composite(scaled, (offset_x, offset_y))
	return canvas


#============================================
def render_to_raster(
	document: str,
	width: int = CANVAS_WIDTH,
	height: int = CANVAS_HEIGHT,
	fit: str = "contain",
	background: tuple[int, int, int, int] = RASTER_BACKGROUND,
) -> bytes:
	"""
	Render an SVG document to a fixed-size PNG.

	Args:
		document: SVG markup.
		width: Output width in pixels.
		height: Output height in pixels.
		fit: Fit mode.
		background: RGBA background.

	Returns:
		PNG bytes.
	"""
	png_bytes = svg_to_png(document)
	try:
		with PIL.Image.open(io.BytesIO(png_bytes)) as rendered:
			canvas = fit_onto_canvas(rendered, width, height, fit, background)
	except (PIL.UnidentifiedImageError, OSError) as error:
		raise RenderError(f"Rasterizer produced unreadable output: {error}") from error
	if background[3] == 255:
		canvas = canvas.convert("RGB")
	buffer = io.BytesIO()
	canvas.save(buffer, format="PNG")
	return buffer.getvalue()


class DirectorySink:
	"""
	Persist rendered cards as files in one directory.
	"""

	def __init__(self, output_dir: pathlib.Path, suffix: str = ".png") -> None:
		self.output_dir = pathlib.Path(output_dir)
		self.suffix = suffix

	def __call__(self, identity: str, payload: bytes) -> str:
		self.output_dir.mkdir(parents=True, exist_ok=True)
		path = self.output_dir / f"{identity}{self.suffix}"
		path.write_bytes(payload)
		return str(path)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	result: "tcg.batch.BatchResult",
	inputs: list[str],
	template_path: str,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		result: Batch result.
		inputs: Input record sources.
		template_path: Base template used.
	"""
	data = {
		"inputs": inputs,
		"template": template_path,
		"data_hash": result.data_hash,
		"total_records": len(result.outcomes),
		"success_count": result.success_count,
		"failed_count": len(result.outcomes) - result.success_count,
		"cancelled": result.cancelled,
		"records": [
			{
				"index": outcome.index,
				"identity": outcome.identity,
				"display_name": outcome.display_name,
				"status": outcome.status,
				"location": outcome.location,
				"error": outcome.error,
			}
			for outcome in result.outcomes
		],
	}
	manifest_path.parent.mkdir(parents=True, exist_ok=True)
	with open(manifest_path, "w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, ensure_ascii=False)
		handle.write("\n")
