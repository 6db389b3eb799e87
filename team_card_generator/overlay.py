"""
Right-panel map overlay: static map fetch and fragment composition.

The remote fetch is the only blocking step in card generation. It is bounded
by a timeout and never retried; every failure degrades to a placeholder panel
that shows the raw coordinates.
"""

# Standard Library
import base64
import collections.abc
import dataclasses
import io
import logging
import re
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import PIL.Image
import requests

# local repo modules
import team_card_generator as tcg
import team_card_generator.config
import team_card_generator.errors
import team_card_generator.svg_lib
import team_card_generator.wrap


OverlayConfig = tcg.config.OverlayConfig
OverlayFetchFailed = tcg.errors.OverlayFetchFailed

MAP_X = tcg.config.MAP_X
MAP_BACKGROUND = tcg.config.MAP_BACKGROUND
NOTES_TEXT_X = tcg.config.NOTES_TEXT_X

COORDINATE_PATTERN = re.compile(r"(-?\d+\.?\d*),\s*(-?\d+\.?\d*)")

STATUS_OK = "ok"
STATUS_TIMED_OUT = "timed_out"
STATUS_FAILED = "failed"

MapFetcher = collections.abc.Callable[[float, float, int, int, int, str, float], bytes]

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Coordinates:
	lat: float
	lng: float
	lat_text: str
	lng_text: str


@dataclasses.dataclass(frozen=True)
class MapFetchResult:
	status: str
	content: bytes = b""
	mime_type: str = ""
	reason: str = ""

	@property
	def ok(self) -> bool:
		return self.status == STATUS_OK


#============================================
def parse_coordinates(value: str) -> Coordinates | None:
	"""
	Parse a "lat,lng" string.

	Args:
		value: Coordinate text, possibly empty.

	Returns:
		Coordinates or None when absent or unparsable.
	"""
	if not value:
		return None
	match = COORDINATE_PATTERN.search(value)
	if not match:
		return None
	parts = value.split(",")
	lat_text = parts[0].strip()
	lng_text = parts[1].strip() if len(parts) > 1 else match.group(2)
	return Coordinates(
		lat=float(match.group(1)),
		lng=float(match.group(2)),
		lat_text=lat_text,
		lng_text=lng_text,
	)


#============================================
def fetch_static_map_image(
	lat: float,
	lng: float,
	zoom: int,
	width: int,
	height: int,
	api_key: str,
	timeout: float,
) -> bytes:
	"""
	Download a static roadmap image centred on a marker.

	Args:
		lat: Latitude.
		lng: Longitude.
		zoom: Map zoom level.
		width: Image width in pixels.
		height: Image height in pixels.
		api_key: Static Maps API key, may be empty.
		timeout: Request timeout in seconds.

	Returns:
		Raw image bytes.
	"""
	params = {
		"center": f"{lat},{lng}",
		"zoom": str(zoom),
		"size": f"{width}x{height}",
		"maptype": tcg.config.MAP_TYPE,
		"markers": f"color:red|{lat},{lng}",
		"language": tcg.config.MAP_LANGUAGE,
		"region": tcg.config.MAP_REGION,
	}
	if api_key:
		params["key"] = api_key
	headers = {"User-Agent": tcg.config.MAP_USER_AGENT}
	try:
		response = requests.get(
			tcg.config.STATIC_MAP_URL,
			params=params,
			headers=headers,
			timeout=timeout,
		)
	except requests.Timeout as error:
		raise OverlayFetchFailed(f"map request timed out after {timeout}s", timed_out=True) from error
	except requests.RequestException as error:
		raise OverlayFetchFailed(f"map request failed: {error}") from error
	if not response.ok:
		raise OverlayFetchFailed(f"map request returned HTTP {response.status_code}")
	return response.content


#============================================
def detect_image_mime(content: bytes) -> str:
	"""
	Identify raster bytes with Pillow.

	Args:
		content: Image bytes.

	Returns:
		MIME type like "image/png".
	"""
	try:
		with PIL.Image.open(io.BytesIO(content)) as image:
			image.verify()
			image_format = image.format
	except (PIL.UnidentifiedImageError, OSError, SyntaxError) as error:
		raise OverlayFetchFailed(f"map response is not an image: {error}") from error
	mime_type = PIL.Image.MIME.get(image_format or "")
	if not mime_type:
		raise OverlayFetchFailed(f"unsupported map image format {image_format}")
	return mime_type


#============================================
def fetch_map_result(
	coordinates: Coordinates,
	config: OverlayConfig,
	fetcher: MapFetcher = fetch_static_map_image,
) -> MapFetchResult:
	"""
	Fetch the map image and fold every outcome into a tagged result.

	Args:
		coordinates: Map centre.
		config: Overlay settings.
		fetcher: Static map collaborator.

	Returns:
		MapFetchResult.
	"""
	if not config.enabled:
		return MapFetchResult(status=STATUS_FAILED, reason="map fetching disabled")
	try:
		content = fetcher(
			coordinates.lat,
			coordinates.lng,
			config.zoom,
			config.width,
			config.height,
			config.api_key,
			config.timeout,
		)
		if not content:
			raise OverlayFetchFailed("map response was empty")
		mime_type = detect_image_mime(content)
	except OverlayFetchFailed as error:
		status = STATUS_TIMED_OUT if error.timed_out else STATUS_FAILED
		return MapFetchResult(status=status, reason=str(error))
	except (requests.Timeout, TimeoutError) as error:
		return MapFetchResult(status=STATUS_TIMED_OUT, reason=f"map request timed out: {error}")
	except Exception as error:
		# injected fetchers may raise anything; the card still renders without a map
		logger.debug("Map fetch raised %s", type(error).__name__, exc_info=True)
		return MapFetchResult(status=STATUS_FAILED, reason=f"{type(error).__name__}: {error}")
	return MapFetchResult(status=STATUS_OK, content=content, mime_type=mime_type)


#============================================
def build_map_image(root: StdElementTree.Element, result: MapFetchResult, config: OverlayConfig) -> StdElementTree.Element:
	"""
	Build the inline raster layer for a fetched map.
	"""
	encoded = base64.b64encode(result.content).decode("ascii")
	image = tcg.svg_lib.make_element(root, "image", {
		"id": "map-image",
		"x": MAP_X,
		"y": 0,
		"width": config.width,
		"height": config.height,
		"preserveAspectRatio": "xMidYMid slice",
	})
	image.set(tcg.svg_lib.XLINK_HREF, f"data:{result.mime_type};base64,{encoded}")
	return image


#============================================
def build_placeholder(root: StdElementTree.Element, coordinates: Coordinates, label: str) -> StdElementTree.Element:
	"""
	Build the fallback panel that shows the raw coordinates.
	"""
	group = tcg.svg_lib.make_element(root, "g", {"id": "map-placeholder"})
	group.append(tcg.svg_lib.make_element(root, "rect", {
		"x": 440,
		"y": 10,
		"width": 550,
		"height": 100,
		"fill": "#FFFFFF",
		"fill-opacity": "0.9",
		"stroke": "#333",
		"stroke-width": 1,
		"rx": 5,
	}))
	rows = (
		("\U0001F4CD 지도 위치", 35, 16, 600, "#333"),
		(f"위도: {coordinates.lat_text}", 55, 14, 500, "#666"),
		(f"경도: {coordinates.lng_text}", 75, 14, 500, "#666"),
		(f"{label} 집합장소", 95, 12, 400, "#999"),
	)
	for text, y, size, weight, fill in rows:
		group.append(tcg.svg_lib.make_text(root, text, NOTES_TEXT_X, y, size, weight, fill, anchor=None))
	return group


#============================================
def build_notes_caption(root: StdElementTree.Element, notes: str) -> StdElementTree.Element | None:
	"""
	Build the notes caption box at the bottom of the map panel.

	Args:
		root: Document root.
		notes: Free-form notes.

	Returns:
		Caption group, or None when the notes wrap to nothing.
	"""
	layout = tcg.wrap.wrap_notes(notes)
	if not layout.lines:
		return None
	logger.debug(
		"Notes: %d chars -> %d lines, font %d, %d per line, line height %d",
		len(notes),
		len(layout.lines),
		layout.font_size,
		layout.chars_per_line,
		layout.line_height,
	)
	box_x, box_y, box_width, box_height = tcg.config.NOTES_BOX
	group = tcg.svg_lib.make_element(root, "g", {"id": "map-notes"})
	group.append(tcg.svg_lib.make_element(root, "rect", {
		"x": box_x,
		"y": box_y,
		"width": box_width,
		"height": box_height,
		"fill": "#FFFFFF",
		"fill-opacity": "0.95",
		"stroke": "#333",
		"stroke-width": 1,
		"rx": 8,
	}))
	group.append(tcg.svg_lib.make_text(root, tcg.config.NOTES_HEADING, NOTES_TEXT_X, 815, 30, 700, "#333", anchor=None))
	for index, line in enumerate(layout.lines):
		y = tcg.config.NOTES_FIRST_LINE_Y + index * layout.line_height
		group.append(tcg.svg_lib.make_text(root, line, NOTES_TEXT_X, y, layout.font_size, 500, "#444", anchor=None))
	return group


#============================================
def compose_overlay(
	root: StdElementTree.Element,
	coordinates_text: str,
	notes: str,
	label: str,
	config: OverlayConfig | None = None,
	fetcher: MapFetcher = fetch_static_map_image,
) -> StdElementTree.Element | None:
	"""
	Compose the map panel for a record.

	Args:
		root: Document root, used for the element namespace.
		coordinates_text: "lat,lng" text from the record.
		notes: Free-form notes for the caption, may be empty.
		label: Team name shown on the placeholder.
		config: Overlay settings; defaults come from the environment.
		fetcher: Static map collaborator.

	Returns:
		The map-section group, or None without usable coordinates.
	"""
	coordinates = parse_coordinates(coordinates_text)
	if coordinates is None:
		return None
	if config is None:
		config = tcg.config.load_overlay_config()

	result = fetch_map_result(coordinates, config, fetcher)
	group = tcg.svg_lib.make_element(root, "g", {"id": "map-section"})
	group.append(tcg.svg_lib.make_element(root, "rect", {
		"x": MAP_X,
		"y": 0,
		"width": config.width,
		"height": config.height,
		"fill": MAP_BACKGROUND,
	}))
	if result.ok:
		logger.info("Map image for %s: %.1fKB", label, len(result.content) / 1024.0)
		group.append(build_map_image(root, result, config))
	else:
		logger.warning("Map image for %s unavailable (%s): %s", label, result.status, result.reason)
		group.append(build_placeholder(root, coordinates, label))

	if notes:
		caption = build_notes_caption(root, notes)
		if caption is not None:
			group.append(caption)
	return group


#============================================
def build_neutral_panel(root: StdElementTree.Element, config: OverlayConfig | None = None) -> StdElementTree.Element:
	"""
	Build the plain right-panel background used when there is no map.
	"""
	width = config.width if config else tcg.config.MAP_WIDTH
	height = config.height if config else tcg.config.MAP_HEIGHT
	return tcg.svg_lib.make_element(root, "rect", {
		"id": "map-empty",
		"x": MAP_X,
		"y": 0,
		"width": width,
		"height": height,
		"fill": MAP_BACKGROUND,
	})
