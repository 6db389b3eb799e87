"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses
import logging
import os
import types


CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 1000
LEFT_PANEL_CENTER_X = 215

FONT_FAMILY = "Freesentation, Arial, sans-serif"
DEFAULT_BASE_COLOR = "#F1F9BB"
GRADIENT_LIGHTEN = 20.0
AFFIRMATIVE_MARKERS = ("Y", "y")

TITLE_SLOTS = 3
TITLE_MAX_CHARS = 8
TITLE_LINE_Y = (210, 290)
TITLE_FONT_SIZE = 80
TITLE_FONT_WEIGHT = 900
DAY_Y = 350
TIME_Y = 410
SCHEDULE_FONT_SIZE = 48
SCHEDULE_FONT_WEIGHT = 800

LAYOUT_START_Y = 640
PLACE_MAX_CHARS = 12
PLACE_TWO_LINE_SHIFT = 22
PLACE_FONT_SIZE = 36
PLACE_FONT_WEIGHT = 700
PLACE_LINE_ADVANCE = 45
PLACE_PREFIX = "\U0001F4CD "
COACH_FONT_SIZE = 28
COACH_FONT_WEIGHT = 600
COACH_ADVANCE = 25
STAFF_FONT_SIZE = 24
STAFF_FONT_WEIGHT = 500
STAFF_ADVANCE = 45
PARKING_MAX_CHARS = 15
PARKING_MAX_LINES = 3
PARKING_FONT_SIZE = 28
PARKING_FONT_WEIGHT = 700
PARKING_FILL = "#333"
PARKING_LINE_ADVANCE = 40
PARKING_PREFIX = "\U0001F697 "

# (max length, font size, chars per line, max lines, line height)
NOTE_TIERS = (
	(60, 28, 22, 3, 35),
	(120, 24, 26, 4, 32),
	(180, 20, 30, 5, 30),
	(None, 18, 34, 6, 28),
)

MAP_X = 430
MAP_WIDTH = 570
MAP_HEIGHT = 1000
MAP_ZOOM = 17
MAP_TYPE = "roadmap"
MAP_LANGUAGE = "ko"
MAP_REGION = "KR"
MAP_BACKGROUND = "#E8F4F8"
MAP_FETCH_TIMEOUT = 5.0
STATIC_MAP_URL = "https://maps.googleapis.com/maps/api/staticmap"
MAP_USER_AGENT = "VGVR-Map-Generator/1.0"
NOTES_BOX = (440, 760, 550, 230)
NOTES_HEADING = "특이사항"
NOTES_TEXT_X = 465
NOTES_FIRST_LINE_Y = 850

LOGO_TRANSLATE = (120, 920)
BORDER_WIDTH = 2

RASTER_BACKGROUND = (255, 255, 255, 255)
PROGRESS_BAR_WIDTH = 20

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")
DEFAULT_TEMPLATE_PATH = os.path.join(ASSETS_DIR, "template.svg")
BRAND_LOCKUP_PATH = os.path.join(ASSETS_DIR, "brand_lockup.svg")

logger = logging.getLogger(__name__)

DEFAULT_TEAM_COLOR_MAP = types.MappingProxyType({
	"용인팀": "#FFE4B5",
	"구덕팀": "#FFE4E1",
	"신촌팀": "#E0F6FF",
	"사직팀": "#FFE4E1",
	"하남팀": "#FFE4E1",
	"양산팀": "#F0FFF0",
	"수원팀": "#F0FFF0",
	"부천팀": "#F0FFF0",
	"서면팀": "#F0FFF0",
	"반포팀": "#FFF8DC",
	"목동팀": "#E6E6FA",
	"잠실팀": "#E6E6FA",
	"의정부팀": "#E6E6FA",
	"해운대팀": "#E6E6FA",
	"인천팀": "#F5F5DC",
	"파주팀": "#F5F5DC",
})


@dataclasses.dataclass(frozen=True)
class TemplateZones:
	transient_attribute: str = "data-zone"
	transient_value: str = "transient"
	owner_group_id: str = "VEGAVERY"
	left_panel_path_pattern: str = r"^M[12][0-9][0-9]"
	left_panel_path_fill: str = "black"
	background_shape_id: str = "Rectangle 12"
	background_image_id: str = "image0_50_49"


@dataclasses.dataclass(frozen=True)
class OverlayConfig:
	api_key: str = ""
	zoom: int = MAP_ZOOM
	width: int = MAP_WIDTH
	height: int = MAP_HEIGHT
	timeout: float = MAP_FETCH_TIMEOUT
	enabled: bool = True


@dataclasses.dataclass(frozen=True)
class RasterConfig:
	width: int = CANVAS_WIDTH
	height: int = CANVAS_HEIGHT
	fit: str = "contain"
	background: tuple[int, int, int, int] = RASTER_BACKGROUND


#============================================
def load_overlay_config(enabled: bool = True) -> OverlayConfig:
	"""
	Build the overlay config from environment variables.

	Args:
		enabled: Whether remote map fetching is allowed.

	Returns:
		OverlayConfig.
	"""
	raw_timeout = os.getenv("MAP_FETCH_TIMEOUT", "")
	timeout = MAP_FETCH_TIMEOUT
	if raw_timeout:
		try:
			timeout = float(raw_timeout)
		except ValueError:
			logger.warning("Ignoring MAP_FETCH_TIMEOUT=%r, using %s", raw_timeout, MAP_FETCH_TIMEOUT)
		if timeout <= 0:
			logger.warning("Ignoring non-positive MAP_FETCH_TIMEOUT=%r, using %s", raw_timeout, MAP_FETCH_TIMEOUT)
			timeout = MAP_FETCH_TIMEOUT
	return OverlayConfig(
		api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
		timeout=timeout,
		enabled=enabled,
	)


#============================================
def default_template_path() -> str:
	"""
	Resolve the base template path, honoring TEAM_CARD_TEMPLATE.

	Returns:
		Template file path.
	"""
	return os.getenv("TEAM_CARD_TEMPLATE", DEFAULT_TEMPLATE_PATH)
