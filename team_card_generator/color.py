"""
Hex and HSL color conversion and gradient derivation.
"""

# Standard Library
import collections.abc
import dataclasses
import logging
import re

# local repo modules
import team_card_generator as tcg
import team_card_generator.config
import team_card_generator.errors


InvalidColorFormat = tcg.errors.InvalidColorFormat

DEFAULT_BASE_COLOR = tcg.config.DEFAULT_BASE_COLOR
GRADIENT_LIGHTEN = tcg.config.GRADIENT_LIGHTEN

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class GradientPair:
	lighter: str
	darker: str


#============================================
def validate_hex_color(value: str) -> str:
	"""
	Check a color string and return it unchanged.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		The same string.
	"""
	if not isinstance(value, str) or not HEX_COLOR_PATTERN.match(value):
		raise InvalidColorFormat(f"Invalid hex color: {value!r}")
	return value


#============================================
def hex_to_hsl(value: str) -> tuple[float, float, float]:
	"""
	Convert an sRGB hex color to HSL.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (hue 0-360, saturation 0-100, lightness 0-100).
	"""
	validate_hex_color(value)
	red = int(value[1:3], 16) / 255.0
	green = int(value[3:5], 16) / 255.0
	blue = int(value[5:7], 16) / 255.0

	high = max(red, green, blue)
	low = min(red, green, blue)
	lightness = (high + low) / 2.0
	if high == low:
		return (0.0, 0.0, lightness * 100.0)

	delta = high - low
	if lightness > 0.5:
		saturation = delta / (2.0 - high - low)
	else:
		saturation = delta / (high + low)
	if high == red:
		hue = (green - blue) / delta + (6.0 if green < blue else 0.0)
	elif high == green:
		hue = (blue - red) / delta + 2.0
	else:
		hue = (red - green) / delta + 4.0
	hue /= 6.0
	return (hue * 360.0, saturation * 100.0, lightness * 100.0)


#============================================
def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
	"""
	Convert HSL back to a lowercase hex color.

	Args:
		hue: Hue in degrees.
		saturation: Saturation 0-100.
		lightness: Lightness 0-100.

	Returns:
		Color string like "#aabbcc".
	"""
	light = lightness / 100.0
	chroma = saturation * min(light, 1.0 - light) / 100.0

	def channel(offset: int) -> str:
		k = (offset + hue / 30.0) % 12
		color = light - chroma * max(min(k - 3.0, 9.0 - k, 1.0), -1.0)
		# round half up, matching the usual JS Math.round
		level = int(255.0 * color + 0.5)
		level = min(255, max(0, level))
		return f"{level:02x}"

	return f"#{channel(0)}{channel(8)}{channel(4)}"


#============================================
def derive_gradient(base_color: str) -> GradientPair:
	"""
	Derive the diagonal gradient pair for a base color.

	The darker stop is the base color itself; only the lighter stop is computed.

	Args:
		base_color: Color string like "#AABBCC".

	Returns:
		GradientPair.
	"""
	hue, saturation, lightness = hex_to_hsl(base_color)
	lighter = hsl_to_hex(hue, saturation, min(100.0, lightness + GRADIENT_LIGHTEN))
	return GradientPair(lighter=lighter, darker=base_color)


#============================================
def lookup_team_color(name: str, color_map: collections.abc.Mapping[str, str]) -> str:
	"""
	Look up a team color by display name.

	Args:
		name: Team or region display name.
		color_map: Name to hex color mapping.

	Returns:
		Mapped color or the default base color.
	"""
	result = color_map.get(name, DEFAULT_BASE_COLOR)
	logger.debug("Team color %r -> %s", name, result)
	return result


#============================================
def resolve_base_color(explicit: str, name: str, color_map: collections.abc.Mapping[str, str]) -> str:
	"""
	Pick the base color for a record.

	Args:
		explicit: Color field from the record, possibly empty.
		name: Display name used for the color map lookup.
		color_map: Name to hex color mapping.

	Returns:
		A valid hex color.
	"""
	candidate = explicit.strip() if explicit else ""
	if not candidate:
		candidate = lookup_team_color(name, color_map)
	try:
		return validate_hex_color(candidate)
	except InvalidColorFormat:
		logger.warning("Invalid color %r for %r, using %s", candidate, name, DEFAULT_BASE_COLOR)
		return DEFAULT_BASE_COLOR
