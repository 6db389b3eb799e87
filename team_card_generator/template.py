"""
Base template loading and per-record instantiation.
"""

# Standard Library
import collections.abc
import copy
import dataclasses
import logging
import pathlib
import re
import xml.etree.ElementTree as StdElementTree

# local repo modules
import team_card_generator as tcg
import team_card_generator.color
import team_card_generator.config
import team_card_generator.errors
import team_card_generator.layout
import team_card_generator.overlay
import team_card_generator.records
import team_card_generator.svg_lib


Record = tcg.records.Record
TemplateZones = tcg.config.TemplateZones
OverlayConfig = tcg.config.OverlayConfig
TemplateNotLoaded = tcg.errors.TemplateNotLoaded
RecordGenerationFailed = tcg.errors.RecordGenerationFailed

DEFAULT_TEAM_COLOR_MAP = tcg.config.DEFAULT_TEAM_COLOR_MAP
GRADIENT_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9가-힣]")

logger = logging.getLogger(__name__)

_TEMPLATE_CACHE: dict[str, "Template"] = {}
_LOCKUP_CACHE: dict[str, StdElementTree.Element] = {}


@dataclasses.dataclass(frozen=True)
class Template:
	source: str
	root: StdElementTree.Element
	path: str = ""


#============================================
def parse_template(markup: str, path: str = "") -> Template:
	"""
	Parse template markup.

	Args:
		markup: SVG document text.
		path: Where the markup came from, for messages.

	Returns:
		Template.
	"""
	try:
		root = tcg.svg_lib.parse_svg(markup)
	except (StdElementTree.ParseError, ValueError) as error:
		raise TemplateNotLoaded(f"Template {path or '<string>'} is not valid SVG: {error}") from error
	if tcg.svg_lib.local_name(root.tag) != "svg":
		raise TemplateNotLoaded(f"Template {path or '<string>'} root is not <svg>")
	return Template(source=markup, root=root, path=path)


#============================================
def load_template(path: str | pathlib.Path | None = None) -> Template:
	"""
	Load and cache the base template; later calls reuse the parsed tree.

	Args:
		path: Template file, defaults to the packaged template.

	Returns:
		Template.
	"""
	if path is None:
		path = tcg.config.default_template_path()
	key = str(path)
	cached = _TEMPLATE_CACHE.get(key)
	if cached is not None:
		return cached
	try:
		markup = pathlib.Path(path).read_text(encoding="utf-8")
	except OSError as error:
		raise TemplateNotLoaded(f"Cannot read template {key}: {error}") from error
	template = parse_template(markup, key)
	_TEMPLATE_CACHE[key] = template
	logger.info("Template loaded: %s", key)
	return template


#============================================
def load_brand_lockup() -> StdElementTree.Element:
	"""
	Parse the packaged brand lockup artwork once.
	"""
	key = tcg.config.BRAND_LOCKUP_PATH
	if key not in _LOCKUP_CACHE:
		markup = pathlib.Path(key).read_text(encoding="utf-8")
		_LOCKUP_CACHE[key] = tcg.svg_lib.parse_svg(markup)
	return _LOCKUP_CACHE[key]


#============================================
def is_transient(element: StdElementTree.Element, zones: TemplateZones) -> bool:
	"""
	Decide whether a template element is stale authoring content.

	Args:
		element: Template element.
		zones: Zone markers and heuristics.

	Returns:
		True when the element must be stripped.
	"""
	if element.get(zones.transient_attribute) == zones.transient_value:
		return True
	name = tcg.svg_lib.local_name(element.tag)
	element_id = element.get("id")
	if name == "g" and element_id == zones.owner_group_id:
		return True
	if name == "image" and element_id == zones.background_image_id:
		return True
	if name != "path":
		return False
	if element_id is not None:
		return True
	# left-panel glyph outlines start at x in 100-299
	path_data = element.get("d", "")
	if re.match(zones.left_panel_path_pattern, path_data) and element.get("fill") == zones.left_panel_path_fill:
		return True
	return False


#============================================
def strip_transient_content(root: StdElementTree.Element, zones: TemplateZones) -> int:
	"""
	Remove stale glyphs, owner groups and background images.

	Args:
		root: Working copy of the template.
		zones: Zone markers and heuristics.

	Returns:
		Number of removed elements.
	"""
	removed = tcg.svg_lib.remove_elements(root, lambda element: is_transient(element, zones))
	logger.debug("Stripped %d transient template elements", removed)
	return removed


#============================================
def gradient_id_for(name: str) -> str:
	"""
	Build the gradient resource id for a display name.
	"""
	cleaned = GRADIENT_ID_UNSAFE.sub("", name or "unknown")
	return f"gradient_{cleaned}"


#============================================
def apply_gradient(
	root: StdElementTree.Element,
	record: Record,
	color_map: collections.abc.Mapping[str, str],
	zones: TemplateZones,
) -> str:
	"""
	Insert the record gradient into defs and repoint the background shape.

	Args:
		root: Working copy of the template.
		record: Source record.
		color_map: Team color lookup used when the record has no color.
		zones: Zone markers.

	Returns:
		The gradient id.
	"""
	name = record.display_name or "default"
	base_color = tcg.color.resolve_base_color(record.color, name, color_map)
	pair = tcg.color.derive_gradient(base_color)
	gradient_id = gradient_id_for(name)
	logger.debug("Gradient %s: base %s -> %s / %s", gradient_id, base_color, pair.lighter, pair.darker)

	defs = tcg.svg_lib.ensure_defs(root)
	gradient = tcg.svg_lib.make_element(root, "linearGradient", {
		"id": gradient_id,
		"x1": "0%",
		"y1": "0%",
		"x2": "100%",
		"y2": "100%",
	})
	for offset, stop_color in (("0%", pair.lighter), ("100%", pair.darker)):
		gradient.append(tcg.svg_lib.make_element(root, "stop", {
			"offset": offset,
			"style": f"stop-color:{stop_color};stop-opacity:1",
		}))
	defs.append(gradient)

	background = tcg.svg_lib.find_by_id(root, "rect", zones.background_shape_id)
	if background is None:
		logger.warning("Background shape %r not found; gradient unused", zones.background_shape_id)
	else:
		background.set("fill", f"url(#{gradient_id})")
	return gradient_id


#============================================
def build_brand_mark(root: StdElementTree.Element) -> StdElementTree.Element:
	"""
	Wrap the brand lockup in a positioned group.
	"""
	x, y = tcg.config.LOGO_TRANSLATE
	group = tcg.svg_lib.make_element(root, "g", {"id": "brand-mark", "transform": f"translate({x}, {y})"})
	group.append(copy.deepcopy(load_brand_lockup()))
	return group


#============================================
def build_border(root: StdElementTree.Element) -> StdElementTree.Element:
	"""
	Build the full-canvas border stroke.
	"""
	inset = tcg.config.BORDER_WIDTH / 2.0
	return tcg.svg_lib.make_element(root, "rect", {
		"id": "card-border",
		"x": inset,
		"y": inset,
		"width": tcg.config.CANVAS_WIDTH - 2 * inset,
		"height": tcg.config.CANVAS_HEIGHT - 2 * inset,
		"fill": "none",
		"stroke": "black",
		"stroke-width": tcg.config.BORDER_WIDTH,
	})


#============================================
def instantiate(
	template: Template | None,
	record: Record,
	color_map: collections.abc.Mapping[str, str] = DEFAULT_TEAM_COLOR_MAP,
	zones: TemplateZones | None = None,
	overlay_config: OverlayConfig | None = None,
	fetcher: tcg.overlay.MapFetcher = tcg.overlay.fetch_static_map_image,
) -> str:
	"""
	Produce the finished SVG document for one record.

	Args:
		template: Parsed base template.
		record: Source record.
		color_map: Team color lookup.
		zones: Zone markers and heuristics.
		overlay_config: Map overlay settings.
		fetcher: Static map collaborator.

	Returns:
		SVG markup.
	"""
	if template is None:
		raise TemplateNotLoaded("No base template is loaded")
	if zones is None:
		zones = TemplateZones()

	root = copy.deepcopy(template.root)
	strip_transient_content(root, zones)
	apply_gradient(root, record, color_map, zones)

	blocks, cursor = tcg.layout.layout_record(record)
	for block in blocks:
		root.append(tcg.svg_lib.make_text(
			root,
			block.text,
			block.x,
			block.y,
			block.font_size,
			block.font_weight,
			block.fill,
		))
	logger.debug("Laid out %d text blocks, cursor at %s", len(blocks), cursor)

	label = record.display_name or "default"
	overlay = tcg.overlay.compose_overlay(
		root,
		record.coordinates,
		record.notes,
		label,
		config=overlay_config,
		fetcher=fetcher,
	)
	if overlay is None:
		root.append(tcg.overlay.build_neutral_panel(root, overlay_config))
	else:
		root.append(overlay)
	root.append(build_brand_mark(root))
	root.append(build_border(root))

	markup = tcg.svg_lib.serialize(root)
	try:
		tcg.svg_lib.check_well_formed(markup)
	except ValueError as error:
		raise RecordGenerationFailed(f"{label}: {error}") from error
	return markup
