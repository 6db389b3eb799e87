"""
SVG parsing, element construction and serialization.
"""

# Standard Library
import collections.abc
import re
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import defusedxml.ElementTree as ElementTree

# local repo modules
import team_card_generator as tcg
import team_card_generator.config


SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XLINK_HREF = f"{{{XLINK_NS}}}href"

FONT_FAMILY = tcg.config.FONT_FAMILY

GROUP_OPEN_PATTERN = re.compile(r"<g[\s/>]")
GROUP_SELF_CLOSING_PATTERN = re.compile(r"<g(\s[^>]*)?/>")
GROUP_CLOSE_PATTERN = re.compile(r"</g>")

StdElementTree.register_namespace("", SVG_NS)
StdElementTree.register_namespace("xlink", XLINK_NS)


#============================================
def local_name(tag: str) -> str:
	"""
	Strip the namespace from an element tag.

	Args:
		tag: Tag like "{http://www.w3.org/2000/svg}rect".

	Returns:
		Local name like "rect".
	"""
	if tag.startswith("{"):
		return tag.split("}", 1)[1]
	return tag


#============================================
def namespace_of(element: StdElementTree.Element) -> str:
	"""
	Return the namespace URI of an element, or "".
	"""
	if element.tag.startswith("{"):
		return element.tag[1:].split("}", 1)[0]
	return ""


#============================================
def find_first_child(
	element: StdElementTree.Element,
	suffix: str,
) -> StdElementTree.Element | None:
	"""
	Find the first child element that ends with the given suffix.

	Args:
		element: XML element to search.
		suffix: Tag suffix to match.

	Returns:
		Matching child element or None.
	"""
	for child in list(element):
		if child.tag.endswith(suffix):
			return child
	return None


#============================================
def parse_svg(markup: str | bytes) -> StdElementTree.Element:
	"""
	Parse SVG markup into an element tree.

	Args:
		markup: SVG document text.

	Returns:
		Root element.
	"""
	if isinstance(markup, str):
		markup = markup.encode("utf-8")
	return ElementTree.fromstring(markup)


#============================================
def make_element(
	root: StdElementTree.Element,
	name: str,
	attrib: dict[str, str] | None = None,
	text: str | None = None,
) -> StdElementTree.Element:
	"""
	Create a detached element in the same namespace as root.

	Args:
		root: Document root, used for its namespace.
		name: Local tag name.
		attrib: Attribute values; numbers are converted to strings.
		text: Optional element text.

	Returns:
		New element.
	"""
	namespace = namespace_of(root)
	tag = f"{{{namespace}}}{name}" if namespace else name
	element = StdElementTree.Element(tag)
	for key, value in (attrib or {}).items():
		element.set(key, format_value(value))
	if text is not None:
		element.text = text
	return element


#============================================
def format_value(value: object) -> str:
	"""
	Format an attribute value, dropping a trailing ".0" on whole floats.
	"""
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	return str(value)


#============================================
def make_text(
	root: StdElementTree.Element,
	text: str,
	x: float,
	y: float,
	font_size: int,
	font_weight: int,
	fill: str = "black",
	anchor: str | None = "middle",
) -> StdElementTree.Element:
	"""
	Create a text element with the card font.

	Args:
		root: Document root.
		text: Text content.
		x: Anchor x position.
		y: Baseline y position.
		font_size: Font size in canvas units.
		font_weight: CSS font weight.
		fill: Fill color.
		anchor: text-anchor value, or None for start.

	Returns:
		New text element.
	"""
	attrib = {
		"x": x,
		"y": y,
		"font-family": FONT_FAMILY,
		"font-size": font_size,
		"font-weight": font_weight,
	}
	if anchor:
		attrib["text-anchor"] = anchor
	attrib["fill"] = fill
	return make_element(root, "text", attrib, text)


#============================================
def build_parent_map(root: StdElementTree.Element) -> dict[StdElementTree.Element, StdElementTree.Element]:
	"""
	Map every element to its parent.
	"""
	return {child: parent for parent in root.iter() for child in parent}


#============================================
def remove_elements(
	root: StdElementTree.Element,
	predicate: collections.abc.Callable[[StdElementTree.Element], bool],
) -> int:
	"""
	Remove every element matching predicate, along with its subtree.

	Args:
		root: Document root; never removed itself.
		predicate: Selection function.

	Returns:
		Number of elements removed.
	"""
	parents = build_parent_map(root)
	doomed = [element for element in root.iter() if element is not root and predicate(element)]
	removed = 0
	for element in doomed:
		parent = parents.get(element)
		if parent is None:
			continue
		# skip descendants of an element that is already gone
		if element not in list(parent):
			continue
		parent.remove(element)
		removed += 1
	return removed


#============================================
def find_by_id(
	root: StdElementTree.Element,
	name: str,
	element_id: str,
) -> StdElementTree.Element | None:
	"""
	Find the first element with a local name and id.

	Args:
		root: Document root.
		name: Local tag name.
		element_id: id attribute value.

	Returns:
		Matching element or None.
	"""
	for element in root.iter():
		if local_name(element.tag) == name and element.get("id") == element_id:
			return element
	return None


#============================================
def ensure_defs(root: StdElementTree.Element) -> StdElementTree.Element:
	"""
	Return the root defs element, creating it first in document order.
	"""
	defs = find_first_child(root, "defs")
	if defs is None:
		defs = make_element(root, "defs")
		root.insert(0, defs)
	return defs


#============================================
def serialize(root: StdElementTree.Element) -> str:
	"""
	Serialize an element tree to SVG text.

	Args:
		root: Document root.

	Returns:
		SVG markup.
	"""
	return StdElementTree.tostring(root, encoding="unicode")


#============================================
def count_group_markers(markup: str) -> tuple[int, int]:
	"""
	Count group open and close markers, treating <g/> as both.

	Args:
		markup: SVG markup.

	Returns:
		Tuple of (opening, closing) counts.
	"""
	self_closing = len(GROUP_SELF_CLOSING_PATTERN.findall(markup))
	opening = len(GROUP_OPEN_PATTERN.findall(markup))
	closing = len(GROUP_CLOSE_PATTERN.findall(markup)) + self_closing
	return (opening, closing)


#============================================
def check_well_formed(markup: str) -> None:
	"""
	Re-parse serialized markup and confirm group markers balance.

	Args:
		markup: SVG markup.

	Raises:
		ValueError: when the markup is not well formed.
	"""
	try:
		parse_svg(markup)
	except (StdElementTree.ParseError, ValueError) as error:
		raise ValueError(f"SVG is not well formed: {error}") from error
	opening, closing = count_group_markers(markup)
	if opening != closing:
		raise ValueError(f"Unbalanced groups: {opening} opened, {closing} closed")
