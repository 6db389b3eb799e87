"""
Greedy line wrapping for titles and free-form notes.

Both policies count characters rather than measuring glyphs, so the results
are heuristic. Wrapping is single-pass and never backtracks.
"""

# Standard Library
import dataclasses
import re

# local repo modules
import team_card_generator as tcg
import team_card_generator.config


TITLE_SLOTS = tcg.config.TITLE_SLOTS
NOTE_TIERS = tcg.config.NOTE_TIERS

TITLE_BREAK_PATTERN = re.compile(r"(\s|/|,|-)")


@dataclasses.dataclass
class NoteLayout:
	lines: list[str]
	font_size: int
	chars_per_line: int
	max_lines: int
	line_height: int


#============================================
def wrap_title(text: str, max_chars: int, max_lines: int = 2) -> list[str]:
	"""
	Wrap a short title into at most max_lines lines.

	Args:
		text: Input text, may contain explicit newlines.
		max_chars: Maximum characters per line.
		max_lines: Maximum number of emitted lines.

	Returns:
		List of max(TITLE_SLOTS, max_lines) strings, unused slots empty.
	"""
	slots = max(TITLE_SLOTS, max_lines)
	result = [""] * slots
	if not text:
		return result

	current = 0
	for line in text.split("\n"):
		if current >= max_lines:
			break
		if len(line) <= max_chars:
			result[current] = line.strip()
			current += 1
			continue
		pending = ""
		for token in TITLE_BREAK_PATTERN.split(line):
			if len(pending) + len(token) <= max_chars:
				pending += token
				continue
			if pending.strip() and current < max_lines:
				result[current] = pending.strip()
				current += 1
			pending = token
		if pending.strip() and current < max_lines:
			result[current] = pending.strip()
			current += 1
	return result


#============================================
def select_note_tier(length: int) -> tuple[int, int, int, int]:
	"""
	Pick font size and wrapping limits for a notes text length.

	Args:
		length: Total character count.

	Returns:
		Tuple of (font_size, chars_per_line, max_lines, line_height).
	"""
	for limit, font_size, chars_per_line, max_lines, line_height in NOTE_TIERS:
		if limit is None or length <= limit:
			return (font_size, chars_per_line, max_lines, line_height)
	raise ValueError("NOTE_TIERS must end with an open-ended tier")


#============================================
def wrap_notes(text: str) -> NoteLayout:
	"""
	Wrap free-form notes for the fixed-size caption box.

	Args:
		text: Notes text.

	Returns:
		NoteLayout with the wrapped lines and the chosen tier.
	"""
	text = text or ""
	font_size, chars_per_line, max_lines, line_height = select_note_tier(len(text))
	layout = NoteLayout(
		lines=[],
		font_size=font_size,
		chars_per_line=chars_per_line,
		max_lines=max_lines,
		line_height=line_height,
	)
	current = ""
	for word in text.split():
		candidate = f"{current} {word}" if current else word
		if len(candidate) > chars_per_line and current:
			layout.lines.append(current)
			current = word
		else:
			current = candidate
		if len(layout.lines) >= max_lines - 1:
			break
	if current and len(layout.lines) < max_lines:
		layout.lines.append(current)
	return layout
