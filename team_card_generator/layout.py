"""
Vertical placement of the left-panel text blocks.
"""

# Standard Library
import dataclasses

# local repo modules
import team_card_generator as tcg
import team_card_generator.config
import team_card_generator.records
import team_card_generator.wrap


Record = tcg.records.Record

LEFT_PANEL_CENTER_X = tcg.config.LEFT_PANEL_CENTER_X
TITLE_MAX_CHARS = tcg.config.TITLE_MAX_CHARS
TITLE_LINE_Y = tcg.config.TITLE_LINE_Y
TITLE_FONT_SIZE = tcg.config.TITLE_FONT_SIZE
TITLE_FONT_WEIGHT = tcg.config.TITLE_FONT_WEIGHT
DAY_Y = tcg.config.DAY_Y
TIME_Y = tcg.config.TIME_Y
SCHEDULE_FONT_SIZE = tcg.config.SCHEDULE_FONT_SIZE
SCHEDULE_FONT_WEIGHT = tcg.config.SCHEDULE_FONT_WEIGHT
LAYOUT_START_Y = tcg.config.LAYOUT_START_Y


@dataclasses.dataclass
class TextBlock:
	kind: str
	text: str
	x: float
	y: float
	font_size: int
	font_weight: int
	fill: str = "black"


class LayoutAccumulator:
	"""
	Walk the optional blocks top to bottom, advancing a cursor.

	Title, day and time sit at fixed heights. Meeting place, coaches, staff
	and parking flow from LAYOUT_START_Y; a missing field emits nothing and
	leaves the cursor where it is.
	"""

	def __init__(self, start_y: float = LAYOUT_START_Y, x: float = LEFT_PANEL_CENTER_X) -> None:
		self.cursor = start_y
		self.x = x
		self.blocks: list[TextBlock] = []

	def _emit(self, kind: str, text: str, y: float, font_size: int, font_weight: int, fill: str = "black") -> None:
		self.blocks.append(TextBlock(kind, text, self.x, y, font_size, font_weight, fill))

	def add_title(self, name: str) -> None:
		if not name:
			return
		lines = tcg.wrap.wrap_title(name, TITLE_MAX_CHARS)
		for line, y in zip(lines[:2], TITLE_LINE_Y):
			if line:
				self._emit("title", line, y, TITLE_FONT_SIZE, TITLE_FONT_WEIGHT)

	def add_schedule(self, day: str, class_time: str) -> None:
		if day:
			self._emit("day", day, DAY_Y, SCHEDULE_FONT_SIZE, SCHEDULE_FONT_WEIGHT)
		if class_time:
			self._emit("time", class_time, TIME_Y, SCHEDULE_FONT_SIZE, SCHEDULE_FONT_WEIGHT)

	def add_meeting_place(self, place: str) -> None:
		if not place:
			return
		first, second, _ = tcg.wrap.wrap_title(place, tcg.config.PLACE_MAX_CHARS)
		# two lines: lift the first so the pair stays centred on the cursor
		first_y = self.cursor - tcg.config.PLACE_TWO_LINE_SHIFT if second else self.cursor
		self._emit(
			"place",
			f"{tcg.config.PLACE_PREFIX}{first}",
			first_y,
			tcg.config.PLACE_FONT_SIZE,
			tcg.config.PLACE_FONT_WEIGHT,
		)
		self.cursor += tcg.config.PLACE_LINE_ADVANCE
		if second:
			self._emit("place", second, self.cursor, tcg.config.PLACE_FONT_SIZE, tcg.config.PLACE_FONT_WEIGHT)
			self.cursor += tcg.config.PLACE_LINE_ADVANCE

	def add_coaches(self, coach: str, sub_coach: str) -> None:
		if not coach:
			return
		text = coach
		if sub_coach:
			text += f" / {sub_coach}"
		self._emit("coach", f"코치: {text}", self.cursor, tcg.config.COACH_FONT_SIZE, tcg.config.COACH_FONT_WEIGHT)
		self.cursor += tcg.config.COACH_ADVANCE

	def add_staff(self, manager: str, leader: str) -> None:
		parts = []
		if manager:
			parts.append(f"매니저: {manager}")
		if leader:
			parts.append(f"리더: {leader}")
		if not parts:
			return
		self._emit("staff", " / ".join(parts), self.cursor, tcg.config.STAFF_FONT_SIZE, tcg.config.STAFF_FONT_WEIGHT)
		self.cursor += tcg.config.STAFF_ADVANCE

	def add_parking(self, parking: str) -> None:
		if not parking:
			return
		lines = tcg.wrap.wrap_title(parking, tcg.config.PARKING_MAX_CHARS, tcg.config.PARKING_MAX_LINES)
		for index, line in enumerate(lines[:tcg.config.PARKING_MAX_LINES]):
			if not line:
				continue
			text = f"{tcg.config.PARKING_PREFIX}{line}" if index == 0 else line
			self._emit(
				"parking",
				text,
				self.cursor,
				tcg.config.PARKING_FONT_SIZE,
				tcg.config.PARKING_FONT_WEIGHT,
				tcg.config.PARKING_FILL,
			)
			self.cursor += tcg.config.PARKING_LINE_ADVANCE

	def place_record(self, record: Record) -> list[TextBlock]:
		"""
		Lay out every left-panel block for a record, in fixed order.

		Args:
			record: Source record.

		Returns:
			Positioned text blocks.
		"""
		self.add_title(record.display_name)
		self.add_schedule(record.day, record.class_time)
		self.add_meeting_place(record.meeting_place)
		self.add_coaches(record.coach, record.sub_coach)
		self.add_staff(record.manager, record.leader)
		self.add_parking(record.parking)
		return self.blocks


#============================================
def layout_record(record: Record) -> tuple[list[TextBlock], float]:
	"""
	Lay out a record with a fresh accumulator.

	Args:
		record: Source record.

	Returns:
		Tuple of (text blocks, final cursor height).
	"""
	accumulator = LayoutAccumulator()
	blocks = accumulator.place_record(record)
	return blocks, accumulator.cursor
