"""
Team records: field mapping, eligibility and loading.
"""

# Standard Library
import collections.abc
import csv
import dataclasses
import hashlib
import json
import logging
import pathlib
import re

# local repo modules
import team_card_generator as tcg
import team_card_generator.config


AFFIRMATIVE_MARKERS = tcg.config.AFFIRMATIVE_MARKERS

# internal key -> Record attribute
FIELD_KEYS = {
	"지역": "region",
	"구분": "category",
	"팀명": "team_name",
	"요일": "day",
	"수업시간": "class_time",
	"코치명": "coach",
	"부코치명": "sub_coach",
	"매니저": "manager",
	"리더": "leader",
	"집합장소명": "meeting_place",
	"주차장관련": "parking",
	"좌표": "coordinates",
	"지역컬러": "color",
	"특이사항": "notes",
	"노출여부": "visibility",
}

# spreadsheet header -> internal key
SHEET_COLUMNS = {
	"지역": "지역",
	"구분": "구분",
	"팀명": "팀명",
	"요일": "요일",
	"수업시간": "수업시간",
	"메인코치": "코치명",
	"부코치": "부코치명",
	"매니저": "매니저",
	"리더": "리더",
	"집합 장소명": "집합장소명",
	"주차장명": "주차장관련",
	"집합 장소 좌표\n구글에서 찾아넣기": "좌표",
	"지역컬러": "지역컬러",
	"특이사항": "특이사항",
	"노출여부": "노출여부",
}

SPREADSHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Record:
	region: str = ""
	category: str = ""
	team_name: str = ""
	day: str = ""
	class_time: str = ""
	coach: str = ""
	sub_coach: str = ""
	manager: str = ""
	leader: str = ""
	meeting_place: str = ""
	parking: str = ""
	coordinates: str = ""
	color: str = ""
	notes: str = ""
	visibility: str = ""

	@classmethod
	def from_mapping(cls, mapping: collections.abc.Mapping) -> "Record":
		values = {}
		for key, attribute in FIELD_KEYS.items():
			value = mapping.get(key)
			values[attribute] = "" if value is None else str(value)
		return cls(**values)

	@property
	def display_name(self) -> str:
		return self.team_name or self.region

	@property
	def is_eligible(self) -> bool:
		return bool(self.region.strip()) and bool(self.day.strip())

	@property
	def is_visible(self) -> bool:
		return self.visibility in AFFIRMATIVE_MARKERS

	@property
	def is_included(self) -> bool:
		return self.is_eligible and self.is_visible


#============================================
def record_from_sheet_row(row: collections.abc.Mapping) -> Record:
	"""
	Map a raw spreadsheet row onto a Record.

	Args:
		row: Mapping of sheet header to cell value.

	Returns:
		Record.
	"""
	mapped = {}
	for header, key in SHEET_COLUMNS.items():
		mapped[key] = row.get(header, "")
	return Record.from_mapping(mapped)


#============================================
def select_batch(records: collections.abc.Iterable[Record | collections.abc.Mapping]) -> list[Record]:
	"""
	Keep eligible, visible records in their original order.

	Args:
		records: Candidate records, or mappings keyed by the internal field names.

	Returns:
		Records to generate.
	"""
	batch: list[Record] = []
	for record in records:
		if not isinstance(record, Record):
			record = Record.from_mapping(record)
		if not record.region.strip() and not record.day.strip():
			# blank spreadsheet row
			continue
		if not record.is_included:
			logger.debug(
				"Skipping %r: eligible=%s visible=%s (value %r)",
				record.display_name,
				record.is_eligible,
				record.is_visible,
				record.visibility,
			)
			continue
		batch.append(record)
	return batch


#============================================
def load_csv_records(path: pathlib.Path) -> list[Record]:
	"""
	Load records from a CSV export of the team sheet.

	Args:
		path: CSV file with the sheet headers in the first row.

	Returns:
		All records in file order.
	"""
	records: list[Record] = []
	with open(path, "r", encoding="utf-8-sig", newline="") as handle:
		reader = csv.DictReader(handle)
		for row in reader:
			records.append(record_from_sheet_row(row))
	logger.info("Loaded %d records from %s", len(records), path)
	return records


#============================================
def extract_spreadsheet_id(value: str) -> str:
	"""
	Extract the spreadsheet ID from a Google Sheets URL.

	Args:
		value: Sheet URL or bare ID.

	Returns:
		Spreadsheet ID, or the input when it is not a URL.
	"""
	match = SPREADSHEET_ID_PATTERN.search(value)
	if match:
		return match.group(1)
	return value


#============================================
def sheet_color_to_hex(background: collections.abc.Mapping) -> str:
	"""
	Convert a Sheets API backgroundColor (0.0-1.0 floats) to hex.

	Args:
		background: Mapping with optional red, green, blue keys.

	Returns:
		Color string like "#aabbcc".
	"""
	channels = []
	for key in ("red", "green", "blue"):
		level = int(float(background.get(key, 0.0) or 0.0) * 255.0 + 0.5)
		channels.append(min(255, max(0, level)))
	return "#{:02x}{:02x}{:02x}".format(*channels)


#============================================
def compute_records_hash(records: collections.abc.Sequence[Record]) -> str:
	"""
	Hash the record set for change detection.

	Args:
		records: Records in batch order.

	Returns:
		SHA256 hex digest.
	"""
	payload = json.dumps(
		[dataclasses.asdict(record) for record in records],
		ensure_ascii=False,
		sort_keys=True,
	)
	return hashlib.sha256(payload.encode("utf-8")).hexdigest()
