import team_card_generator.layout
import team_card_generator.records


layout = team_card_generator.layout
Record = team_card_generator.records.Record


#============================================
def _by_kind(blocks, kind: str) -> list:
	return [block for block in blocks if block.kind == kind]


#============================================
def test_title_only_record_keeps_cursor_at_start() -> None:
	"""
	A record without optional blocks emits only the title.
	"""
	blocks, cursor = layout.layout_record(Record(team_name="용인팀"))
	assert cursor == 640
	assert len(blocks) == 1
	assert blocks[0].kind == "title"
	assert blocks[0].text == "용인팀"
	assert blocks[0].y == 210
	assert blocks[0].x == 215
	assert blocks[0].font_size == 80
	assert blocks[0].font_weight == 900


#============================================
def test_title_falls_back_to_region() -> None:
	blocks, _ = layout.layout_record(Record(region="부산"))
	assert [block.text for block in _by_kind(blocks, "title")] == ["부산"]


#============================================
def test_two_line_title() -> None:
	blocks, _ = layout.layout_record(Record(team_name="서울\n강남팀"))
	titles = _by_kind(blocks, "title")
	assert [(block.text, block.y) for block in titles] == [("서울", 210), ("강남팀", 290)]


#============================================
def test_schedule_blocks_at_fixed_heights() -> None:
	blocks, cursor = layout.layout_record(Record(team_name="용인팀", day="월", class_time="19:30"))
	assert [(block.text, block.y) for block in _by_kind(blocks, "day")] == [("월", 350)]
	assert [(block.text, block.y) for block in _by_kind(blocks, "time")] == [("19:30", 410)]
	assert cursor == 640


#============================================
def test_single_line_meeting_place() -> None:
	blocks, cursor = layout.layout_record(Record(meeting_place="한강공원"))
	places = _by_kind(blocks, "place")
	assert len(places) == 1
	assert places[0].text == "\U0001F4CD 한강공원"
	assert places[0].y == 640
	assert places[0].font_size == 36
	assert cursor == 685


#============================================
def test_two_line_meeting_place_shifts_first_line() -> None:
	"""
	A wrapped place lifts its first line and advances twice.
	"""
	blocks, cursor = layout.layout_record(Record(meeting_place="잠실종합운동장 보조경기장 입구"))
	places = _by_kind(blocks, "place")
	assert [(block.text, block.y) for block in places] == [
		("\U0001F4CD 잠실종합운동장", 618),
		("보조경기장 입구", 685),
	]
	assert cursor == 730


#============================================
def test_coaches_joined_with_slash() -> None:
	blocks, cursor = layout.layout_record(Record(coach="김코치", sub_coach="이코치"))
	coaches = _by_kind(blocks, "coach")
	assert [block.text for block in coaches] == ["코치: 김코치 / 이코치"]
	assert coaches[0].y == 640
	assert cursor == 665


#============================================
def test_sub_coach_alone_emits_nothing() -> None:
	blocks, cursor = layout.layout_record(Record(sub_coach="이코치"))
	assert _by_kind(blocks, "coach") == []
	assert cursor == 640


#============================================
def test_staff_variants() -> None:
	blocks, cursor = layout.layout_record(Record(manager="박매니저", leader="최리더"))
	assert [block.text for block in _by_kind(blocks, "staff")] == ["매니저: 박매니저 / 리더: 최리더"]
	assert cursor == 685

	blocks, _ = layout.layout_record(Record(leader="최리더"))
	assert [block.text for block in _by_kind(blocks, "staff")] == ["리더: 최리더"]

	blocks, _ = layout.layout_record(Record(manager="박매니저"))
	assert [block.text for block in _by_kind(blocks, "staff")] == ["매니저: 박매니저"]


#============================================
def test_parking_lines() -> None:
	blocks, cursor = layout.layout_record(Record(parking="공영주차장 이용 후 도보 5분 거리 정문 앞"))
	parking = _by_kind(blocks, "parking")
	assert [(block.text, block.y) for block in parking] == [
		("\U0001F697 공영주차장 이용 후 도보", 640),
		("5분 거리 정문 앞", 680),
	]
	assert all(block.fill == "#333" for block in parking)
	assert cursor == 720


#============================================
def test_full_record_order_and_cursor() -> None:
	"""
	Blocks flow in fixed order and the cursor accumulates every advance.
	"""
	record = Record(
		team_name="용인팀",
		day="월",
		class_time="19:30",
		meeting_place="한강공원",
		coach="김코치",
		manager="박매니저",
		parking="정문 주차장",
	)
	blocks, cursor = layout.layout_record(record)
	kinds = [block.kind for block in blocks]
	assert kinds == ["title", "day", "time", "place", "coach", "staff", "parking"]
	ys = [block.y for block in blocks[3:]]
	assert ys == [640, 685, 710, 755]
	assert cursor == 795


#============================================
def test_accumulator_custom_start() -> None:
	accumulator = layout.LayoutAccumulator(start_y=100, x=50)
	accumulator.add_coaches("김코치", "")
	assert accumulator.blocks[0].x == 50
	assert accumulator.blocks[0].y == 100
	assert accumulator.cursor == 125
