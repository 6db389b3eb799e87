import json
import threading

import pytest

import team_card_generator.batch
import team_card_generator.errors
import team_card_generator.records
import team_card_generator.render


batch = team_card_generator.batch
Record = team_card_generator.records.Record


#============================================
def _record(name: str, day: str = "월", **fields) -> Record:
	return Record(region="서울", team_name=name, day=day, visibility="Y", **fields)


#============================================
def fake_renderer(document, width, height, fit, background) -> bytes:
	return b"PNG:" + document[:16].encode("utf-8")


#============================================
def fixed_clock() -> float:
	return 1718000000.0


#============================================
def test_identities_are_distinct_for_same_name_and_day() -> None:
	record = _record("용인팀")
	first = batch.generate_identity(record, 0, fixed_clock)
	second = batch.generate_identity(record, 1, fixed_clock)
	assert first == "용인팀_월_1718000000000_0"
	assert first != second


#============================================
def test_identity_without_name() -> None:
	identity = batch.generate_identity(Record(day="화"), 3, fixed_clock)
	assert identity == "team_3_화_1718000000000_3"


#============================================
def test_batch_generates_in_order(template, ok_fetcher, overlay_config) -> None:
	records = [_record("a팀", coordinates="37.5,127.0"), _record("b팀"), _record("a팀")]
	progress = []
	result = batch.run_batch(
		records,
		template=template,
		renderer=fake_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
		on_progress=lambda done, total: progress.append((done, total)),
		clock=fixed_clock,
	)
	assert result.success_count == 3
	assert [outcome.display_name for outcome in result.outcomes] == ["a팀", "b팀", "a팀"]
	assert len({outcome.identity for outcome in result.outcomes}) == 3
	assert all(outcome.image.startswith(b"PNG:") for outcome in result.outcomes)
	assert progress == [(1, 3), (2, 3), (3, 3)]
	assert len(result.data_hash) == 64
	assert not result.cancelled


#============================================
def test_map_timeout_still_succeeds(template, timeout_fetcher, overlay_config) -> None:
	"""
	A failed map fetch degrades to a placeholder, not a failed record.
	"""
	result = batch.run_batch(
		[_record("용인팀", coordinates="37.5,127.0")],
		template=template,
		renderer=fake_renderer,
		fetcher=timeout_fetcher,
		overlay_config=overlay_config,
	)
	assert result.success_count == 1
	assert result.outcomes[0].ok
	assert "map-placeholder" in result.outcomes[0].document


#============================================
def test_renderer_failure_isolated(template, ok_fetcher, overlay_config) -> None:
	"""
	One failing record is marked failed and the batch continues.
	"""
	def flaky_renderer(document, width, height, fit, background):
		if "b팀" in document:
			raise team_card_generator.errors.RenderError("rasterizer crashed")
		return b"PNG"

	records = [_record("a팀"), _record("b팀"), _record("c팀")]
	result = batch.run_batch(
		records,
		template=template,
		renderer=flaky_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
	)
	assert result.success_count == 2
	statuses = [outcome.status for outcome in result.outcomes]
	assert statuses == [batch.STATUS_SUCCESS, batch.STATUS_FAILED, batch.STATUS_SUCCESS]
	failed = result.outcomes[1]
	assert failed.error == "rasterizer crashed"
	assert failed.document == batch.PLACEHOLDER_DOCUMENT
	assert failed.image == b""


#============================================
def test_cancellation_between_records(template, ok_fetcher, overlay_config) -> None:
	cancel_event = threading.Event()

	def cancel_after_first(done, total):
		cancel_event.set()

	result = batch.run_batch(
		[_record("a팀"), _record("b팀"), _record("c팀")],
		template=template,
		renderer=fake_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
		cancel_event=cancel_event,
		on_progress=cancel_after_first,
	)
	assert result.cancelled
	assert len(result.outcomes) == 1
	assert result.success_count == 1


#============================================
def test_ineligible_records_filtered(template, ok_fetcher, overlay_config) -> None:
	records = [
		_record("a팀"),
		Record(region="서울", team_name="hidden", day="월", visibility="N"),
		Record(team_name="no-region", day="월", visibility="Y"),
		Record(),
	]
	result = batch.run_batch(
		records,
		template=template,
		renderer=fake_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
	)
	assert [outcome.display_name for outcome in result.outcomes] == ["a팀"]


#============================================
def test_empty_batch(template, ok_fetcher, overlay_config) -> None:
	result = batch.run_batch([], template=template, renderer=fake_renderer, fetcher=ok_fetcher, overlay_config=overlay_config)
	assert result.success_count == 0
	assert result.outcomes == []


#============================================
def test_missing_template_stops_batch(monkeypatch, ok_fetcher, overlay_config) -> None:
	monkeypatch.setenv("TEAM_CARD_TEMPLATE", "/nonexistent/template.svg")
	with pytest.raises(team_card_generator.errors.TemplateNotLoaded):
		batch.run_batch(
			[_record("a팀")],
			renderer=fake_renderer,
			fetcher=ok_fetcher,
			overlay_config=overlay_config,
		)


#============================================
def test_sink_receives_payload(template, ok_fetcher, overlay_config, tmp_path) -> None:
	sink = team_card_generator.render.DirectorySink(tmp_path / "cards")
	result = batch.run_batch(
		[_record("용인팀")],
		template=template,
		renderer=fake_renderer,
		sink=sink,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
		clock=fixed_clock,
	)
	outcome = result.outcomes[0]
	expected = tmp_path / "cards" / "용인팀_월_1718000000000_0.png"
	assert outcome.location == str(expected)
	assert expected.read_bytes().startswith(b"PNG:")
	assert outcome.image == b""


#============================================
def test_write_manifest(template, ok_fetcher, overlay_config, tmp_path) -> None:
	result = batch.run_batch(
		[_record("용인팀")],
		template=template,
		renderer=fake_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
	)
	manifest_path = tmp_path / "out" / "manifest.json"
	team_card_generator.render.write_manifest(manifest_path, result, ["teams.csv"], "template.svg")
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["success_count"] == 1
	assert data["failed_count"] == 0
	assert data["inputs"] == ["teams.csv"]
	assert data["records"][0]["display_name"] == "용인팀"
	assert data["data_hash"] == result.data_hash


#============================================
def test_plain_timeout_error_still_succeeds(template, overlay_config) -> None:
	"""
	A fetcher raising a builtin timeout degrades to the placeholder.
	"""
	def fetch(*args):
		raise TimeoutError("slow")

	result = batch.run_batch(
		[_record("용인팀", coordinates="37.5,127.0")],
		template=template,
		renderer=fake_renderer,
		fetcher=fetch,
		overlay_config=overlay_config,
	)
	assert result.outcomes[0].ok
	assert "map-placeholder" in result.outcomes[0].document


#============================================
def test_batch_accepts_plain_mappings(template, ok_fetcher, overlay_config) -> None:
	rows = [
		{"지역": "서울", "팀명": "테스트팀", "요일": "월", "노출여부": "Y"},
		{"지역": "서울", "팀명": "숨김팀", "요일": "화", "노출여부": "N"},
		{"팀명": "빈행"},
	]
	result = batch.run_batch(
		rows,
		template=template,
		renderer=fake_renderer,
		fetcher=ok_fetcher,
		overlay_config=overlay_config,
	)
	assert result.success_count == 1
	assert [outcome.display_name for outcome in result.outcomes] == ["테스트팀"]
