"""
Sequential batch generation over team records.
"""

# Standard Library
import collections.abc
import dataclasses
import logging
import threading
import time

# local repo modules
import team_card_generator as tcg
import team_card_generator.config
import team_card_generator.errors
import team_card_generator.overlay
import team_card_generator.records
import team_card_generator.render
import team_card_generator.template


Record = tcg.records.Record
Template = tcg.template.Template
TemplateNotLoaded = tcg.errors.TemplateNotLoaded
RecordGenerationFailed = tcg.errors.RecordGenerationFailed

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

PLACEHOLDER_DOCUMENT = (
	'<svg xmlns="http://www.w3.org/2000/svg" width="1000" height="1000">'
	'<text x="500" y="500" text-anchor="middle">오류 발생</text></svg>'
)

Renderer = collections.abc.Callable[[str, int, int, str, tuple[int, int, int, int]], bytes]
Sink = collections.abc.Callable[[str, bytes], str]

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RecordOutcome:
	index: int
	identity: str
	display_name: str
	status: str
	location: str = ""
	error: str = ""
	document: str = ""
	image: bytes = b""

	@property
	def ok(self) -> bool:
		return self.status == STATUS_SUCCESS


@dataclasses.dataclass
class BatchResult:
	success_count: int = 0
	outcomes: list[RecordOutcome] = dataclasses.field(default_factory=list)
	cancelled: bool = False
	data_hash: str = ""


#============================================
def generate_identity(
	record: Record,
	index: int,
	clock: collections.abc.Callable[[], float] = time.time,
) -> str:
	"""
	Build a collision-resistant output name for a record.

	Args:
		record: Source record.
		index: Position in the batch.
		clock: Time source in seconds.

	Returns:
		Identity like "용인팀_월_1718000000000_0".
	"""
	name = record.team_name or f"team_{index}"
	base = f"{name}_{record.day}" if record.day else name
	safe = tcg.render.sanitize_token(base)
	millis = int(clock() * 1000)
	return f"{safe}_{millis}_{index}"


#============================================
def generate_record(
	template: Template,
	record: Record,
	index: int,
	renderer: Renderer,
	raster_config: tcg.config.RasterConfig,
	overlay_config: tcg.config.OverlayConfig | None,
	fetcher: tcg.overlay.MapFetcher,
	color_map: collections.abc.Mapping[str, str],
) -> tuple[str, bytes]:
	"""
	Instantiate and rasterize one record.

	Returns:
		Tuple of (SVG markup, PNG bytes).
	"""
	try:
		document = tcg.template.instantiate(
			template,
			record,
			color_map=color_map,
			overlay_config=overlay_config,
			fetcher=fetcher,
		)
	except (TemplateNotLoaded, RecordGenerationFailed):
		raise
	except (tcg.errors.TeamCardError, ValueError, KeyError) as error:
		raise RecordGenerationFailed(f"record {index}: {error}") from error
	image = renderer(
		document,
		raster_config.width,
		raster_config.height,
		raster_config.fit,
		raster_config.background,
	)
	return document, image


#============================================
def run_batch(
	records: collections.abc.Iterable[Record | collections.abc.Mapping],
	template: Template | None = None,
	renderer: Renderer = tcg.render.render_to_raster,
	sink: Sink | None = None,
	fetcher: tcg.overlay.MapFetcher = tcg.overlay.fetch_static_map_image,
	overlay_config: tcg.config.OverlayConfig | None = None,
	raster_config: tcg.config.RasterConfig | None = None,
	color_map: collections.abc.Mapping[str, str] = tcg.config.DEFAULT_TEAM_COLOR_MAP,
	cancel_event: threading.Event | None = None,
	on_progress: collections.abc.Callable[[int, int], None] | None = None,
	clock: collections.abc.Callable[[], float] = time.time,
) -> BatchResult:
	"""
	Generate a card for every included record, strictly in order.

	A failing record is logged and recorded as failed; the batch moves on.
	Only a missing template stops the run.

	Args:
		records: Candidate records or field mappings; ineligible or hidden ones are skipped.
		template: Parsed base template, loaded lazily when None.
		renderer: Raster collaborator.
		sink: Output surface; when None the PNG bytes stay on the outcome.
		fetcher: Static map collaborator.
		overlay_config: Map overlay settings.
		raster_config: Output size and fit.
		color_map: Team color lookup.
		cancel_event: Checked between records.
		on_progress: Called with (done, total) after each record.
		clock: Time source for identities.

	Returns:
		BatchResult.
	"""
	if template is None:
		template = tcg.template.load_template()
	if raster_config is None:
		raster_config = tcg.config.RasterConfig()
	if overlay_config is None:
		overlay_config = tcg.config.load_overlay_config()

	batch = tcg.records.select_batch(records)
	result = BatchResult(data_hash=tcg.records.compute_records_hash(batch))
	total = len(batch)
	logger.info("Generating %d cards", total)

	for index, record in enumerate(batch):
		if cancel_event is not None and cancel_event.is_set():
			logger.warning("Batch cancelled after %d of %d records", index, total)
			result.cancelled = True
			break
		identity = generate_identity(record, index, clock)
		name = record.display_name or f"region{index}"
		outcome = RecordOutcome(index=index, identity=identity, display_name=name, status=STATUS_SUCCESS)
		try:
			document, image = generate_record(
				template,
				record,
				index,
				renderer,
				raster_config,
				overlay_config,
				fetcher,
				color_map,
			)
			outcome.document = document
			if sink is not None:
				outcome.location = sink(identity, image)
			else:
				outcome.image = image
			result.success_count += 1
			logger.info("Card generated: %s (%d/%d)", name, index + 1, total)
		except TemplateNotLoaded:
			raise
		except Exception as error:
			logger.error("Card generation failed for %s: %s", name, error, exc_info=True)
			outcome.status = STATUS_FAILED
			outcome.error = str(error)
			outcome.document = PLACEHOLDER_DOCUMENT
		result.outcomes.append(outcome)
		if on_progress is not None:
			on_progress(index + 1, total)

	logger.info("Batch finished: %d of %d succeeded", result.success_count, len(result.outcomes))
	return result
