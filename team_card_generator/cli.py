"""
CLI entry point for team card generation.
"""

# Standard Library
import argparse
import logging
import pathlib
import time

# local repo modules
import team_card_generator as tcg
import team_card_generator.batch
import team_card_generator.config
import team_card_generator.records
import team_card_generator.render
import team_card_generator.template


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Generate team schedule cards from a team sheet CSV.")
	parser.add_argument("inputs", nargs="+", help="CSV exports of the team sheet.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_dir", required=True, help="Output directory for PNG cards.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("-s", "--keep-svg", dest="keep_svg", action="store_true", help="Also write the SVG documents.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-t", "--template", dest="template_path", default=None, help="Base SVG template.")
	behavior_group.add_argument("-M", "--no-map", dest="fetch_map", action="store_false", help="Skip the static map fetch.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Enable debug logging.")

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("-l", "--max-records", dest="max_records", type=int, default=None, help="Limit number of records.")

	parser.set_defaults(
		keep_svg=False,
		fetch_map=True,
		verbose=False,
	)

	args = parser.parse_args(argv)
	return args


#============================================
def configure_logging(verbose: bool) -> None:
	"""
	Configure root logging for CLI runs.
	"""
	level = logging.DEBUG if verbose else logging.WARNING
	logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


#============================================
def gather_records(inputs: list[str], max_records: int | None) -> list[tcg.records.Record]:
	"""
	Load records from every input CSV, in argument order.

	Args:
		inputs: CSV paths.
		max_records: Optional cap on loaded records.

	Returns:
		Records.
	"""
	records: list[tcg.records.Record] = []
	for entry in inputs:
		path = pathlib.Path(entry).expanduser().resolve()
		records.extend(tcg.records.load_csv_records(path))
	if max_records is not None:
		records = records[:max_records]
	return records


#============================================
def run_pipeline(args: argparse.Namespace) -> tcg.batch.BatchResult:
	"""
	Run the full pipeline from CSV input to PNG cards.

	Args:
		args: Parsed argparse namespace.

	Returns:
		BatchResult.
	"""
	output_dir = pathlib.Path(args.output_dir)
	template_path = args.template_path or tcg.config.default_template_path()
	print("Team card pipeline")
	print(f"Output directory: {output_dir}")
	print(f"Template: {template_path}")
	print(f"Fetch map: {args.fetch_map}")
	if args.max_records is not None:
		print(f"Max records: {args.max_records}")

	start_time = time.perf_counter()
	template = tcg.template.load_template(template_path)
	records = gather_records(args.inputs, args.max_records)
	print(f"Records loaded: {len(records)}")

	sink = tcg.render.DirectorySink(output_dir)
	overlay_config = tcg.config.load_overlay_config(enabled=args.fetch_map)

	def report(done: int, total: int) -> None:
		tcg.render.print_progress("Rendering", done, total)

	result = tcg.batch.run_batch(
		records,
		template=template,
		sink=sink,
		overlay_config=overlay_config,
		on_progress=report,
	)
	print()
	print(f"Cards written: {result.success_count}")
	failed = [outcome for outcome in result.outcomes if not outcome.ok]
	for outcome in failed:
		print(f"Failed: {outcome.display_name}: {outcome.error}")

	if args.keep_svg:
		svg_sink = tcg.render.DirectorySink(output_dir, suffix=".svg")
		for outcome in result.outcomes:
			if outcome.ok:
				svg_sink(outcome.identity, outcome.document.encode("utf-8"))

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = str(output_dir / "manifest.json")
	tcg.render.write_manifest(
		pathlib.Path(manifest_path),
		result,
		list(args.inputs),
		str(template_path),
	)
	total_time = time.perf_counter() - start_time
	print("Timing: total={:.2f}s".format(total_time))
	print(f"Manifest written: {manifest_path}")
	return result


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	configure_logging(args.verbose)
	run_pipeline(args)


if __name__ == "__main__":
	main()
