import argparse
import logging
import os
import sys
import typing

import leitmotif.batch
import leitmotif.codec
import leitmotif.compressor
import leitmotif.config
import leitmotif.exceptions
import leitmotif.midi_io


logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	"""
	Build the command-line parser.
	"""

	parser = argparse.ArgumentParser(prog="leitmotif", description="Lossless motif-aware MIDI compression.")
	parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output.")
	parser.add_argument("--config", "-c", default=None, help="YAML configuration file.")

	commands = parser.add_subparsers(dest="command", required=True)

	encode = commands.add_parser("encode", help="Encode a MIDI file to JSON.")
	encode.add_argument("input")
	encode.add_argument("output")

	decode = commands.add_parser("decode", help="Decode a JSON document to MIDI.")
	decode.add_argument("input")
	decode.add_argument("output")

	batch = commands.add_parser("batch", help="Encode or decode every file in a directory.")
	batch.add_argument("direction", choices=["encode", "decode"])
	batch.add_argument("input_dir")
	batch.add_argument("output_dir")
	batch.add_argument("--no-overwrite", action="store_true", help="Skip files whose output already exists.")

	report = commands.add_parser("report", help="Summarise a JSON document or MIDI file.")
	report.add_argument("input")

	config = commands.add_parser("config", help="Print the effective configuration as YAML.")
	config.add_argument("--write", default=None, help="Also write it to this path.")

	for sub in (encode, batch, report):
		sub.add_argument("--motifless", action="store_true", help="Store every note literally.")
		sub.add_argument("--preserve-tracks", action="store_true", default=None, help="Keep voices in their original tracks.")

	return parser


def _load_config (args: argparse.Namespace) -> leitmotif.config.CodecConfig:

	config = leitmotif.config.load_config(args.config) if args.config else leitmotif.config.CodecConfig()

	if getattr(args, "motifless", False):
		config.compression.motifs_disabled = True

	return config


def _report (args: argparse.Namespace, config: leitmotif.config.CodecConfig) -> None:

	if os.path.splitext(args.input)[1].lower() == ".json":
		document = leitmotif.codec.CompressedDocument.load(args.input)

	else:
		piece = leitmotif.midi_io.read_midi(args.input)
		document = leitmotif.midi_io.encode_piece(piece, config=config, preserve_tracks=args.preserve_tracks)

	stats = document.stats()

	print(f"Key:        {document.key.name}")
	print(f"Tempo:      {document.tempo} BPM, {document.ppq} ppq")
	print(f"Voices:     {len(document.voices)} (tracks: {document.original_track_count})")
	print(f"Notes:      {stats.original_notes}")
	print(f"Literals:   {stats.literals}")
	print(f"References: {stats.references}")
	print(f"Motifs:     {stats.motifs}")
	print(f"Ratio:      {stats.ratio:.2f}")

	for change in document.key_changes:
		print(f"  voice {change.voice} notes {change.start_note}-{change.end_note}: {change.key.name} ({change.confidence:.2f})")

	for motif_id, entry in enumerate(document.motifs):
		uses = sum(
			1 for items in document.voices for item in items
			if isinstance(item, leitmotif.compressor.MotifReference) and item.motif_id == motif_id
		)
		print(f"  motif {motif_id}: {entry.length} notes, used {uses}×, degrees {list(entry.degree_deltas)}")


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the leitmotif command line.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		config = _load_config(args)

		if args.command == "encode":
			leitmotif.midi_io.encode_file(args.input, args.output, config=config, preserve_tracks=args.preserve_tracks)

		elif args.command == "decode":
			leitmotif.midi_io.decode_file(args.input, args.output)

		elif args.command == "batch":

			if args.direction == "encode":
				result = leitmotif.batch.encode_directory(
					args.input_dir,
					args.output_dir,
					config = config,
					overwrite = not args.no_overwrite,
					preserve_tracks = args.preserve_tracks
				)
			else:
				result = leitmotif.batch.decode_directory(args.input_dir, args.output_dir, overwrite=not args.no_overwrite)

			if result.failed:
				return 1

		elif args.command == "report":
			_report(args, config)

		elif args.command == "config":
			print(leitmotif.config.dump_config(config, args.write), end="")

	except (leitmotif.exceptions.LeitmotifError, OSError, EOFError, ValueError) as exc:
		logger.error(str(exc))
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
