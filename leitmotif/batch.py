"""Encoding or decoding every file in a directory.

A file that fails is logged and counted.  It never stops the batch.
"""

import dataclasses
import logging
import os
import typing

import leitmotif.config
import leitmotif.exceptions
import leitmotif.midi_io


logger = logging.getLogger(__name__)


MIDI_EXTENSIONS = (".mid", ".midi")
JSON_EXTENSIONS = (".json",)


@dataclasses.dataclass
class BatchResult:

	processed: typing.List[str] = dataclasses.field(default_factory=list)
	skipped: typing.List[str] = dataclasses.field(default_factory=list)
	failed: typing.List[str] = dataclasses.field(default_factory=list)

	def summary (self) -> str:
		return f"{len(self.processed)} processed, {len(self.skipped)} skipped, {len(self.failed)} failed"


def _list_inputs (input_dir: str, extensions: typing.Tuple[str, ...]) -> typing.List[str]:

	if not os.path.isdir(input_dir):
		raise NotADirectoryError(f"Input directory does not exist: {input_dir}")

	return sorted(
		name for name in os.listdir(input_dir)
		if os.path.splitext(name)[1].lower() in extensions
		and os.path.isfile(os.path.join(input_dir, name))
	)


def _run (
	input_dir: str,
	output_dir: str,
	extensions: typing.Tuple[str, ...],
	output_extension: str,
	convert: typing.Callable[[str, str], typing.Any],
	overwrite: bool,
) -> BatchResult:

	result = BatchResult()
	names = _list_inputs(input_dir, extensions)

	if not names:
		logger.warning(f"No {'/'.join(extensions)} files found in {input_dir}")
		return result

	os.makedirs(output_dir, exist_ok=True)

	for name in names:

		source = os.path.join(input_dir, name)
		target = os.path.join(output_dir, os.path.splitext(name)[0] + output_extension)

		if not overwrite and os.path.exists(target):
			logger.info(f"Skipping {name}: {target} exists")
			result.skipped.append(name)
			continue

		try:
			convert(source, target)

		except (leitmotif.exceptions.LeitmotifError, OSError, EOFError, ValueError) as exc:
			logger.error(f"Failed to convert {name}: {exc}")
			result.failed.append(name)
			continue

		result.processed.append(name)

	logger.info(f"Batch finished: {result.summary()}")

	return result


def encode_directory (
	input_dir: str,
	output_dir: str,
	config: typing.Optional[leitmotif.config.CodecConfig] = None,
	overwrite: bool = True,
	preserve_tracks: typing.Optional[bool] = None,
) -> BatchResult:

	"""Encode every ``.mid``/``.midi`` file in ``input_dir`` to JSON in ``output_dir``."""

	def convert (source: str, target: str) -> None:
		leitmotif.midi_io.encode_file(source, target, config=config, preserve_tracks=preserve_tracks)

	return _run(input_dir, output_dir, MIDI_EXTENSIONS, ".json", convert, overwrite)


def decode_directory (input_dir: str, output_dir: str, overwrite: bool = True) -> BatchResult:

	"""Decode every ``.json`` document in ``input_dir`` to a MIDI file in ``output_dir``."""

	return _run(input_dir, output_dir, JSON_EXTENSIONS, ".mid", leitmotif.midi_io.decode_file, overwrite)
