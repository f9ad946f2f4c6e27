"""Encode voices into a compressed document and decode them back.

`encode` runs the whole pipeline (key estimation, motif extraction, matching,
compression) and then decodes its own output in memory.  If the decoded
notes differ from the input in any pitch, tick, duration or velocity, it
raises instead of returning a document.

Example:
	```python
	document = leitmotif.codec.encode(voices, ppq=480, tempo=120)
	document.save("piece.json")

	piece = leitmotif.codec.decode(leitmotif.codec.CompressedDocument.load("piece.json"))
	piece.voices == voices  # → True
	```
"""

import dataclasses
import json
import logging
import typing

import leitmotif.compressor
import leitmotif.config
import leitmotif.constants
import leitmotif.exceptions
import leitmotif.key_estimator
import leitmotif.library
import leitmotif.matcher
import leitmotif.motif
import leitmotif.notes
import leitmotif.pitches
import leitmotif.scales


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class KeyChange:

	"""A key segment of one voice, as recorded in the document."""

	voice: int
	start_note: int
	end_note: int
	key: leitmotif.scales.KeyContext
	confidence: float

	def to_dict (self) -> typing.Dict[str, typing.Any]:
		return {
			"tonic": self.key.tonic,
			"mode": self.key.mode,
			"startNote": self.start_note,
			"endNote": self.end_note,
			"confidence": round(self.confidence, 4),
			"voice": self.voice,
		}

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "KeyChange":
		return cls(
			voice = int(data.get("voice", 0)),
			start_note = int(data["startNote"]),
			end_note = int(data["endNote"]),
			key = leitmotif.scales.KeyContext(data["tonic"], data["mode"]),
			confidence = float(data["confidence"])
		)


@dataclasses.dataclass(frozen=True)
class DecodedPiece:

	"""Everything the MIDI writer needs to rebuild a file."""

	voices: typing.List[leitmotif.notes.Voice]
	ppq: int
	tempo: int
	track_names: typing.List[str]
	voice_to_track: typing.List[int]
	original_track_count: int


def _parse_pitch (value: typing.Any) -> int:

	if isinstance(value, bool):
		raise ValueError(f"Invalid pitch {value!r}")

	if isinstance(value, int):
		return value

	if isinstance(value, str):
		return leitmotif.pitches.name_to_pitch(value)

	raise ValueError(f"Invalid pitch {value!r}")


def _item_to_dict (item: leitmotif.compressor.CompressedItem) -> typing.Dict[str, typing.Any]:

	if isinstance(item, leitmotif.compressor.MotifReference):
		return {
			"motif_id": item.motif_id,
			"base_pitch": leitmotif.pitches.pitch_to_name(item.base_pitch),
			"delta": item.delta,
		}

	return {
		"delta": item.delta,
		"pitch": leitmotif.pitches.pitch_to_name(item.pitch),
		"dur": item.duration,
		"vel": item.velocity,
	}


def _item_from_dict (data: typing.Dict[str, typing.Any]) -> leitmotif.compressor.CompressedItem:

	if "motif_id" in data:

		base = data["base_pitch"] if "base_pitch" in data else data["base_midi"]

		return leitmotif.compressor.MotifReference(
			motif_id = int(data["motif_id"]),
			base_pitch = _parse_pitch(base),
			delta = int(data.get("delta", 0))
		)

	return leitmotif.compressor.Literal(
		delta = int(data.get("delta", 0)),
		pitch = _parse_pitch(data["pitch"]),
		duration = int(data["dur"]),
		velocity = int(data["vel"])
	)


@dataclasses.dataclass
class CompressedDocument:

	"""
	A compressed piece: the motif library plus each voice as literals and references.

	Serialized as JSON with the keys ``ppq``, ``tempo``, ``key``,
	``keyChanges``, ``motifs``, ``voices``, ``originalTrackCount``,
	``voiceToTrack``, ``trackNames`` and ``motifsDisabled``.
	"""

	ppq: int
	tempo: int
	key: leitmotif.scales.KeyContext
	key_changes: typing.List[KeyChange]
	motifs: typing.List[leitmotif.library.MotifLibraryEntry]
	voices: typing.List[typing.List[leitmotif.compressor.CompressedItem]]
	original_track_count: int = 1
	voice_to_track: typing.List[int] = dataclasses.field(default_factory=list)
	track_names: typing.List[str] = dataclasses.field(default_factory=list)
	motifs_disabled: bool = False

	def stats (self) -> leitmotif.compressor.CompressionStats:
		return leitmotif.compressor.CompressionStats.from_result(self.voices, self.motifs)

	def to_dict (self) -> typing.Dict[str, typing.Any]:
		return {
			"ppq": self.ppq,
			"tempo": self.tempo,
			"key": {"tonic": self.key.tonic, "mode": self.key.mode},
			"keyChanges": [change.to_dict() for change in self.key_changes],
			"motifs": [entry.to_dict() for entry in self.motifs],
			"voices": [[_item_to_dict(item) for item in items] for items in self.voices],
			"originalTrackCount": self.original_track_count,
			"voiceToTrack": list(self.voice_to_track),
			"trackNames": list(self.track_names),
			"motifsDisabled": self.motifs_disabled,
		}

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "CompressedDocument":

		"""
		Rebuild a document from its dict form.

		Raises:
			MalformedInputError: If a required field is missing or invalid.
		"""

		if not isinstance(data, dict):
			raise leitmotif.exceptions.MalformedInputError("A compressed document must be a JSON object")

		# Library entries are expressed in the document key, so it may only be omitted without motifs.
		if not data.get("key") and data.get("motifs"):
			raise leitmotif.exceptions.MalformedInputError("A compressed document with motifs must give its key")

		try:
			key_data = data.get("key") or {"tonic": "C", "mode": "major"}
			voices = [[_item_from_dict(item) for item in items] for items in data["voices"]]

			return cls(
				ppq = int(data.get("ppq", leitmotif.constants.DEFAULT_PPQ)),
				tempo = int(data.get("tempo", leitmotif.constants.DEFAULT_TEMPO)),
				key = leitmotif.scales.KeyContext(key_data["tonic"], key_data["mode"]),
				key_changes = [KeyChange.from_dict(change) for change in data.get("keyChanges", [])],
				motifs = [leitmotif.library.MotifLibraryEntry.from_dict(entry) for entry in data.get("motifs", [])],
				voices = voices,
				original_track_count = int(data.get("originalTrackCount", max(1, len(voices)))),
				voice_to_track = [int(track) for track in data.get("voiceToTrack", range(len(voices)))],
				track_names = [str(name) for name in data.get("trackNames", [])],
				motifs_disabled = bool(data.get("motifsDisabled", False))
			)

		except leitmotif.exceptions.MalformedInputError:
			raise

		except (KeyError, TypeError, ValueError) as exc:
			raise leitmotif.exceptions.MalformedInputError(f"Invalid compressed document: {exc}") from exc

	def to_json (self, indent: typing.Optional[int] = 2) -> str:
		return json.dumps(self.to_dict(), indent=indent)

	@classmethod
	def from_json (cls, text: str) -> "CompressedDocument":

		try:
			data = json.loads(text)

		except json.JSONDecodeError as exc:
			raise leitmotif.exceptions.MalformedInputError(f"Invalid JSON: {exc}") from exc

		return cls.from_dict(data)

	def save (self, path: str) -> None:

		with open(path, "w") as f:
			f.write(self.to_json())

	@classmethod
	def load (cls, path: str) -> "CompressedDocument":

		with open(path, "r") as f:
			return cls.from_json(f.read())


def _find_matches (
	analysed: typing.Sequence[leitmotif.motif.AnalysedVoice],
	key: leitmotif.scales.KeyContext,
	settings: leitmotif.config.MotifConfig,
) -> typing.List[leitmotif.matcher.MotifMatch]:

	candidates: typing.List[leitmotif.motif.MotifDescriptor] = []

	for voice in analysed:
		candidates.extend(voice.candidates(settings.min_length, settings.max_length))

	matches = leitmotif.matcher.find_matches(
		candidates,
		analysed,
		transformations = settings.transformation_kinds(),
		allow_time_dilation = settings.allow_time_dilation,
		similarity_threshold = settings.similarity_threshold,
		max_candidates = settings.max_candidates,
		max_positions = settings.max_positions
	)

	if settings.exhaustive_exact_search:
		matches.extend(leitmotif.matcher.find_exact_repeats(analysed, key, settings.min_length, settings.max_length))

	return matches


def encode (
	voices: typing.Sequence[typing.Sequence[leitmotif.notes.Note]],
	ppq: int = leitmotif.constants.DEFAULT_PPQ,
	tempo: int = leitmotif.constants.DEFAULT_TEMPO,
	config: typing.Optional[leitmotif.config.CodecConfig] = None,
	track_names: typing.Optional[typing.Sequence[str]] = None,
	voice_to_track: typing.Optional[typing.Sequence[int]] = None,
	original_track_count: typing.Optional[int] = None,
) -> CompressedDocument:

	"""
	Compress monophonic voices into a document.

	Parameters:
		voices: One note list per voice, each monophonic and in start order.
		ppq: Ticks per quarter note of the source.
		tempo: Tempo in BPM of the source.
		config: Encoder settings (defaults when omitted).
		track_names: Names of the source tracks.
		voice_to_track: Source track of each voice (default: voice i → track i).
		original_track_count: Number of tracks to write back.

	Raises:
		MalformedInputError: If a voice is not a valid monophonic note stream.
		RoundTripViolationError: If the document would not decode to ``voices``.
	"""

	config = config or leitmotif.config.CodecConfig()

	for index, voice in enumerate(voices):
		leitmotif.notes.validate_voice(voice, index)

	if voice_to_track is not None and len(voice_to_track) != len(voices):
		raise ValueError("voice_to_track needs one entry per voice")

	segments = leitmotif.key_estimator.estimate_voices(voices, **config.key.estimator_options())
	key = leitmotif.key_estimator.document_key(segments)

	logger.debug(f"Document key: {key.name}")

	key_changes = [
		KeyChange(
			voice = voice_index,
			start_note = segment.start_index,
			end_note = segment.end_index,
			key = segment.key,
			confidence = segment.confidence
		)
		for voice_index, voice_segments in enumerate(segments)
		for segment in voice_segments
	]

	motifs_disabled = config.compression.motifs_disabled
	matches: typing.List[leitmotif.matcher.MotifMatch] = []

	if not motifs_disabled:
		analysed = [
			leitmotif.motif.analyse_voice(voice, voice_segments, voice_index)
			for voice_index, (voice, voice_segments) in enumerate(zip(voices, segments))
		]
		matches = _find_matches(analysed, key, config.motifs)

	result = leitmotif.compressor.compress(
		voices,
		matches,
		key,
		min_confidence = config.compression.min_confidence,
		min_occurrences = config.compression.min_occurrences,
		max_compression_ratio = config.compression.max_compression_ratio,
		exact_matches_only = config.compression.exact_matches_only,
		motifs_disabled = motifs_disabled
	)

	document = CompressedDocument(
		ppq = ppq,
		tempo = tempo,
		key = key,
		key_changes = key_changes,
		motifs = result.library,
		voices = result.voices,
		original_track_count = original_track_count if original_track_count is not None else max(1, len(voices)),
		voice_to_track = list(voice_to_track) if voice_to_track is not None else list(range(len(voices))),
		track_names = list(track_names or []),
		motifs_disabled = motifs_disabled
	)

	decoded = decode(document)

	for index, (original, rebuilt) in enumerate(zip(voices, decoded.voices)):
		if [note.key() for note in original] != [note.key() for note in rebuilt]:
			raise leitmotif.exceptions.RoundTripViolationError(f"Voice {index} does not decode to its original notes")

	stats = document.stats()
	logger.info(
		f"Encoded {stats.original_notes} notes as {stats.literals} literals + {stats.references} references "
		f"({stats.motifs} motifs, ratio {stats.ratio:.2f})"
	)

	return document


def decode (document: CompressedDocument) -> DecodedPiece:

	"""
	Expand a document back into absolute notes.

	Raises:
		MalformedInputError: If a reference cannot be expanded.
	"""

	voices: typing.List[leitmotif.notes.Voice] = []

	for index, items in enumerate(document.voices):

		try:
			voices.append(leitmotif.compressor.expand_voice(items, document.motifs, document.key))

		except leitmotif.exceptions.UnresolvableDiatonicPositionError as exc:
			raise leitmotif.exceptions.MalformedInputError(f"Voice {index}: {exc}") from exc

	return DecodedPiece(
		voices = voices,
		ppq = document.ppq,
		tempo = document.tempo,
		track_names = list(document.track_names),
		voice_to_track = list(document.voice_to_track),
		original_track_count = document.original_track_count
	)
