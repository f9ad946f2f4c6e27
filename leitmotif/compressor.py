"""Motif compression.

Turns matches into a motif library and rewrites each voice as a sequence
of `Literal` notes and `MotifReference` items.

Every occurrence that becomes a reference has been expanded from its own
first pitch and compared with the notes it replaces.  An occurrence that
does not reproduce its notes exactly stays literal, so compression can
only ever cost ratio, never fidelity.

Example:
	```python
	result = compress(voices, matches, key)

	for item in result.voices[0]:
		print(item)

	expand_voice(result.voices[0], result.library, key) == voices[0]  # → True
	```
"""

import dataclasses
import logging
import typing

import leitmotif.constants
import leitmotif.exceptions
import leitmotif.library
import leitmotif.matcher
import leitmotif.notes
import leitmotif.scales


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Literal:

	"""A note stored as-is, preceded by ``delta`` ticks of silence."""

	delta: int
	pitch: int
	duration: int
	velocity: int

	@classmethod
	def from_note (cls, note: leitmotif.notes.Note, delta: int) -> "Literal":
		return cls(delta=delta, pitch=note.pitch, duration=note.duration, velocity=note.velocity)


@dataclasses.dataclass(frozen=True)
class MotifReference:

	"""A run of notes rebuilt from library entry ``motif_id``, starting ``delta`` ticks after the previous note."""

	motif_id: int
	base_pitch: int
	delta: int


CompressedItem = typing.Union[Literal, MotifReference]


class Occurrence (typing.NamedTuple):

	voice: int
	start: int


class CompressionResult (typing.NamedTuple):

	library: typing.List[leitmotif.library.MotifLibraryEntry]
	voices: typing.List[typing.List[CompressedItem]]


@dataclasses.dataclass(frozen=True)
class CompressionStats:

	"""
	Item counts of a compressed piece.

	Attributes:
		original_notes: Notes in the uncompressed voices.
		literals: Literal items.
		references: Motif reference items.
		motifs: Library entries.
	"""

	original_notes: int
	literals: int
	references: int
	motifs: int

	@property
	def ratio (self) -> float:

		"""Original notes per stored item (1.0 means no compression)."""

		items = self.literals + self.references

		if items == 0:
			return 1.0

		return self.original_notes / items

	@classmethod
	def from_result (
		cls,
		voices: typing.Sequence[typing.Sequence[CompressedItem]],
		library: typing.Sequence[leitmotif.library.MotifLibraryEntry],
	) -> "CompressionStats":

		literals = 0
		references = 0
		original_notes = 0

		for items in voices:
			for item in items:
				if isinstance(item, MotifReference):
					references += 1
					original_notes += library[item.motif_id].length
				else:
					literals += 1
					original_notes += 1

		return cls(original_notes=original_notes, literals=literals, references=references, motifs=len(library))


@dataclasses.dataclass
class _Candidate:

	entry: leitmotif.library.MotifLibraryEntry
	occurrences: typing.List[Occurrence]

	@property
	def length (self) -> int:
		return self.entry.length

	@property
	def savings (self) -> int:
		return self.length * len(self.occurrences) - (self.length + len(self.occurrences))


def verify (
	entry: leitmotif.library.MotifLibraryEntry,
	run: typing.Sequence[leitmotif.notes.Note],
	key: leitmotif.scales.KeyContext,
) -> None:

	"""
	Check that ``entry``, expanded from the first note of ``run``, rebuilds ``run``.

	Raises:
		RoundTripViolationError: If any pitch, start, duration or velocity differs.
	"""

	if len(run) != entry.length:
		raise leitmotif.exceptions.RoundTripViolationError(
			f"Motif of {entry.length} notes cannot cover a run of {len(run)}"
		)

	try:
		expanded = leitmotif.library.expand_entry(entry, run[0].pitch, key, run[0].start)

	except leitmotif.exceptions.UnresolvableDiatonicPositionError as exc:
		raise leitmotif.exceptions.RoundTripViolationError(str(exc)) from exc

	for index, (original, rebuilt) in enumerate(zip(run, expanded)):
		if original.key() != rebuilt.key():
			raise leitmotif.exceptions.RoundTripViolationError(
				f"Note {index}: expected {original.key()}, motif gives {rebuilt.key()}"
			)


def _literal_voice (notes: typing.Sequence[leitmotif.notes.Note]) -> typing.List[CompressedItem]:

	return [
		Literal.from_note(note, delta)
		for note, delta in zip(notes, leitmotif.notes.note_deltas(notes))
	]


def _supported_sources (
	matches: typing.Iterable[leitmotif.matcher.MotifMatch],
	min_confidence: float,
	min_occurrences: int,
	exact_matches_only: bool,
) -> typing.List[typing.Tuple[leitmotif.matcher.MotifMatch, typing.List[Occurrence]]]:

	"""Group matches by source motif and keep the sources with enough confident occurrences."""

	groups: typing.Dict[typing.Tuple[int, int, int], typing.Dict[Occurrence, float]] = {}
	first_match: typing.Dict[typing.Tuple[int, int, int], leitmotif.matcher.MotifMatch] = {}

	for match in matches:

		if exact_matches_only and match.transformation is not leitmotif.matcher.Transformation.EXACT:
			continue

		if match.confidence < min_confidence:
			continue

		source_id = (match.source.origin_voice, match.source.origin_start, match.source.length)
		targets = groups.setdefault(source_id, {})
		first_match.setdefault(source_id, match)

		target = Occurrence(match.target_voice, match.target_start)
		targets[target] = max(targets.get(target, 0.0), match.confidence)

	supported = []

	for source_id, targets in groups.items():

		average = sum(targets.values()) / len(targets)

		if len(targets) + 1 < min_occurrences + 1 or average < min_confidence:
			logger.debug(f"Motif at voice {source_id[0]} note {source_id[1]} lacks support ({len(targets) + 1} occurrences)")
			continue

		source = Occurrence(source_id[0], source_id[1])
		supported.append((first_match[source_id], [source] + [target for target in targets if target != source]))

	return supported


def compress (
	voices: typing.Sequence[typing.Sequence[leitmotif.notes.Note]],
	matches: typing.Iterable[leitmotif.matcher.MotifMatch],
	key: leitmotif.scales.KeyContext,
	min_confidence: float = leitmotif.constants.COMPRESSION_MIN_CONFIDENCE,
	min_occurrences: int = leitmotif.constants.COMPRESSION_MIN_OCCURRENCES,
	max_compression_ratio: float = leitmotif.constants.COMPRESSION_MAX_RATIO,
	exact_matches_only: bool = True,
	motifs_disabled: bool = False,
) -> CompressionResult:

	"""
	Select motifs and rewrite voices as literals and references.

	Parameters:
		voices: The original voices.
		matches: Matches from `leitmotif.matcher`.
		key: Key every library entry is expressed in.
		min_confidence: Matches below this are ignored, and a motif's average
			match confidence must reach it.
		min_occurrences: A motif needs this many occurrences besides its source.
		max_compression_ratio: Largest share of all notes that references
			may cover (1.0 = no limit).
		exact_matches_only: Ignore matches found under a transformation.
		motifs_disabled: Emit literals only and an empty library.

	Returns:
		The library (ids are list indices, in acceptance order) and the
		compressed voices.
	"""

	if min_occurrences < 1:
		raise ValueError("Minimum occurrences must be at least 1")

	if not 0.0 <= max_compression_ratio <= 1.0:
		raise ValueError("Maximum compression ratio must be between 0 and 1")

	if motifs_disabled:
		return CompressionResult(library=[], voices=[_literal_voice(notes) for notes in voices])

	# Build one candidate per distinct library entry, keeping only verified occurrences.

	candidates: typing.Dict[leitmotif.library.MotifLibraryEntry, typing.List[Occurrence]] = {}

	for match, occurrences in _supported_sources(matches, min_confidence, min_occurrences, exact_matches_only):

		source = occurrences[0]
		length = match.source.length
		entry = leitmotif.library.build_entry(voices[source.voice][source.start:source.start + length], key)

		if entry is None:
			continue

		merged = candidates.setdefault(entry, [])

		for occurrence in occurrences:

			if occurrence in merged:
				continue

			run = voices[occurrence.voice][occurrence.start:occurrence.start + length]

			try:
				verify(entry, run, key)

			except leitmotif.exceptions.RoundTripViolationError as exc:
				logger.debug(f"Occurrence at voice {occurrence.voice} note {occurrence.start} stays literal: {exc}")
				continue

			merged.append(occurrence)

	ranked = [
		_Candidate(entry=entry, occurrences=sorted(occurrences))
		for entry, occurrences in candidates.items()
		if len(occurrences) >= min_occurrences + 1
	]

	ranked = [candidate for candidate in ranked if candidate.savings > 0]
	ranked.sort(key=lambda candidate: (-candidate.savings, -candidate.length, candidate.occurrences[0]))

	# Greedy selection of non-overlapping occurrences.

	total_notes = sum(len(notes) for notes in voices)
	budget = int(max_compression_ratio * total_notes)
	covered = [[False] * len(notes) for notes in voices]
	covered_count = 0

	library: typing.List[leitmotif.library.MotifLibraryEntry] = []
	references: typing.Dict[Occurrence, int] = {}

	for candidate in ranked:

		length = candidate.length
		free: typing.List[Occurrence] = []
		claimed: typing.Set[typing.Tuple[int, int]] = set()

		for occurrence in candidate.occurrences:

			span = [(occurrence.voice, index) for index in range(occurrence.start, occurrence.start + length)]

			if any(covered[voice][index] or (voice, index) in claimed for voice, index in span):
				continue

			if covered_count + length * (len(free) + 1) > budget:
				break

			free.append(occurrence)
			claimed.update(span)

		if len(free) < min_occurrences + 1:
			continue

		motif_id = len(library)
		library.append(candidate.entry)

		for occurrence in free:
			references[occurrence] = motif_id
			for index in range(occurrence.start, occurrence.start + length):
				covered[occurrence.voice][index] = True

		covered_count += length * len(free)
		logger.debug(f"Motif {motif_id}: {length} notes × {len(free)} occurrences")

	compressed: typing.List[typing.List[CompressedItem]] = []

	for voice_index, notes in enumerate(voices):

		deltas = leitmotif.notes.note_deltas(notes)
		items: typing.List[CompressedItem] = []
		index = 0

		while index < len(notes):

			motif_id = references.get(Occurrence(voice_index, index))

			if motif_id is None:
				items.append(Literal.from_note(notes[index], deltas[index]))
				index += 1
				continue

			items.append(MotifReference(motif_id=motif_id, base_pitch=notes[index].pitch, delta=deltas[index]))
			index += library[motif_id].length

		compressed.append(items)

	return CompressionResult(library=library, voices=compressed)


def expand_voice (
	items: typing.Sequence[CompressedItem],
	library: typing.Sequence[leitmotif.library.MotifLibraryEntry],
	key: leitmotif.scales.KeyContext,
) -> typing.List[leitmotif.notes.Note]:

	"""
	Rebuild a voice's notes from its compressed items.

	Raises:
		MalformedInputError: If a reference names a motif that is not in the library.
	"""

	notes: typing.List[leitmotif.notes.Note] = []
	tick = 0

	for item in items:

		tick += item.delta

		if isinstance(item, Literal):
			notes.append(leitmotif.notes.Note(pitch=item.pitch, start=tick, duration=item.duration, velocity=item.velocity))
			tick += item.duration
			continue

		if not 0 <= item.motif_id < len(library):
			raise leitmotif.exceptions.MalformedInputError(f"Unknown motif id {item.motif_id}")

		expanded = leitmotif.library.expand_entry(library[item.motif_id], item.base_pitch, key, tick)
		notes.extend(expanded)
		tick = expanded[-1].end

	return notes
