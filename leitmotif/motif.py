"""Motif candidate extraction.

A voice is first analysed into diatonic positions, each note measured
against the key segment that covers it.  Every contiguous run of
``min_length`` to ``max_length`` notes then becomes a `MotifDescriptor`: the
scale-step intervals between its notes plus the ``(delta, duration)`` pair of
each note.

Notes with no diatonic position are left out of the interval pattern.  A run
in which fewer than 70% of the notes resolve is too chromatic to be a
candidate.
"""

import dataclasses
import typing

import leitmotif.constants
import leitmotif.diatonic
import leitmotif.key_estimator
import leitmotif.notes
import leitmotif.scales


RhythmPattern = typing.Tuple[typing.Tuple[int, int], ...]


@dataclasses.dataclass(frozen=True)
class MotifDescriptor:

	"""
	The shape of a run of notes.

	Attributes:
		interval_pattern: Scale-step differences between consecutive
			resolvable notes (a chromatic half step reads as 0.5).
		rhythm_pattern: ``(delta, duration)`` of every note in the run.
		length: Number of notes in the run.
		origin_voice: Index of the voice the run was taken from.
		origin_start: Index of the run's first note in that voice.
	"""

	interval_pattern: typing.Tuple[float, ...]
	rhythm_pattern: RhythmPattern
	length: int
	origin_voice: int = 0
	origin_start: int = 0

	@property
	def origin_end (self) -> int:
		return self.origin_start + self.length - 1

	def overlaps (self, voice_index: int, start: int, length: int) -> bool:

		"""Return ``True`` if a run in ``voice_index`` shares any note with this one."""

		if voice_index != self.origin_voice:
			return False

		return start <= self.origin_end and start + length - 1 >= self.origin_start


@dataclasses.dataclass(frozen=True)
class AnalysedVoice:

	"""
	A voice together with the per-note data the motif search needs.
	"""

	notes: typing.Tuple[leitmotif.notes.Note, ...]
	deltas: typing.Tuple[int, ...]
	positions: typing.Tuple[typing.Optional[leitmotif.diatonic.DiatonicPosition], ...]
	voice_index: int = 0

	def __len__ (self) -> int:
		return len(self.notes)

	def resolved_fraction (self, start: int, length: int) -> float:

		"""Return the share of notes in a run that have a diatonic position."""

		window = self.positions[start:start + length]

		if not window:
			return 0.0

		return sum(1 for position in window if position is not None) / len(window)

	def descriptor_at (self, start: int, length: int) -> MotifDescriptor:

		"""Describe the run of ``length`` notes starting at ``start``."""

		steps = [
			position.scale_step()
			for position in self.positions[start:start + length]
			if position is not None
		]

		intervals = tuple(b - a for a, b in zip(steps, steps[1:]))

		rhythm = tuple(
			(self.deltas[index], self.notes[index].duration)
			for index in range(start, min(start + length, len(self.notes)))
		)

		return MotifDescriptor(
			interval_pattern = intervals,
			rhythm_pattern = rhythm,
			length = len(rhythm),
			origin_voice = self.voice_index,
			origin_start = start
		)

	def candidates (
		self,
		min_length: int = leitmotif.constants.MOTIF_MIN_LENGTH,
		max_length: int = leitmotif.constants.MOTIF_MAX_LENGTH,
		min_resolved_fraction: float = leitmotif.constants.MOTIF_MIN_RESOLVED_FRACTION,
	) -> typing.List[MotifDescriptor]:

		"""Enumerate every run of ``min_length``..``max_length`` notes that resolves well enough."""

		if min_length < 2:
			raise ValueError("Minimum motif length must be at least 2")

		if max_length < min_length:
			raise ValueError("Maximum motif length must not be below the minimum")

		descriptors: typing.List[MotifDescriptor] = []

		for start in range(len(self.notes)):
			for length in range(min_length, max_length + 1):

				if start + length > len(self.notes):
					break

				if self.resolved_fraction(start, length) < min_resolved_fraction:
					continue

				descriptors.append(self.descriptor_at(start, length))

		return descriptors


def analyse_voice (
	voice: typing.Sequence[leitmotif.notes.Note],
	key_segments: typing.Sequence[leitmotif.key_estimator.KeySegment],
	voice_index: int = 0,
) -> AnalysedVoice:

	"""Resolve every note of a voice against the key segment that covers it."""

	positions = tuple(
		leitmotif.diatonic.pitch_to_diatonic(note.pitch, leitmotif.key_estimator.key_at(key_segments, index))
		for index, note in enumerate(voice)
	)

	return AnalysedVoice(
		notes = tuple(voice),
		deltas = tuple(leitmotif.notes.note_deltas(voice)),
		positions = positions,
		voice_index = voice_index
	)


def extract (
	voice: typing.Sequence[leitmotif.notes.Note],
	key_segments: typing.Sequence[leitmotif.key_estimator.KeySegment],
	min_length: int = leitmotif.constants.MOTIF_MIN_LENGTH,
	max_length: int = leitmotif.constants.MOTIF_MAX_LENGTH,
	voice_index: int = 0,
) -> typing.List[MotifDescriptor]:

	"""
	List every motif candidate in a voice.

	Example:
		```python
		voice = [Note(60, 0, 480), Note(62, 960, 480), Note(64, 1920, 480)]
		segments = leitmotif.key_estimator.estimate(voice)

		extract(voice, segments, min_length=3)[0].interval_pattern  # → (1.0, 1.0)
		```
	"""

	return analyse_voice(voice, key_segments, voice_index).candidates(min_length, max_length)


def invert (motif: MotifDescriptor) -> MotifDescriptor:

	"""Return a copy of a motif with every interval mirrored."""

	return dataclasses.replace(motif, interval_pattern=tuple(-interval for interval in motif.interval_pattern))
