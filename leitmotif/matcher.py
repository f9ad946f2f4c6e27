"""Motif matching.

Candidate motifs are compared with every same-length run of every voice,
under each requested `Transformation`.  Pitch similarity is the share of
interval positions that agree within half a scale step.  Rhythm similarity
is the share of ``(delta, duration)`` pairs that agree within 10%, taking
the best of a fixed set of tempo dilation factors.

`find_exact_repeats` is a second, uncapped search that groups runs whose
library form is identical.  It finds every literal repeat (transposed
repeats included) in time linear in the number of runs.

Example:
	```python
	voices = [leitmotif.motif.analyse_voice(voice, segments)]
	candidates = voices[0].candidates(min_length=3, max_length=4)

	for match in find_matches(candidates, voices):
		print(match.transformation.value, match.target_start, match.confidence)
	```
"""

import collections
import dataclasses
import enum
import fractions
import logging
import typing

import leitmotif.constants
import leitmotif.library
import leitmotif.motif
import leitmotif.scales


logger = logging.getLogger(__name__)


DILATION_FACTORS: typing.Tuple[fractions.Fraction, ...] = (
	fractions.Fraction(1, 2),
	fractions.Fraction(3, 4),
	fractions.Fraction(1),
	fractions.Fraction(5, 4),
	fractions.Fraction(3, 2),
	fractions.Fraction(2),
)

NO_DILATION: typing.Tuple[fractions.Fraction, ...] = (fractions.Fraction(1),)


class Transformation (enum.Enum):

	"""
	A melodic transformation applied to a test motif's intervals before comparison.
	"""

	EXACT = "exact"
	RETROGRADE = "retrograde"
	INVERSION = "inversion"
	RETROGRADE_INVERSION = "retrograde-inversion"

	def apply (self, intervals: typing.Sequence[float]) -> typing.Tuple[float, ...]:

		"""Return a new, transformed interval sequence."""

		if self is Transformation.EXACT:
			return tuple(intervals)

		if self is Transformation.RETROGRADE:
			return tuple(reversed(intervals))

		if self is Transformation.INVERSION:
			return tuple(-interval for interval in intervals)

		return tuple(-interval for interval in reversed(intervals))


ALL_TRANSFORMATIONS: typing.Tuple[Transformation, ...] = tuple(Transformation)


@dataclasses.dataclass(frozen=True)
class Similarity:

	pitch: float
	rhythm: float
	dilation: fractions.Fraction = fractions.Fraction(1)

	@property
	def confidence (self) -> float:
		return (self.pitch + self.rhythm) / 2


@dataclasses.dataclass(frozen=True)
class MotifMatch:

	"""
	A run of notes found to resemble a candidate motif.

	Attributes:
		source: The candidate motif.
		target_voice: Voice index of the matching run.
		target_start: Index of the matching run's first note.
		transformation: How the run's intervals were transformed to match.
		dilation: Tempo factor applied to the run's rhythm.
		pitch_similarity: Share of agreeing intervals (0–1).
		rhythm_similarity: Share of agreeing rhythm pairs (0–1).
		confidence: Mean of the two similarities.
	"""

	source: leitmotif.motif.MotifDescriptor
	target_voice: int
	target_start: int
	transformation: Transformation
	dilation: fractions.Fraction
	pitch_similarity: float
	rhythm_similarity: float
	confidence: float

	@property
	def length (self) -> int:
		return self.source.length


def pattern_similarity (
	a: typing.Sequence[float],
	b: typing.Sequence[float],
	tolerance: float = leitmotif.constants.MOTIF_PITCH_TOLERANCE,
) -> float:

	"""
	Return the share of positions where two interval patterns agree.

	Patterns of different lengths, or empty patterns, score 0.
	"""

	if len(a) != len(b) or not a:
		return 0.0

	agreeing = sum(1 for x, y in zip(a, b) if abs(x - y) <= tolerance)

	return agreeing / len(a)


def _values_agree (a: int, b: int, numerator: int, denominator: int, tolerance: float) -> bool:

	"""Compare ``a`` with ``b * numerator / denominator`` in whole numbers, both scaled by ``denominator``."""

	scaled_a = a * denominator
	scaled_b = b * numerator
	largest = max(scaled_a, scaled_b)

	if largest == 0:
		return True

	return abs(scaled_a - scaled_b) <= tolerance * largest


def rhythm_similarity (
	a: leitmotif.motif.RhythmPattern,
	b: leitmotif.motif.RhythmPattern,
	allow_time_dilation: bool = True,
	tolerance: float = leitmotif.constants.MOTIF_RHYTHM_TOLERANCE,
) -> typing.Tuple[float, fractions.Fraction]:

	"""
	Compare two rhythm patterns and return ``(score, best dilation factor)``.

	``b`` is scaled by each dilation factor in turn; a pair agrees when both
	its delta and its duration are within ``tolerance`` (relative) of ``a``'s.
	The first factor reaching the best score wins.
	"""

	if len(a) != len(b) or not a:
		return 0.0, fractions.Fraction(1)

	factors = DILATION_FACTORS if allow_time_dilation else NO_DILATION

	best_score = 0.0
	best_factor = fractions.Fraction(1)

	for factor in factors:

		numerator = factor.numerator
		denominator = factor.denominator
		agreeing = 0

		for (delta_a, duration_a), (delta_b, duration_b) in zip(a, b):

			if (
				_values_agree(delta_a, delta_b, numerator, denominator, tolerance)
				and _values_agree(duration_a, duration_b, numerator, denominator, tolerance)
			):
				agreeing += 1

		score = agreeing / len(a)

		if score > best_score:
			best_score = score
			best_factor = factor

	return best_score, best_factor


def compare_motifs (
	a: leitmotif.motif.MotifDescriptor,
	b: leitmotif.motif.MotifDescriptor,
	transformation: Transformation = Transformation.EXACT,
	allow_time_dilation: bool = True,
) -> Similarity:

	"""
	Compare motif ``a`` with motif ``b`` after transforming ``b``'s intervals.

	Neither motif is modified.
	"""

	pitch = pattern_similarity(a.interval_pattern, transformation.apply(b.interval_pattern))
	rhythm, dilation = rhythm_similarity(a.rhythm_pattern, b.rhythm_pattern, allow_time_dilation)

	return Similarity(pitch=pitch, rhythm=rhythm, dilation=dilation)


def find_matches (
	candidates: typing.Sequence[leitmotif.motif.MotifDescriptor],
	voices: typing.Sequence[leitmotif.motif.AnalysedVoice],
	transformations: typing.Iterable[Transformation] = ALL_TRANSFORMATIONS,
	allow_time_dilation: bool = True,
	similarity_threshold: float = leitmotif.constants.MOTIF_SIMILARITY_THRESHOLD,
	max_candidates: int = leitmotif.constants.MOTIF_MAX_CANDIDATES,
	max_positions: int = leitmotif.constants.MOTIF_MAX_POSITIONS,
) -> typing.List[MotifMatch]:

	"""
	Search every voice for runs resembling the candidate motifs.

	Parameters:
		candidates: Candidate motifs, in extraction order.
		voices: All analysed voices of the piece.
		transformations: Transformations to try at each position.
		allow_time_dilation: Try the dilation factors, not just 1.
		similarity_threshold: Minimum pitch similarity for a match.
		max_candidates: Candidates processed per origin voice.
		max_positions: Last start position tested per voice.  The cap is
			inclusive, so up to ``max_positions + 1`` positions are tested.

	Runs overlapping a candidate's own occurrence are skipped.
	"""

	transformations = tuple(transformations)

	per_voice: typing.Dict[int, int] = collections.defaultdict(int)
	selected: typing.List[leitmotif.motif.MotifDescriptor] = []

	for candidate in candidates:
		if per_voice[candidate.origin_voice] < max_candidates:
			per_voice[candidate.origin_voice] += 1
			selected.append(candidate)

	matches: typing.List[MotifMatch] = []

	for candidate in selected:
		for voice in voices:

			last_start = min(len(voice) - candidate.length, max_positions)

			for start in range(0, last_start + 1):

				if candidate.overlaps(voice.voice_index, start, candidate.length):
					continue

				test = voice.descriptor_at(start, candidate.length)

				passing = []

				for transformation in transformations:

					pitch = pattern_similarity(candidate.interval_pattern, transformation.apply(test.interval_pattern))

					if pitch >= similarity_threshold:
						passing.append((transformation, pitch))

				if not passing:
					continue

				# Rhythm does not depend on the transformation.
				rhythm, dilation = rhythm_similarity(candidate.rhythm_pattern, test.rhythm_pattern, allow_time_dilation)

				for transformation, pitch in passing:

					similarity = Similarity(pitch=pitch, rhythm=rhythm, dilation=dilation)

					matches.append(MotifMatch(
						source = candidate,
						target_voice = voice.voice_index,
						target_start = start,
						transformation = transformation,
						dilation = dilation,
						pitch_similarity = pitch,
						rhythm_similarity = rhythm,
						confidence = similarity.confidence
					))

	logger.debug(f"{len(selected)} candidates produced {len(matches)} matches")

	return matches


def find_exact_repeats (
	voices: typing.Sequence[leitmotif.motif.AnalysedVoice],
	key: leitmotif.scales.KeyContext,
	min_length: int = leitmotif.constants.MOTIF_MIN_LENGTH,
	max_length: int = leitmotif.constants.MOTIF_MAX_LENGTH,
) -> typing.List[MotifMatch]:

	"""
	Find every run whose library form in ``key`` occurs at least twice.

	Each repeat becomes an ``exact`` match of confidence 1.0 against the
	first occurrence of its form (in voice, then note order).
	"""

	occurrences: typing.Dict[leitmotif.library.MotifLibraryEntry, typing.List[typing.Tuple[int, int]]] = {}

	for voice in voices:
		for start in range(len(voice)):
			for length in range(min_length, max_length + 1):

				if start + length > len(voice):
					break

				entry = leitmotif.library.build_entry(voice.notes[start:start + length], key)

				if entry is None:
					continue

				occurrences.setdefault(entry, []).append((voice.voice_index, start))

	by_index = {voice.voice_index: voice for voice in voices}
	matches: typing.List[MotifMatch] = []

	for entry, places in occurrences.items():

		if len(places) < 2:
			continue

		first_voice, first_start = places[0]
		source = by_index[first_voice].descriptor_at(first_start, entry.length)

		for voice_index, start in places[1:]:

			if source.overlaps(voice_index, start, entry.length):
				continue

			matches.append(MotifMatch(
				source = source,
				target_voice = voice_index,
				target_start = start,
				transformation = Transformation.EXACT,
				dilation = fractions.Fraction(1),
				pitch_similarity = 1.0,
				rhythm_similarity = 1.0,
				confidence = 1.0
			))

	logger.debug(f"Exact repeat index found {len(matches)} repeats")

	return matches
