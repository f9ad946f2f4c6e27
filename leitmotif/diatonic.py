"""Diatonic pitch codec.

Converts between absolute MIDI pitches and ``(degree, accidental, octave)``
positions measured against a `KeyContext`, and back.

Degrees are signed and unbounded: degree 7 is the tonic one octave up,
degree -1 is the leading tone one octave down.  Every division and modulo on
a degree is floored (Python's ``//`` and ``%``), never truncated toward zero.
Truncation would put the note of any negative degree that is not a multiple
of 7 an octave too high.

Example:
	```python
	key = leitmotif.scales.KeyContext("C", "major")

	pos = pitch_to_diatonic(64, key)     # E4 → degree 2, accidental 0, octave 4
	diatonic_to_pitch(pos, key)          # → 64

	# A degree below the tonic of C4 lands on B3, not B4.
	diatonic_to_pitch(DiatonicPosition(-1, 0, 4), key)   # → 59
	```
"""

import dataclasses
import typing

import leitmotif.exceptions
import leitmotif.scales


DEGREE_SEARCH_MIN = -14
DEGREE_SEARCH_MAX = 21
MAX_ACCIDENTAL = 2


@dataclasses.dataclass(frozen=True)
class DiatonicPosition:

	"""
	A pitch expressed relative to a key.

	Attributes:
		degree: Signed scale degree (0 = tonic). Not reduced to 0–6.
		accidental: Semitone offset from the scale tone, in -2..2.
		octave: Octave index such that
			``pitch = pitch_class + (octave + degree // 7 + 1) * 12``.
	"""

	degree: int
	accidental: int = 0
	octave: int = 4

	def shifted (self, degree_delta: int, accidental: int = 0) -> "DiatonicPosition":

		"""Return the position ``degree_delta`` scale steps away, with a new accidental."""

		return DiatonicPosition(degree=self.degree + degree_delta, accidental=accidental, octave=self.octave)

	def scale_step (self) -> float:

		"""
		Return a single number that orders positions by height.

		Whole scale steps count 1, octaves count 7 and each semitone of
		accidental counts 0.5.
		"""

		return self.degree + 7 * self.octave + self.accidental / 2


def _normalize_accidental (accidental: int) -> int:

	if accidental < -6:
		return accidental + 12

	if accidental > 5:
		return accidental - 12

	return accidental


def pitch_to_diatonic (pitch: int, key: leitmotif.scales.KeyContext) -> typing.Optional[DiatonicPosition]:

	"""
	Map an absolute pitch to the nearest scale degree of a key.

	The degree with the smallest accidental wins.  Ties go to the degree
	closest to the tonic, then to the non-negative degree, so F# in C major is
	degree 3 raised rather than degree -3 lowered.  The octave is chosen so
	that `diatonic_to_pitch` returns ``pitch`` again.

	Returns:
		The position, or ``None`` when no degree lies within two semitones.
	"""

	pitch_class = pitch % 12
	tonic_pc = key.tonic_pc
	offsets = key.offsets

	best: typing.Optional[typing.Tuple[int, int]] = None
	best_rank: typing.Optional[typing.Tuple[int, int, bool]] = None

	for degree in range(DEGREE_SEARCH_MIN, DEGREE_SEARCH_MAX + 1):

		expected_pc = (tonic_pc + offsets[degree % 7]) % 12
		accidental = _normalize_accidental(pitch_class - expected_pc)

		if abs(accidental) > MAX_ACCIDENTAL:
			continue

		rank = (abs(accidental), abs(degree), degree < 0)

		if best_rank is None or rank < best_rank:
			best = (degree, accidental)
			best_rank = rank

	if best is None:
		return None

	degree, accidental = best
	octave = pitch // 12 - 1 - degree // 7

	return DiatonicPosition(degree=degree, accidental=accidental, octave=octave)


def require_diatonic (pitch: int, key: leitmotif.scales.KeyContext) -> DiatonicPosition:

	"""
	Like `pitch_to_diatonic`, but raise when the pitch cannot be resolved.

	Raises:
		UnresolvableDiatonicPositionError: If no degree is within tolerance.
	"""

	position = pitch_to_diatonic(pitch, key)

	if position is None:
		raise leitmotif.exceptions.UnresolvableDiatonicPositionError(
			f"Pitch {pitch} has no scale degree within {MAX_ACCIDENTAL} semitones in {key.name}"
		)

	return position


def diatonic_to_pitch (position: DiatonicPosition, key: leitmotif.scales.KeyContext) -> int:

	"""Return the absolute pitch of a diatonic position in a key."""

	degree_mod = position.degree % 7
	octave_add = position.degree // 7

	expected_pc = (key.tonic_pc + key.offsets[degree_mod]) % 12
	pitch_class = (expected_pc + position.accidental) % 12

	return pitch_class + (position.octave + octave_add + 1) * 12


def relative_degree (base: DiatonicPosition, position: DiatonicPosition) -> int:

	"""
	Return how many scale steps ``position`` lies above ``base``.

	Adding the result to ``base.degree`` (keeping ``base.octave``) and decoding
	with ``position.accidental`` gives back the pitch of ``position``.
	"""

	return (position.degree - base.degree) + 7 * (position.octave - base.octave)
