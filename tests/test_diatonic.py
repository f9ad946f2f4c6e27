import pytest

import leitmotif.diatonic
import leitmotif.exceptions
import leitmotif.scales


DiatonicPosition = leitmotif.diatonic.DiatonicPosition


@pytest.mark.parametrize("key", leitmotif.scales.CANONICAL_KEYS, ids=lambda key: key.name)
def test_every_pitch_round_trips (key: leitmotif.scales.KeyContext) -> None:

	"""Every MIDI pitch decodes back to itself in every key."""

	for pitch in range(128):

		position = leitmotif.diatonic.pitch_to_diatonic(pitch, key)

		assert position is not None
		assert -2 <= position.accidental <= 2
		assert leitmotif.diatonic.diatonic_to_pitch(position, key) == pitch


def test_scale_tones_have_no_accidental (c_major: leitmotif.scales.KeyContext) -> None:

	"""Scale tones of C major resolve with accidental 0."""

	assert leitmotif.diatonic.pitch_to_diatonic(60, c_major) == DiatonicPosition(0, 0, 4)
	assert leitmotif.diatonic.pitch_to_diatonic(64, c_major) == DiatonicPosition(2, 0, 4)
	assert leitmotif.diatonic.pitch_to_diatonic(72, c_major) == DiatonicPosition(0, 0, 5)


def test_nearest_degree_to_the_tonic_wins (c_major: leitmotif.scales.KeyContext) -> None:

	"""B3 is one degree below C4, not six above C3."""

	assert leitmotif.diatonic.pitch_to_diatonic(59, c_major) == DiatonicPosition(-1, 0, 4)



def test_equal_distance_prefers_the_degree_above_the_tonic (c_major: leitmotif.scales.KeyContext) -> None:

	"""F# is as far from degree 3 as from degree -3, and reads as a raised fourth."""

	assert leitmotif.diatonic.pitch_to_diatonic(66, c_major) == DiatonicPosition(3, 1, 4)
	assert leitmotif.diatonic.pitch_to_diatonic(54, c_major) == DiatonicPosition(3, 1, 3)


def test_chromatic_tones (c_major: leitmotif.scales.KeyContext) -> None:

	"""Chromatic tones resolve to the nearest degree with a one-semitone accidental."""

	assert leitmotif.diatonic.pitch_to_diatonic(61, c_major) == DiatonicPosition(0, 1, 4)
	assert leitmotif.diatonic.pitch_to_diatonic(66, c_major) == DiatonicPosition(3, 1, 4)


def test_raised_seventh_in_minor () -> None:

	"""G# is a scale tone of A minor."""

	a_minor = leitmotif.scales.KeyContext("A", "minor")
	position = leitmotif.diatonic.pitch_to_diatonic(68, a_minor)

	assert position is not None
	assert position.accidental == 0
	assert leitmotif.diatonic.diatonic_to_pitch(position, a_minor) == 68


def test_negative_degree_lands_in_the_octave_below (c_major: leitmotif.scales.KeyContext) -> None:

	"""One degree below C4 is B3 (59), not B4 (71)."""

	base = leitmotif.diatonic.pitch_to_diatonic(60, c_major)

	assert base is not None
	assert leitmotif.diatonic.diatonic_to_pitch(base.shifted(-1), c_major) == 59


def test_degree_division_is_floored (c_major: leitmotif.scales.KeyContext) -> None:

	"""Degree -8 from octave 4 is B2; truncating division would give B3."""

	assert leitmotif.diatonic.diatonic_to_pitch(DiatonicPosition(-8, 0, 4), c_major) == 47
	assert leitmotif.diatonic.diatonic_to_pitch(DiatonicPosition(-7, 0, 4), c_major) == 48
	assert leitmotif.diatonic.diatonic_to_pitch(DiatonicPosition(7, 0, 4), c_major) == 72


def test_relative_degree (c_major: leitmotif.scales.KeyContext) -> None:

	"""B4 is six scale steps above C4, whatever degree the search picked for it."""

	base = leitmotif.diatonic.pitch_to_diatonic(60, c_major)
	target = leitmotif.diatonic.pitch_to_diatonic(71, c_major)

	assert base is not None and target is not None

	steps = leitmotif.diatonic.relative_degree(base, target)

	assert steps == 6
	assert leitmotif.diatonic.diatonic_to_pitch(base.shifted(steps, target.accidental), c_major) == 71


def test_relative_degree_descending (c_major: leitmotif.scales.KeyContext) -> None:

	"""Relative degrees below the base decode into the right octave."""

	base = leitmotif.diatonic.pitch_to_diatonic(60, c_major)

	assert base is not None

	for pitch in (59, 57, 55, 48, 47, 36):

		target = leitmotif.diatonic.pitch_to_diatonic(pitch, c_major)

		assert target is not None

		steps = leitmotif.diatonic.relative_degree(base, target)

		assert steps < 0
		assert leitmotif.diatonic.diatonic_to_pitch(base.shifted(steps, target.accidental), c_major) == pitch


def test_scale_step_orders_by_height (c_major: leitmotif.scales.KeyContext) -> None:

	"""Scale steps rise with pitch, a semitone counting as half a step."""

	steps = [leitmotif.diatonic.pitch_to_diatonic(pitch, c_major).scale_step() for pitch in (59, 60, 61, 62)]

	assert steps == [27.0, 28.0, 28.5, 29.0]


def test_unresolvable_pitch (monkeypatch: pytest.MonkeyPatch, c_major: leitmotif.scales.KeyContext) -> None:

	"""With no accidental allowed, a chromatic tone has no position."""

	monkeypatch.setattr(leitmotif.diatonic, "MAX_ACCIDENTAL", 0)

	assert leitmotif.diatonic.pitch_to_diatonic(61, c_major) is None

	with pytest.raises(leitmotif.exceptions.UnresolvableDiatonicPositionError):
		leitmotif.diatonic.require_diatonic(61, c_major)

	assert leitmotif.diatonic.require_diatonic(62, c_major) == DiatonicPosition(1, 0, 4)
