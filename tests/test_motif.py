import typing

import pytest

import leitmotif.diatonic
import leitmotif.key_estimator
import leitmotif.motif
import leitmotif.notes

import conftest


def _scenario_voice () -> typing.List[leitmotif.notes.Note]:

	"""C4 D4 E4 C4 D4 E4, 480 ticks of silence between notes."""

	return conftest.make_voice([60, 62, 64, 60, 62, 64], duration=480, gap=480)


def test_repeated_run_has_identical_interval_patterns () -> None:

	"""Both C D E runs read as two rising scale steps."""

	voice = _scenario_voice()
	segments = leitmotif.key_estimator.estimate(voice)
	descriptors = leitmotif.motif.extract(voice, segments, min_length=3, max_length=3)

	by_start = {descriptor.origin_start: descriptor for descriptor in descriptors}

	assert sorted(by_start) == [0, 1, 2, 3]
	assert by_start[0].interval_pattern == (1, 1)
	assert by_start[3].interval_pattern == (1, 1)
	assert by_start[1].interval_pattern == (1, -2)


def test_rhythm_pattern_pairs_delta_and_duration () -> None:

	"""Each note contributes its (delta, duration) pair."""

	voice = _scenario_voice()
	descriptor = leitmotif.motif.extract(voice, [], min_length=3, max_length=3)[0]

	assert descriptor.rhythm_pattern == ((0, 480), (480, 480), (480, 480))
	assert descriptor.length == 3


def test_candidate_count () -> None:

	"""Every run between the minimum and maximum length is a candidate."""

	voice = conftest.make_voice([60, 62, 64, 65])
	descriptors = leitmotif.motif.extract(voice, [], min_length=3, max_length=4)

	assert [(d.origin_start, d.length) for d in descriptors] == [(0, 3), (0, 4), (1, 3)]


def test_chromatic_half_step_is_half_a_degree () -> None:

	"""C C# D reads as two half steps."""

	descriptor = leitmotif.motif.extract(conftest.make_voice([60, 61, 62]), [], min_length=3, max_length=3)[0]

	assert descriptor.interval_pattern == (0.5, 0.5)


def test_descending_intervals_are_negative () -> None:

	"""C4 B3 A3 falls one step at a time across the octave boundary."""

	descriptor = leitmotif.motif.extract(conftest.make_voice([60, 59, 57]), [], min_length=3, max_length=3)[0]

	assert descriptor.interval_pattern == (-1, -1)


class TestUnresolvedNotes:

	"""
	Tests with chromatic tones made unresolvable.
	"""

	def test_too_chromatic_runs_are_dropped (self, monkeypatch: pytest.MonkeyPatch) -> None:

		"""Runs where under 70% of notes resolve are not candidates."""

		monkeypatch.setattr(leitmotif.diatonic, "MAX_ACCIDENTAL", 0)

		voice = conftest.make_voice([60, 61, 62, 63, 64])

		assert leitmotif.motif.extract(voice, [], min_length=3, max_length=5) == []


	def test_unresolved_notes_are_left_out_of_intervals (self, monkeypatch: pytest.MonkeyPatch) -> None:

		"""A run with one unresolved note in four keeps the intervals of the other three."""

		monkeypatch.setattr(leitmotif.diatonic, "MAX_ACCIDENTAL", 0)

		voice = conftest.make_voice([60, 61, 62, 64])
		descriptors = leitmotif.motif.extract(voice, [], min_length=4, max_length=4)

		assert len(descriptors) == 1
		assert descriptors[0].interval_pattern == (1, 1)
		assert descriptors[0].length == 4
		assert len(descriptors[0].rhythm_pattern) == 4


def test_invert_returns_a_new_descriptor () -> None:

	"""Inversion mirrors the intervals without touching the original."""

	descriptor = leitmotif.motif.extract(conftest.make_voice([60, 62, 65]), [], min_length=3, max_length=3)[0]
	inverted = leitmotif.motif.invert(descriptor)

	assert inverted.interval_pattern == (-1, -2)
	assert descriptor.interval_pattern == (1, 2)
	assert inverted.rhythm_pattern == descriptor.rhythm_pattern


def test_overlaps () -> None:

	"""Runs overlap only when they share a note in the same voice."""

	descriptor = leitmotif.motif.MotifDescriptor((1, 1), ((0, 1),) * 3, 3, origin_voice=0, origin_start=2)

	assert descriptor.overlaps(0, 4, 3)
	assert descriptor.overlaps(0, 0, 3)
	assert not descriptor.overlaps(0, 5, 3)
	assert not descriptor.overlaps(1, 2, 3)


def test_invalid_lengths () -> None:

	"""Motifs need at least two notes and a sensible length range."""

	analysed = leitmotif.motif.analyse_voice(conftest.make_voice([60, 62, 64]), [])

	with pytest.raises(ValueError):
		analysed.candidates(min_length=1, max_length=3)

	with pytest.raises(ValueError):
		analysed.candidates(min_length=4, max_length=3)
