import pytest

import leitmotif.scales


def test_key_context_pitch_classes () -> None:

	"""A key lists its seven pitch classes starting from the tonic."""

	assert leitmotif.scales.KeyContext("Bb", "major").pitch_classes() == (10, 0, 2, 3, 5, 7, 9)
	assert leitmotif.scales.KeyContext("A", "minor").pitch_classes() == (9, 11, 0, 2, 4, 5, 8)


def test_key_context_validation () -> None:

	"""Unknown tonics and modes are rejected."""

	with pytest.raises(ValueError):
		leitmotif.scales.KeyContext("H", "major")

	with pytest.raises(ValueError):
		leitmotif.scales.KeyContext("C", "dorian")


def test_key_context_from_pc () -> None:

	"""Keys built from a pitch class use the conventional tonic spelling."""

	assert leitmotif.scales.KeyContext.from_pc(10) == leitmotif.scales.KeyContext("Bb", "major")
	assert leitmotif.scales.KeyContext.from_pc(6, "minor") == leitmotif.scales.KeyContext("F#", "minor")
	assert leitmotif.scales.KeyContext.from_pc(9, "minor").name == "A minor"


def test_same_key_ignores_enharmonic_spelling () -> None:

	"""F# major and Gb major are the same key but different spellings."""

	sharp = leitmotif.scales.KeyContext("F#")
	flat = leitmotif.scales.KeyContext("Gb")

	assert sharp.same_key(flat)
	assert sharp != flat


def test_scale_pitch_classes_invalid_mode () -> None:

	"""An unknown mode raises ValueError."""

	with pytest.raises(ValueError):
		leitmotif.scales.scale_pitch_classes(0, "lydian")


def test_circle_distance () -> None:

	"""Neighbouring keys on the circle of fifths are one step apart."""

	c = leitmotif.scales.KeyContext("C")

	assert leitmotif.scales.circle_distance(c, leitmotif.scales.KeyContext("G")) == 1
	assert leitmotif.scales.circle_distance(c, leitmotif.scales.KeyContext("F")) == 1
	assert leitmotif.scales.circle_distance(c, leitmotif.scales.KeyContext("F#")) == 6


class TestCanonicalKeys:

	"""
	Tests for the fixed key ordering used to break ties.
	"""

	def test_all_24_keys (self) -> None:

		"""Every major and minor key appears exactly once."""

		keys = leitmotif.scales.CANONICAL_KEYS

		assert len(keys) == 24
		assert len({(key.tonic_pc, key.mode) for key in keys}) == 24


	def test_majors_then_minors_around_the_circle (self) -> None:

		"""Majors come first in circle-of-fifths order, then minors in the same order."""

		names = [key.name for key in leitmotif.scales.CANONICAL_KEYS]

		assert names[:7] == ["C major", "G major", "D major", "A major", "E major", "B major", "Gb major"]
		assert names[11] == "F major"
		assert names[12:15] == ["C minor", "G minor", "D minor"]
		assert names[18:20] == ["F# minor", "C# minor"]


	def test_scale_table_matches_keys (self) -> None:

		"""The scale table holds each key's pitch classes."""

		c_major = leitmotif.scales.KeyContext("C", "major")

		assert leitmotif.scales.SCALE_TABLE[c_major] == frozenset({0, 2, 4, 5, 7, 9, 11})
		assert set(leitmotif.scales.SCALE_TABLE) == set(leitmotif.scales.CANONICAL_KEYS)
