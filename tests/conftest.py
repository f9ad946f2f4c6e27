import typing

import pytest

import leitmotif.notes
import leitmotif.scales


def make_voice (
	pitches: typing.Iterable[int],
	duration: int = 480,
	gap: int = 0,
	velocity: int = 100,
	start: int = 0,
) -> typing.List[leitmotif.notes.Note]:

	"""Build a monophonic voice with evenly spaced notes."""

	notes = []
	tick = start

	for pitch in pitches:
		notes.append(leitmotif.notes.Note(pitch=pitch, start=tick, duration=duration, velocity=velocity))
		tick += duration + gap

	return notes


# C major scale up and down, twice.
C_MAJOR_RUN = [60, 62, 64, 65, 67, 69, 71, 72, 71, 69, 67, 65, 64, 62, 60]


@pytest.fixture
def c_major () -> leitmotif.scales.KeyContext:

	"""The C major key context."""

	return leitmotif.scales.KeyContext("C", "major")


@pytest.fixture
def scale_voice () -> typing.List[leitmotif.notes.Note]:

	"""A voice that only uses C major scale tones."""

	return make_voice(C_MAJOR_RUN + C_MAJOR_RUN, duration=240)


@pytest.fixture
def repeated_voice () -> typing.List[leitmotif.notes.Note]:

	"""C4 D4 E4 played three times back to back."""

	return make_voice([60, 62, 64] * 3, duration=240)
