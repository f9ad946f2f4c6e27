import pytest

import leitmotif.exceptions
import leitmotif.notes

import conftest


Note = leitmotif.notes.Note


def test_note_deltas_measure_silence_after_previous_end () -> None:

	"""A delta is the gap between the previous note's end and this note's start."""

	notes = [Note(60, 100, 480), Note(62, 580, 480), Note(64, 1300, 240)]

	assert leitmotif.notes.note_deltas(notes) == [100, 0, 240]


def test_notes_from_deltas_rebuilds_ticks () -> None:

	"""Rebuilding from deltas restores absolute start ticks."""

	notes = conftest.make_voice([60, 62, 64], duration=240, gap=120, start=960)
	items = [
		(delta, note.pitch, note.duration, note.velocity)
		for note, delta in zip(notes, leitmotif.notes.note_deltas(notes))
	]

	assert leitmotif.notes.notes_from_deltas(items) == notes


def test_validate_voice_accepts_touching_and_zero_length_notes () -> None:

	"""Back-to-back and zero-length notes form a valid voice."""

	leitmotif.notes.validate_voice([Note(60, 0, 0), Note(60, 0, 480), Note(62, 480, 480)])


@pytest.mark.parametrize("notes", [
	[Note(128, 0, 480)],
	[Note(60, 0, 480, velocity=128)],
	[Note(60, -1, 480)],
	[Note(60, 0, -5)],
	[Note(60, 480, 480), Note(62, 0, 480)],
	[Note(60, 0, 480), Note(62, 240, 480)],
], ids=["pitch", "velocity", "start", "duration", "order", "overlap"])
def test_validate_voice_rejects_malformed_input (notes: list) -> None:

	"""Out-of-range values, backwards starts and overlaps are malformed."""

	with pytest.raises(leitmotif.exceptions.MalformedInputError):
		leitmotif.notes.validate_voice(notes)
