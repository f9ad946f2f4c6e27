"""Notes and voices.

A voice is an ordered, monophonic list of `Note` objects. Each note's
*delta* is the silence in ticks between the end of the previous note and
its own start (the first note's delta is its start tick). Deltas are
derived, never stored, so a voice can be rebuilt from
``(delta, pitch, duration, velocity)`` items alone.
"""

import dataclasses
import typing

import leitmotif.constants
import leitmotif.exceptions


@dataclasses.dataclass(frozen=True)
class Note:

	"""
	A single note event in absolute ticks.

	Attributes:
		pitch: MIDI note number (0–127, 60 = C4).
		start: Start tick (≥ 0).
		duration: Length in ticks (≥ 0).
		velocity: MIDI velocity (0–127).
	"""

	pitch: int
	start: int
	duration: int
	velocity: int = 100

	@property
	def end (self) -> int:
		return self.start + self.duration

	def key (self) -> typing.Tuple[int, int, int, int]:

		"""Return the tuple that two notes must share to be considered identical."""

		return (self.pitch, self.start, self.duration, self.velocity)


Voice = typing.List[Note]


def note_deltas (notes: typing.Sequence[Note]) -> typing.List[int]:

	"""
	Return the delta of every note in a voice.

	Example:
		```python
		notes = [Note(60, 0, 480), Note(62, 480, 480), Note(64, 1200, 240)]
		note_deltas(notes)  # → [0, 0, 240]
		```
	"""

	deltas: typing.List[int] = []
	previous_end = 0

	for note in notes:
		deltas.append(note.start - previous_end)
		previous_end = note.end

	return deltas


def validate_voice (notes: typing.Sequence[Note], voice_index: int = 0) -> None:

	"""
	Check that a voice can be encoded losslessly.

	Raises:
		MalformedInputError: If a pitch or velocity is out of MIDI range, a
			start or duration is negative, starts go backwards, or a note
			begins before the previous one has ended.
	"""

	previous: typing.Optional[Note] = None

	for index, note in enumerate(notes):

		where = f"voice {voice_index}, note {index}"

		if not leitmotif.constants.MIDI_NOTE_MIN <= note.pitch <= leitmotif.constants.MIDI_NOTE_MAX:
			raise leitmotif.exceptions.MalformedInputError(f"{where}: pitch {note.pitch} out of range")

		if not 0 <= note.velocity <= leitmotif.constants.MIDI_VELOCITY_MAX:
			raise leitmotif.exceptions.MalformedInputError(f"{where}: velocity {note.velocity} out of range")

		if note.start < 0 or note.duration < 0:
			raise leitmotif.exceptions.MalformedInputError(f"{where}: negative start or duration")

		if previous is not None:

			if note.start < previous.start:
				raise leitmotif.exceptions.MalformedInputError(f"{where}: start {note.start} is before the previous note")

			if note.start < previous.end:
				raise leitmotif.exceptions.MalformedInputError(
					f"{where}: overlaps the previous note (voices must be monophonic)"
				)

		previous = note


def notes_from_deltas (items: typing.Iterable[typing.Tuple[int, int, int, int]]) -> Voice:

	"""
	Rebuild absolute notes from ``(delta, pitch, duration, velocity)`` items.

	The running tick advances by each delta, the note is placed, then the tick
	advances by the note's duration.
	"""

	notes: Voice = []
	tick = 0

	for delta, pitch, duration, velocity in items:
		tick += delta
		notes.append(Note(pitch=pitch, start=tick, duration=duration, velocity=velocity))
		tick += duration

	return notes
