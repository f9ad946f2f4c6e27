"""Splitting polyphonic note lists into monophonic voices."""

import logging
import typing

import leitmotif.notes


logger = logging.getLogger(__name__)


def separate_voices (notes: typing.Iterable[leitmotif.notes.Note]) -> typing.List[leitmotif.notes.Voice]:

	"""
	Assign notes to monophonic voices by nearest pitch.

	Notes are taken by start tick, highest pitch first.  Each joins the voice
	whose last note has already ended and is closest in pitch (the earlier
	voice on a tie), or opens a new voice when every voice is still sounding.

	Example:
		```python
		chord = [Note(60, 0, 480), Note(64, 0, 480), Note(67, 0, 480)]
		[v[0].pitch for v in separate_voices(chord)]  # → [67, 64, 60]
		```
	"""

	voices: typing.List[leitmotif.notes.Voice] = []

	for note in sorted(notes, key=lambda n: (n.start, -n.pitch)):

		best_index: typing.Optional[int] = None
		best_distance = 0

		for index, voice in enumerate(voices):

			last = voice[-1]

			if last.end > note.start:
				continue

			distance = abs(last.pitch - note.pitch)

			if best_index is None or distance < best_distance:
				best_index = index
				best_distance = distance

		if best_index is None:
			voices.append([note])
		else:
			voices[best_index].append(note)

	return voices


def tracks_to_voices (
	tracks: typing.Sequence[typing.Sequence[leitmotif.notes.Note]],
	preserve_tracks: typing.Optional[bool] = None,
) -> typing.Tuple[typing.List[leitmotif.notes.Voice], typing.List[int]]:

	"""
	Turn per-track note lists into voices and the track each voice belongs to.

	Parameters:
		tracks: Notes of every track, in file order (empty tracks included).
		preserve_tracks: Keep voices inside their own tracks.  ``None`` turns
			it on automatically when more than one track has notes.

	Returns:
		``(voices, voice_to_track)``.  With tracks preserved, a polyphonic
		track yields several voices, all mapped back to it.  Otherwise all
		notes are separated together and mapped to the first track with notes.
	"""

	note_tracks = [index for index, notes in enumerate(tracks) if notes]

	if preserve_tracks is None:
		preserve_tracks = len(note_tracks) > 1

	voices: typing.List[leitmotif.notes.Voice] = []
	voice_to_track: typing.List[int] = []

	if preserve_tracks:

		for track_index in note_tracks:
			for voice in separate_voices(tracks[track_index]):
				voices.append(voice)
				voice_to_track.append(track_index)

	elif note_tracks:

		merged = [note for track_index in note_tracks for note in tracks[track_index]]

		for voice in separate_voices(merged):
			voices.append(voice)
			voice_to_track.append(note_tracks[0])

	logger.debug(f"{len(voices)} voices from {len(note_tracks)} tracks with notes (preserve tracks: {preserve_tracks})")

	return voices, voice_to_track
