"""Standard MIDI File reading and writing.

Reading pairs note-on and note-off events per channel and pitch, first in
first out.  A note-on with velocity 0 counts as a note-off, and a note left
sounding at the end of a track is closed at the track's last tick.

Writing produces a type 1 file: tempo on the first track, one track per
original track, and each voice's notes on the track it came from.
"""

import dataclasses
import logging
import os
import typing

import mido

import leitmotif.codec
import leitmotif.config
import leitmotif.constants
import leitmotif.notes
import leitmotif.voices


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class MidiTrackData:

	name: str
	notes: typing.List[leitmotif.notes.Note]


@dataclasses.dataclass
class MidiPiece:

	"""The parts of a MIDI file the codec uses."""

	ppq: int
	tempo: int
	tracks: typing.List[MidiTrackData]


def _read_track (track: mido.MidiTrack) -> typing.Tuple[str, typing.List[leitmotif.notes.Note], typing.Optional[int]]:

	"""Return a track's name, its notes sorted by start then pitch, and its first tempo (if any)."""

	name = ""
	tempo: typing.Optional[int] = None
	tick = 0

	pending: typing.Dict[typing.Tuple[int, int], typing.List[typing.Tuple[int, int]]] = {}
	notes: typing.List[leitmotif.notes.Note] = []

	for message in track:

		tick += message.time

		if message.type == "track_name" and not name:
			name = message.name

		elif message.type == "set_tempo" and tempo is None:
			tempo = round(mido.tempo2bpm(message.tempo))

		elif message.type == "note_on" and message.velocity > 0:
			pending.setdefault((message.channel, message.note), []).append((tick, message.velocity))

		elif message.type in ("note_on", "note_off"):

			starts = pending.get((message.channel, message.note))

			if not starts:
				logger.debug(f"Ignoring note-off without a note-on: {message.note} at tick {tick}")
				continue

			start, velocity = starts.pop(0)
			notes.append(leitmotif.notes.Note(pitch=message.note, start=start, duration=tick - start, velocity=velocity))

	for (_channel, pitch), starts in pending.items():
		for start, velocity in starts:
			logger.debug(f"Closing unterminated note {pitch} at tick {tick}")
			notes.append(leitmotif.notes.Note(pitch=pitch, start=start, duration=tick - start, velocity=velocity))

	notes.sort(key=lambda note: (note.start, note.pitch))

	return name, notes, tempo


def read_midi (path: str) -> MidiPiece:

	"""
	Read a Standard MIDI File.

	The tempo is the first ``set_tempo`` found, rounded to whole BPM
	(120 when the file has none).
	"""

	midi_file = mido.MidiFile(path)
	tempo: typing.Optional[int] = None
	tracks: typing.List[MidiTrackData] = []

	for track in midi_file.tracks:

		name, notes, track_tempo = _read_track(track)

		if tempo is None:
			tempo = track_tempo

		tracks.append(MidiTrackData(name=name, notes=notes))

	logger.debug(f"Read {path}: {len(tracks)} tracks, ppq {midi_file.ticks_per_beat}")

	return MidiPiece(
		ppq = midi_file.ticks_per_beat,
		tempo = tempo if tempo is not None else leitmotif.constants.DEFAULT_TEMPO,
		tracks = tracks
	)


def write_midi (
	path: str,
	voices: typing.Sequence[typing.Sequence[leitmotif.notes.Note]],
	ppq: int = leitmotif.constants.DEFAULT_PPQ,
	tempo: int = leitmotif.constants.DEFAULT_TEMPO,
	voice_to_track: typing.Optional[typing.Sequence[int]] = None,
	original_track_count: typing.Optional[int] = None,
	track_names: typing.Optional[typing.Sequence[str]] = None,
) -> None:

	"""
	Write voices to a type 1 Standard MIDI File.

	At the same tick, note-offs come before note-ons so a repeated pitch is
	re-struck.  A zero-length note keeps its own on before its off.
	"""

	if voice_to_track is None:
		voice_to_track = list(range(len(voices)))

	track_count = original_track_count if original_track_count is not None else max(1, len(voices))
	track_count = max(track_count, max(voice_to_track, default=-1) + 1, 1)
	track_names = list(track_names or [])

	# (tick, order, sequence, message); order puts offs first, then zero-length pairs, then ons.
	events: typing.List[typing.List[typing.Tuple[int, int, int, mido.Message]]] = [[] for _ in range(track_count)]
	sequence = 0

	for voice, track_index in zip(voices, voice_to_track):
		for note in voice:

			on = mido.Message("note_on", note=note.pitch, velocity=note.velocity, channel=0)
			off = mido.Message("note_off", note=note.pitch, velocity=0, channel=0)

			if note.duration == 0:
				events[track_index].append((note.start, 1, sequence, on))
				events[track_index].append((note.start, 2, sequence + 1, off))
			else:
				events[track_index].append((note.start, 3, sequence, on))
				events[track_index].append((note.end, 0, sequence + 1, off))

			sequence += 2

	midi_file = mido.MidiFile(type=1, ticks_per_beat=ppq)

	for track_index in range(track_count):

		track = mido.MidiTrack()
		midi_file.tracks.append(track)

		if track_index < len(track_names) and track_names[track_index]:
			track.append(mido.MetaMessage("track_name", name=track_names[track_index], time=0))

		if track_index == 0:
			track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(tempo), time=0))

		last_tick = 0

		for tick, _order, _sequence, message in sorted(events[track_index], key=lambda event: event[:3]):
			track.append(message.copy(time=tick - last_tick))
			last_tick = tick

		track.append(mido.MetaMessage("end_of_track", time=0))

	midi_file.save(path)
	logger.debug(f"Wrote {path}: {track_count} tracks")


def encode_piece (
	piece: MidiPiece,
	config: typing.Optional[leitmotif.config.CodecConfig] = None,
	preserve_tracks: typing.Optional[bool] = None,
) -> leitmotif.codec.CompressedDocument:

	"""Separate a piece into voices and encode it, keeping its track layout."""

	voices, voice_to_track = leitmotif.voices.tracks_to_voices(
		[track.notes for track in piece.tracks],
		preserve_tracks = preserve_tracks
	)

	return leitmotif.codec.encode(
		voices,
		ppq = piece.ppq,
		tempo = piece.tempo,
		config = config,
		track_names = [track.name for track in piece.tracks],
		voice_to_track = voice_to_track,
		original_track_count = len(piece.tracks)
	)


def encode_file (
	midi_path: str,
	json_path: str,
	config: typing.Optional[leitmotif.config.CodecConfig] = None,
	preserve_tracks: typing.Optional[bool] = None,
) -> leitmotif.codec.CompressedDocument:

	"""Read a MIDI file, encode it and save the document as JSON."""

	document = encode_piece(read_midi(midi_path), config=config, preserve_tracks=preserve_tracks)
	document.save(json_path)
	logger.info(f"{os.path.basename(midi_path)} → {json_path}")

	return document


def decode_file (json_path: str, midi_path: str) -> leitmotif.codec.DecodedPiece:

	"""Load a JSON document, decode it and write it as a MIDI file."""

	piece = leitmotif.codec.decode(leitmotif.codec.CompressedDocument.load(json_path))

	write_midi(
		midi_path,
		piece.voices,
		ppq = piece.ppq,
		tempo = piece.tempo,
		voice_to_track = piece.voice_to_track,
		original_track_count = piece.original_track_count,
		track_names = piece.track_names
	)

	logger.info(f"{os.path.basename(json_path)} → {midi_path}")

	return piece
