"""Motif library entries.

An entry stores a run of notes relative to its first note, in the document
key: the scale-degree offset and accidental of every note, the gaps between
notes, and each note's duration and velocity.  Given the absolute pitch of
the first note and a start tick, the run is rebuilt exactly through the
diatonic codec.
"""

import dataclasses
import typing

import leitmotif.diatonic
import leitmotif.exceptions
import leitmotif.notes
import leitmotif.scales


@dataclasses.dataclass(frozen=True)
class MotifLibraryEntry:

	"""
	A canonical motif definition.

	Attributes:
		degree_deltas: Scale steps of each note above the first (first is 0).
		accidentals: Accidental of each note.
		deltas: Silence in ticks before each note after the first.
		durations: Duration of each note.
		velocities: Velocity of each note.
	"""

	degree_deltas: typing.Tuple[int, ...]
	accidentals: typing.Tuple[int, ...]
	deltas: typing.Tuple[int, ...]
	durations: typing.Tuple[int, ...]
	velocities: typing.Tuple[int, ...]

	def __post_init__ (self) -> None:

		length = len(self.degree_deltas)

		if length == 0:
			raise leitmotif.exceptions.MalformedInputError("A motif needs at least one note")

		if self.degree_deltas[0] != 0:
			raise leitmotif.exceptions.MalformedInputError("A motif's first degree offset must be 0")

		if len(self.accidentals) != length or len(self.durations) != length or len(self.velocities) != length:
			raise leitmotif.exceptions.MalformedInputError("Motif fields have mismatched lengths")

		if len(self.deltas) != length - 1:
			raise leitmotif.exceptions.MalformedInputError("A motif needs one delta per note after the first")

	@property
	def length (self) -> int:
		return len(self.degree_deltas)

	def to_dict (self) -> typing.Dict[str, typing.List[int]]:
		return {
			"deg_rels": list(self.degree_deltas),
			"accs": list(self.accidentals),
			"deltas": list(self.deltas),
			"durs": list(self.durations),
			"vels": list(self.velocities),
		}

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "MotifLibraryEntry":

		try:
			return cls(
				degree_deltas = tuple(int(value) for value in data["deg_rels"]),
				accidentals = tuple(int(value) for value in data["accs"]),
				deltas = tuple(int(value) for value in data["deltas"]),
				durations = tuple(int(value) for value in data["durs"]),
				velocities = tuple(int(value) for value in data["vels"])
			)

		except (KeyError, TypeError, ValueError) as exc:
			raise leitmotif.exceptions.MalformedInputError(f"Invalid motif definition: {exc}") from exc


def build_entry (
	notes: typing.Sequence[leitmotif.notes.Note],
	key: leitmotif.scales.KeyContext,
) -> typing.Optional[MotifLibraryEntry]:

	"""
	Express a run of notes as a library entry in ``key``.

	Returns:
		The entry, or ``None`` if the run is empty or any note has no
		diatonic position in the key.
	"""

	if not notes:
		return None

	positions = [leitmotif.diatonic.pitch_to_diatonic(note.pitch, key) for note in notes]

	if any(position is None for position in positions):
		return None

	resolved = typing.cast(typing.List[leitmotif.diatonic.DiatonicPosition], positions)
	base = resolved[0]

	return MotifLibraryEntry(
		degree_deltas = tuple(leitmotif.diatonic.relative_degree(base, position) for position in resolved),
		accidentals = tuple(position.accidental for position in resolved),
		deltas = tuple(b.start - a.end for a, b in zip(notes, notes[1:])),
		durations = tuple(note.duration for note in notes),
		velocities = tuple(note.velocity for note in notes)
	)


def expand_entry (
	entry: MotifLibraryEntry,
	base_pitch: int,
	key: leitmotif.scales.KeyContext,
	start: int = 0,
) -> typing.List[leitmotif.notes.Note]:

	"""
	Rebuild the notes of an entry from its first pitch and start tick.

	Raises:
		UnresolvableDiatonicPositionError: If ``base_pitch`` has no diatonic
			position in ``key``.
	"""

	base = leitmotif.diatonic.require_diatonic(base_pitch, key)

	notes: typing.List[leitmotif.notes.Note] = []
	tick = start

	for index, (degree_delta, accidental) in enumerate(zip(entry.degree_deltas, entry.accidentals)):

		if index > 0:
			tick += entry.deltas[index - 1]

		pitch = leitmotif.diatonic.diatonic_to_pitch(base.shifted(degree_delta, accidental), key)

		notes.append(leitmotif.notes.Note(
			pitch = pitch,
			start = tick,
			duration = entry.durations[index],
			velocity = entry.velocities[index]
		))

		tick += entry.durations[index]

	return notes
