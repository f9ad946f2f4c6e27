"""Pitch names, pitch classes and tonic spelling.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g. `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to sharp spellings
- `PC_TO_FLAT_NAME`: Maps pitch classes to flat spellings
- `FLAT_FRIENDLY_PCS`: Pitch classes whose tonic is spelled with a flat

Module-level helpers:
- `key_name_to_pc(key_name)`: Validate a note name and return its pitch class.
- `tonic_name(pc, mode)`: Spell a tonic pitch class the way key names are written.
- `pitch_to_name(pitch)` / `name_to_pitch(name)`: Convert between MIDI numbers
  and scientific pitch names (C4 = 60).
"""

import re
import typing


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"Cb": 11,
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"E#": 5,
	"Fb": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
	"B#": 0,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

PC_TO_FLAT_NAME: typing.List[str] = [
	"C",
	"Db",
	"D",
	"Eb",
	"E",
	"F",
	"Gb",
	"G",
	"Ab",
	"A",
	"Bb",
	"B",
]

# Conventional flat tonic spellings: Db, Eb, Gb, Ab, Bb major; Eb, Bb minor.
FLAT_FRIENDLY_PCS: typing.FrozenSet[int] = frozenset({1, 3, 6, 8, 10})
FLAT_FRIENDLY_MINOR_PCS: typing.FrozenSet[int] = frozenset({3, 10})

_PITCH_NAME_PATTERN = re.compile(r"([A-Ga-g][#b]?)(-?\d+)")


def key_name_to_pc (key_name: str) -> int:

	"""Validate a note name and return its pitch class (0–11).

	Parameters:
		key_name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Raises:
		ValueError: If the name is not recognised.

	Example:
		```python
		key_name_to_pc("C")   # → 0
		key_name_to_pc("Bb")  # → 10
		```
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


def tonic_name (pc: int, mode: str = "major") -> str:

	"""Return the conventional tonic spelling for a pitch class in a mode."""

	pc = pc % 12
	flat_pcs = FLAT_FRIENDLY_MINOR_PCS if mode == "minor" else FLAT_FRIENDLY_PCS

	if pc in flat_pcs:
		return PC_TO_FLAT_NAME[pc]

	return PC_TO_NOTE_NAME[pc]


def pitch_to_name (pitch: int) -> str:

	"""Return the sharp-spelled scientific name of a MIDI pitch.

	Octaves follow the MIDI convention (pitch 60 is ``"C4"``, pitch 0 is
	``"C-1"``).
	"""

	return f"{PC_TO_NOTE_NAME[pitch % 12]}{pitch // 12 - 1}"


def name_to_pitch (name: str) -> int:

	"""Parse a scientific pitch name such as ``"C#4"`` or ``"Bb-1"``.

	Flats and sharps are both accepted, and the octave may be negative.
	``"B#3"`` and ``"Cb4"`` resolve by semitone arithmetic, so they are 60 and 59.

	Raises:
		ValueError: If the name is malformed.
	"""

	match = _PITCH_NAME_PATTERN.fullmatch(name.strip())

	if not match:
		raise ValueError(f"Invalid pitch name: {name!r}")

	note_name, octave_str = match.groups()
	note_name = note_name[0].upper() + note_name[1:]

	natural_pc = NOTE_NAME_TO_PC[note_name[0]]
	alteration = note_name.count("#") - note_name.count("b")

	return natural_pc + alteration + (int(octave_str) + 1) * 12
