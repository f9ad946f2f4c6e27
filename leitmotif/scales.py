"""Key contexts and the static scale tables they are built on.

Every table here is built once at import time and never mutated.
"""

import dataclasses
import typing

import leitmotif.pitches


MODE_OFFSETS: typing.Dict[str, typing.Tuple[int, ...]] = {
	"major": (0, 2, 4, 5, 7, 9, 11),
	"minor": (0, 2, 3, 5, 7, 8, 11),
}

MODES: typing.Tuple[str, ...] = ("major", "minor")

# Circle of fifths ordering (enharmonic simplifications used intentionally).
CIRCLE_OF_FIFTHS: typing.Tuple[str, ...] = ("C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F")


@dataclasses.dataclass(frozen=True)
class KeyContext:

	"""
	A tonic and mode that scale degrees are measured against.

	Attributes:
		tonic: Tonic note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).
		mode: ``"major"`` or ``"minor"``.

	Example:
		```python
		key = KeyContext("Bb", "major")
		key.tonic_pc          # → 10
		key.pitch_classes()   # → (10, 0, 2, 3, 5, 7, 9)
		```
	"""

	tonic: str
	mode: str = "major"

	def __post_init__ (self) -> None:
		leitmotif.pitches.key_name_to_pc(self.tonic)
		if self.mode not in MODE_OFFSETS:
			raise ValueError(f"Unknown mode {self.mode!r}. Available: {list(MODES)}")

	@classmethod
	def from_pc (cls, tonic_pc: int, mode: str = "major") -> "KeyContext":

		"""Build a key from a tonic pitch class, using the conventional tonic spelling."""

		return cls(tonic=leitmotif.pitches.tonic_name(tonic_pc, mode), mode=mode)

	@property
	def tonic_pc (self) -> int:
		return leitmotif.pitches.key_name_to_pc(self.tonic)

	@property
	def offsets (self) -> typing.Tuple[int, ...]:
		return MODE_OFFSETS[self.mode]

	@property
	def name (self) -> str:
		return f"{self.tonic} {self.mode}"

	def pitch_classes (self) -> typing.Tuple[int, ...]:

		"""Return the seven pitch classes of the scale, starting from the tonic."""

		return scale_pitch_classes(self.tonic_pc, self.mode)

	def same_key (self, other: "KeyContext") -> bool:

		"""Compare by pitch class so enharmonic spellings of a tonic are equal."""

		return self.tonic_pc == other.tonic_pc and self.mode == other.mode


DEFAULT_KEY = KeyContext("C", "major")


def scale_pitch_classes (tonic_pc: int, mode: str = "major") -> typing.Tuple[int, ...]:

	"""
	Return the pitch classes (0–11) that belong to a key and mode.

	Parameters:
		tonic_pc: Tonic pitch class (0 = C, 1 = C#/Db, …, 11 = B).
		mode: ``"major"`` or ``"minor"``.

	Example:
		```python
		scale_pitch_classes(0, "major")  # → (0, 2, 4, 5, 7, 9, 11)
		scale_pitch_classes(9, "minor")  # → (9, 11, 0, 2, 4, 5, 8)
		```
	"""

	if mode not in MODE_OFFSETS:
		raise ValueError(f"Unknown mode {mode!r}. Available: {list(MODES)}")

	return tuple((tonic_pc + offset) % 12 for offset in MODE_OFFSETS[mode])


def circle_distance (a: KeyContext, b: KeyContext) -> int:

	"""Return the number of steps between two tonics around the circle of fifths."""

	steps = (7 * (b.tonic_pc - a.tonic_pc)) % 12

	return min(steps, 12 - steps)


# Canonical key ordering used to break scoring ties deterministically:
# all majors around the circle of fifths, then all minors in the same order.
CANONICAL_KEYS: typing.Tuple[KeyContext, ...] = tuple(
	KeyContext.from_pc(leitmotif.pitches.key_name_to_pc(tonic), mode)
	for mode in MODES
	for tonic in CIRCLE_OF_FIFTHS
)

SCALE_TABLE: typing.Dict[KeyContext, typing.FrozenSet[int]] = {
	key: frozenset(key.pitch_classes()) for key in CANONICAL_KEYS
}
