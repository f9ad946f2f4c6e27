"""Sliding-window key estimation.

Each voice is scanned with a window of notes.  Every window is scored
against all 24 major and minor keys by the share of its distinct pitch
classes that belong to the key's scale.  Consecutive windows with the same
best key merge into one `KeySegment`.  A change of key is only accepted when
the new window clearly beats the running segment, so one altered tone does
not split the voice.

Example:
	```python
	segments = estimate(voice)
	segments[0].key.name        # → "C major"
	segments[0].confidence      # → 1.0

	start, end = global_key([segments, other_segments])
	```
"""

import dataclasses
import logging
import typing

import leitmotif.constants
import leitmotif.notes
import leitmotif.scales


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class KeySegment:

	"""
	A run of note indices (inclusive at both ends) analysed in one key.
	"""

	start_index: int
	end_index: int
	key: leitmotif.scales.KeyContext
	confidence: float

	def covers (self, index: int) -> bool:
		return self.start_index <= index <= self.end_index


class GlobalKey (typing.NamedTuple):

	"""Start and end key of a piece; both ``None`` when nothing was analysable."""

	start: typing.Optional[leitmotif.scales.KeyContext]
	end: typing.Optional[leitmotif.scales.KeyContext]


def score_window (pitches: typing.Sequence[int]) -> typing.Optional[typing.Tuple[leitmotif.scales.KeyContext, float]]:

	"""
	Return the best key for a window of pitches and its score (0–1).

	Octaves are ignored and each pitch class counts once.  Ties are resolved
	by the canonical key order (majors around the circle of fifths, then
	minors).  An empty window returns ``None``.
	"""

	unique = {pitch % 12 for pitch in pitches}

	if not unique:
		return None

	best_key: typing.Optional[leitmotif.scales.KeyContext] = None
	best_score = -1.0

	for key in leitmotif.scales.CANONICAL_KEYS:

		score = len(unique & leitmotif.scales.SCALE_TABLE[key]) / len(unique)

		if score > best_score:
			best_key = key
			best_score = score

	assert best_key is not None

	return best_key, best_score


def estimate (
	voice: typing.Sequence[leitmotif.notes.Note],
	window_size: int = leitmotif.constants.KEY_WINDOW_SIZE,
	stride: typing.Optional[int] = None,
	min_confidence: float = 0.0,
	min_delta: float = leitmotif.constants.KEY_MIN_DELTA,
	high_confidence: float = leitmotif.constants.KEY_HIGH_CONFIDENCE,
) -> typing.List[KeySegment]:

	"""
	Split a voice into key segments.

	Parameters:
		voice: The notes of one voice.
		window_size: Notes per analysis window.
		stride: Notes between window starts (default: half the window).
		min_confidence: Windows scoring below this are skipped.
		min_delta: How much a new key must beat the running segment's
			confidence to start a new segment.
		high_confidence: A window scoring above this always starts a new
			segment when its key differs.

	Returns:
		Contiguous segments in note order.  The last one always ends on the
		final note.  An empty voice yields no segments.
	"""

	if window_size <= 0:
		raise ValueError("Window size must be positive")

	if stride is None:
		stride = max(1, window_size // 2)

	if stride <= 0:
		raise ValueError("Stride must be positive")

	pitches = [note.pitch for note in voice]

	if not pitches:
		return []

	min_window = max(4, window_size // 2)

	# Each open segment is [start_index, end_index, key, confidence].
	closed: typing.List[typing.List[typing.Any]] = []
	current: typing.Optional[typing.List[typing.Any]] = None

	for start in range(0, len(pitches), stride):

		window = pitches[start:start + window_size]

		if start > 0 and len(window) < min_window:
			break

		scored = score_window(window)

		if scored is None or scored[1] < min_confidence:
			continue

		key, score = scored
		end = start + len(window) - 1

		if current is None:
			current = [start, end, key, score]

		elif key == current[2]:
			current[1] = end
			current[3] = (current[3] + score) / 2

		elif score - current[3] >= min_delta or score > high_confidence:
			logger.debug(f"Key change at note {start}: {current[2].name} → {key.name} ({score:.2f})")
			current[1] = start - 1
			closed.append(current)
			current = [start, end, key, score]

		else:
			current[1] = end
			current[3] = (current[3] * 2 + score) / 3

		if end >= len(pitches) - 1:
			break

	if current is not None:
		current[1] = len(pitches) - 1
		closed.append(current)

	return [
		KeySegment(start_index=start, end_index=end, key=key, confidence=confidence)
		for start, end, key, confidence in closed
	]


def estimate_voices (voices: typing.Sequence[typing.Sequence[leitmotif.notes.Note]], **kwargs: typing.Any) -> typing.List[typing.List[KeySegment]]:

	"""Run `estimate` on every voice with the same options."""

	return [estimate(voice, **kwargs) for voice in voices]


def global_key (segments_per_voice: typing.Sequence[typing.Sequence[KeySegment]]) -> GlobalKey:

	"""
	Pick the start and end key of a multi-voice piece.

	The end key is the last segment of the last voice that has any.  The start
	key is the earliest segment, across all voices, in that same key; pieces
	usually end in their home key.  If no segment matches, the first segment
	found is used.
	"""

	end: typing.Optional[leitmotif.scales.KeyContext] = None

	for segments in segments_per_voice:
		if segments:
			end = segments[-1].key

	start: typing.Optional[leitmotif.scales.KeyContext] = None

	if end is not None:

		earliest: typing.Optional[int] = None

		for segments in segments_per_voice:

			match = next((segment for segment in segments if segment.key == end), None)

			if match is not None and (earliest is None or match.start_index < earliest):
				earliest = match.start_index
				start = match.key

	if start is None:
		start = next((segments[0].key for segments in segments_per_voice if segments), None)

	return GlobalKey(start=start, end=end)


def document_key (segments_per_voice: typing.Sequence[typing.Sequence[KeySegment]]) -> leitmotif.scales.KeyContext:

	"""Return the key a whole document is encoded in (C major when nothing was analysable)."""

	start = global_key(segments_per_voice).start

	return start if start is not None else leitmotif.scales.DEFAULT_KEY


def key_at (segments: typing.Sequence[KeySegment], index: int) -> leitmotif.scales.KeyContext:

	"""Return the key covering a note index, falling back to the first segment, then C major."""

	for segment in segments:
		if segment.covers(index):
			return segment.key

	if segments:
		return segments[0].key

	return leitmotif.scales.DEFAULT_KEY
