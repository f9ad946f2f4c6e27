
"""
Leitmotif - lossless, motif-aware compression of MIDI note sequences.

Leitmotif rewrites each monophonic voice of a piece as scale degrees
relative to an estimated key, finds melodic shapes that repeat (within a
voice or across voices, transposed or not) and stores each one once.
Repeats become short references; everything else stays a literal note.
Decoding is exact: every pitch, tick, duration and velocity comes back
unchanged, and the encoder checks that before it returns.

Pipeline:

- **Key estimation.** A sliding window scores every major and minor key
  by how many of the window's pitch classes it contains.  Windows with the
  same best key merge into segments; hysteresis keeps one altered tone
  from splitting a segment.
- **Diatonic codec.** Pure functions map a pitch to ``(degree, accidental,
  octave)`` in a key and back.  Degrees are signed and unbounded, and all
  degree arithmetic is floored, so descending motifs land in the right
  octave.
- **Motif extraction and matching.** Every run of 3 to 12 notes becomes a
  candidate described by its scale-step intervals and rhythm.  Candidates
  are compared with every other run under exact, retrograde, inversion and
  retrograde-inversion transformations, with optional tempo dilation.
- **Compression.** Well-supported motifs are verified occurrence by
  occurrence, then chosen greedily by the notes they save without
  overlapping.

Minimal example:

    ```python
    import leitmotif

    voice = [leitmotif.Note(pitch, start, 240) for pitch, start in ((60, 0), (62, 240), (64, 480))]
    document = leitmotif.encode([voice], ppq=480, tempo=120)

    print(document.to_json())
    assert leitmotif.decode(document).voices == [voice]
    ```

Command line: ``python -m leitmotif encode song.mid song.json`` (also
``decode``, ``batch``, ``report`` and ``config``).

Package-level exports: ``Note``, ``KeyContext``, ``CodecConfig``,
``CompressedDocument``, ``encode``, ``decode``, ``load_config``.
"""

import leitmotif.codec
import leitmotif.config
import leitmotif.notes
import leitmotif.scales


Note = leitmotif.notes.Note
KeyContext = leitmotif.scales.KeyContext
CodecConfig = leitmotif.config.CodecConfig
CompressedDocument = leitmotif.codec.CompressedDocument
encode = leitmotif.codec.encode
decode = leitmotif.codec.decode
load_config = leitmotif.config.load_config
