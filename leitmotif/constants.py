"""Constants for leitmotif.

Pitch numbers follow the MIDI convention **C4 = 60** (Middle C).
The encoder defaults below are the values used when no configuration file
is given.  They are mirrored by :class:`leitmotif.config.CodecConfig`.
"""

# Standard MIDI file defaults

DEFAULT_PPQ = 480
DEFAULT_TEMPO = 120

MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127
MIDI_VELOCITY_MAX = 127

# Key estimation

KEY_WINDOW_SIZE = 16
KEY_MIN_DELTA = 0.05
KEY_HIGH_CONFIDENCE = 0.85

# Motif search

MOTIF_MIN_LENGTH = 3
MOTIF_MAX_LENGTH = 12
MOTIF_MIN_RESOLVED_FRACTION = 0.7
MOTIF_SIMILARITY_THRESHOLD = 0.6
MOTIF_PITCH_TOLERANCE = 0.5
MOTIF_RHYTHM_TOLERANCE = 0.1
MOTIF_MAX_CANDIDATES = 50
MOTIF_MAX_POSITIONS = 100

# Compression

COMPRESSION_MIN_CONFIDENCE = 0.8
COMPRESSION_MIN_OCCURRENCES = 1
COMPRESSION_MAX_RATIO = 1.0
