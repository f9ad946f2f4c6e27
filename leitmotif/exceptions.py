"""Error kinds raised by the codec.

Anything that would break the exact round-trip guarantee is raised as one of
these.  Weak key estimates and low-confidence motif matches are not errors:
they only lead to more literal notes and less compression.
"""


class LeitmotifError (Exception):
	pass


class MalformedInputError (LeitmotifError, ValueError):

	"""A note stream or compressed document violates ordering or range invariants."""


class UnresolvableDiatonicPositionError (LeitmotifError, ValueError):

	"""A pitch cannot be mapped to a scale degree within the accidental tolerance."""


class RoundTripViolationError (LeitmotifError):

	"""Expanding encoded data did not reproduce the original notes exactly."""
