"""Encoder configuration.

Settings are grouped in three sections, mirrored in YAML:

```yaml
key:
  window_size: 16
  min_delta: 0.05
motifs:
  min_length: 3
  max_length: 12
  transformations: [exact, retrograde, inversion, retrograde-inversion]
compression:
  min_confidence: 0.8
  exact_matches_only: true
  motifs_disabled: false
```

Any key left out takes its default.
"""

import dataclasses
import logging
import os
import typing

import yaml

import leitmotif.constants
import leitmotif.matcher


logger = logging.getLogger(__name__)


def _check_fraction (name: str, value: float) -> None:

	if not 0.0 <= value <= 1.0:
		raise ValueError(f"{name} must be between 0 and 1, got {value!r}")


@dataclasses.dataclass
class KeyConfig:

	window_size: int = leitmotif.constants.KEY_WINDOW_SIZE
	stride: typing.Optional[int] = None
	min_confidence: float = 0.0
	min_delta: float = leitmotif.constants.KEY_MIN_DELTA
	high_confidence: float = leitmotif.constants.KEY_HIGH_CONFIDENCE

	def __post_init__ (self) -> None:

		if self.window_size <= 0:
			raise ValueError("key.window_size must be positive")

		if self.stride is not None and self.stride <= 0:
			raise ValueError("key.stride must be positive")

		_check_fraction("key.min_confidence", self.min_confidence)
		_check_fraction("key.high_confidence", self.high_confidence)

	def estimator_options (self) -> typing.Dict[str, typing.Any]:

		"""Return the keyword arguments for `leitmotif.key_estimator.estimate`."""

		return dataclasses.asdict(self)


@dataclasses.dataclass
class MotifConfig:

	min_length: int = leitmotif.constants.MOTIF_MIN_LENGTH
	max_length: int = leitmotif.constants.MOTIF_MAX_LENGTH
	similarity_threshold: float = leitmotif.constants.MOTIF_SIMILARITY_THRESHOLD
	transformations: typing.List[str] = dataclasses.field(
		default_factory=lambda: [transformation.value for transformation in leitmotif.matcher.Transformation]
	)
	allow_time_dilation: bool = True
	max_candidates: int = leitmotif.constants.MOTIF_MAX_CANDIDATES
	max_positions: int = leitmotif.constants.MOTIF_MAX_POSITIONS
	exhaustive_exact_search: bool = True

	def __post_init__ (self) -> None:

		if self.min_length < 2:
			raise ValueError("motifs.min_length must be at least 2")

		if self.max_length < self.min_length:
			raise ValueError("motifs.max_length must not be below motifs.min_length")

		_check_fraction("motifs.similarity_threshold", self.similarity_threshold)

		if self.max_candidates < 0 or self.max_positions < 0:
			raise ValueError("motifs.max_candidates and motifs.max_positions must not be negative")

		# Raises ValueError for unknown names.
		self.transformation_kinds()

	def transformation_kinds (self) -> typing.Tuple[leitmotif.matcher.Transformation, ...]:
		return tuple(leitmotif.matcher.Transformation(name) for name in self.transformations)


@dataclasses.dataclass
class CompressionConfig:

	min_confidence: float = leitmotif.constants.COMPRESSION_MIN_CONFIDENCE
	min_occurrences: int = leitmotif.constants.COMPRESSION_MIN_OCCURRENCES
	max_compression_ratio: float = leitmotif.constants.COMPRESSION_MAX_RATIO
	exact_matches_only: bool = True
	motifs_disabled: bool = False

	def __post_init__ (self) -> None:

		_check_fraction("compression.min_confidence", self.min_confidence)
		_check_fraction("compression.max_compression_ratio", self.max_compression_ratio)

		if self.min_occurrences < 1:
			raise ValueError("compression.min_occurrences must be at least 1")


@dataclasses.dataclass
class CodecConfig:

	"""
	Every tunable of an encode pass.

	Example:
		```python
		config = CodecConfig()
		config.compression.motifs_disabled = True

		config = load_config("leitmotif.yaml")
		```
	"""

	key: KeyConfig = dataclasses.field(default_factory=KeyConfig)
	motifs: MotifConfig = dataclasses.field(default_factory=MotifConfig)
	compression: CompressionConfig = dataclasses.field(default_factory=CompressionConfig)

	@classmethod
	def from_dict (cls, data: typing.Optional[typing.Dict[str, typing.Any]]) -> "CodecConfig":

		"""
		Build a configuration from nested section dicts.

		Unknown sections and keys are logged and ignored.

		Raises:
			ValueError: If a section is not a mapping or a value is invalid.
		"""

		data = data or {}

		if not isinstance(data, dict):
			raise ValueError("Configuration must be a mapping of sections")

		sections: typing.Dict[str, typing.Any] = {}

		for name, section_type in (("key", KeyConfig), ("motifs", MotifConfig), ("compression", CompressionConfig)):

			values = data.get(name) or {}

			if not isinstance(values, dict):
				raise ValueError(f"Configuration section {name!r} must be a mapping")

			known = {field.name for field in dataclasses.fields(section_type)}

			for unknown in sorted(set(values) - known):
				logger.warning(f"Ignoring unknown setting {name}.{unknown}")

			sections[name] = section_type(**{k: v for k, v in values.items() if k in known})

		for unknown in sorted(set(data) - set(sections)):
			logger.warning(f"Ignoring unknown configuration section {unknown!r}")

		return cls(**sections)

	def to_dict (self) -> typing.Dict[str, typing.Any]:
		return dataclasses.asdict(self)


def load_config (config_path: str = "leitmotif.yaml") -> CodecConfig:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: the defaults are returned with a warning.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return CodecConfig()

	with open(config_path, "r") as f:
		return CodecConfig.from_dict(yaml.safe_load(f))


def dump_config (config: CodecConfig, config_path: typing.Optional[str] = None) -> str:

	"""Render a configuration as YAML, writing it to ``config_path`` when given."""

	text = yaml.safe_dump(config.to_dict(), sort_keys=False)

	if config_path is not None:
		with open(config_path, "w") as f:
			f.write(text)

	return text
