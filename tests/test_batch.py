import json
import os
import typing

import pytest

import leitmotif.__main__
import leitmotif.batch
import leitmotif.midi_io

import conftest


MELODY = conftest.make_voice([60, 62, 64] * 3, duration=240)


@pytest.fixture
def midi_dir (tmp_path: typing.Any) -> str:

	"""A directory with two MIDI files, one broken file and one unrelated file."""

	directory = tmp_path / "midi"
	directory.mkdir()

	leitmotif.midi_io.write_midi(str(directory / "a.mid"), [MELODY])
	leitmotif.midi_io.write_midi(str(directory / "b.midi"), [MELODY[:4]], tempo=140)
	(directory / "bad.mid").write_bytes(b"not a midi file at all")
	(directory / "notes.txt").write_text("ignored")

	return str(directory)


class TestBatch:

	"""
	Tests for directory encoding and decoding.
	"""

	def test_encode_directory (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""Good files are encoded, the broken one is counted as failed."""

		output = str(tmp_path / "json")
		result = leitmotif.batch.encode_directory(midi_dir, output)

		assert result.processed == ["a.mid", "b.midi"]
		assert result.failed == ["bad.mid"]
		assert result.summary() == "2 processed, 0 skipped, 1 failed"
		assert sorted(os.listdir(output)) == ["a.json", "b.json"]


	def test_decode_directory (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""Encoded documents decode back to the original notes."""

		documents = str(tmp_path / "json")
		rebuilt = str(tmp_path / "rebuilt")

		leitmotif.batch.encode_directory(midi_dir, documents)
		result = leitmotif.batch.decode_directory(documents, rebuilt)

		assert result.processed == ["a.json", "b.json"]
		assert leitmotif.midi_io.read_midi(os.path.join(rebuilt, "a.mid")).tracks[0].notes == MELODY
		assert leitmotif.midi_io.read_midi(os.path.join(rebuilt, "b.mid")).tempo == 140


	def test_existing_outputs_are_skipped (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""Without overwriting, files whose output exists are left alone."""

		output = tmp_path / "json"
		output.mkdir()
		(output / "a.json").write_text("{}")

		result = leitmotif.batch.encode_directory(midi_dir, str(output), overwrite=False)

		assert result.skipped == ["a.mid"]
		assert result.processed == ["b.midi"]
		assert (output / "a.json").read_text() == "{}"


	def test_missing_directory (self, tmp_path: typing.Any) -> None:

		"""A missing input directory stops the batch."""

		with pytest.raises(NotADirectoryError):
			leitmotif.batch.encode_directory(str(tmp_path / "nowhere"), str(tmp_path / "out"))


	def test_empty_directory (self, tmp_path: typing.Any) -> None:

		"""A directory without matching files processes nothing."""

		result = leitmotif.batch.decode_directory(str(tmp_path), str(tmp_path / "out"))

		assert result.summary() == "0 processed, 0 skipped, 0 failed"


class TestCommandLine:

	"""
	Tests for the leitmotif command.
	"""

	def test_config_prints_yaml (self, capsys: pytest.CaptureFixture) -> None:

		"""The config command prints the effective settings."""

		assert leitmotif.__main__.main(["config"]) == 0
		assert capsys.readouterr().out.startswith("key:")


	def test_encode_and_decode (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""Encoding and decoding through the command line round-trips a file."""

		document = str(tmp_path / "a.json")
		rebuilt = str(tmp_path / "a.mid")

		assert leitmotif.__main__.main(["encode", os.path.join(midi_dir, "a.mid"), document]) == 0
		assert leitmotif.__main__.main(["decode", document, rebuilt]) == 0
		assert leitmotif.midi_io.read_midi(rebuilt).tracks[0].notes == MELODY


	def test_motifless (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""The motifless flag writes an empty motif library."""

		document = tmp_path / "a.json"

		assert leitmotif.__main__.main(["encode", "--motifless", os.path.join(midi_dir, "a.mid"), str(document)]) == 0

		data = json.loads(document.read_text())

		assert data["motifs"] == []
		assert data["motifsDisabled"] is True


	def test_config_file (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""Settings from a YAML file reach the encoder."""

		config = tmp_path / "leitmotif.yaml"
		config.write_text("compression:\n  motifs_disabled: true\n")
		document = tmp_path / "a.json"

		assert leitmotif.__main__.main(["--config", str(config), "encode", os.path.join(midi_dir, "a.mid"), str(document)]) == 0
		assert json.loads(document.read_text())["motifs"] == []


	def test_missing_input_fails (self, tmp_path: typing.Any) -> None:

		"""A missing input file gives exit status 1."""

		assert leitmotif.__main__.main(["decode", str(tmp_path / "missing.json"), str(tmp_path / "out.mid")]) == 1


	def test_batch_with_failures (self, midi_dir: str, tmp_path: typing.Any) -> None:

		"""A batch with a broken file gives exit status 1."""

		assert leitmotif.__main__.main(["batch", "encode", midi_dir, str(tmp_path / "out")]) == 1


	def test_report (self, midi_dir: str, capsys: pytest.CaptureFixture) -> None:

		"""The report summarises a MIDI file's compression."""

		assert leitmotif.__main__.main(["report", os.path.join(midi_dir, "a.mid")]) == 0

		out = capsys.readouterr().out

		assert "Key:        C major" in out
		assert "Notes:      9" in out
		assert "motif 0: 3 notes, used 3×" in out
