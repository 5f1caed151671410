from __future__ import annotations

import json

import pytest

from voicetrace import cli


@pytest.fixture(autouse=True)
def no_log_files(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


@pytest.fixture
def transcript_file(tmp_path, alternating_spans):
    path = tmp_path / "meeting.json"
    payload = {
        "segments": [{"text": s.text, "start": s.start, "end": s.end} for s in alternating_spans]
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_diarize_writes_markdown(tmp_path, transcript_file) -> None:
    output = tmp_path / "out" / "dialogue.md"
    cli.main(["diarize", str(transcript_file), "-o", str(output), "-l", "es"])

    dialogue = output.read_text(encoding="utf-8")
    assert dialogue.startswith("**Hablante 1** [00:00]")
    assert "**Hablante 2** [00:06]" in dialogue


def test_diarize_json_to_stdout(transcript_file, capsys) -> None:
    cli.main(["diarize", str(transcript_file), "--json", "--strategy", "segment"])

    result = json.loads(capsys.readouterr().out)
    assert result["strategy"] == "segment"
    assert result["num_speakers"] == 2
    assert result["summary"] == "2 speakers detected: Speaker 1, Speaker 2"
    assert [s["speaker_id"] for s in result["spans"]] == [1, 2, 1, 2]


def test_missing_transcript_exits_with_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["diarize", str(tmp_path / "nope.json")])
    assert exc.value.code == 1
    assert "Transcript not found" in capsys.readouterr().err


def test_malformed_transcript_exits_with_error(tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([{"text": "hi", "start": 3, "end": 1}]), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        cli.main(["diarize", str(path)])
    assert exc.value.code == 1


def test_languages_lists_catalog(capsys) -> None:
    cli.main(["languages"])
    assert "Hablante" in capsys.readouterr().out


def test_format_elapsed() -> None:
    assert cli._format_elapsed(3.21) == "3.2s"
    assert cli._format_elapsed(125.0) == "2m 5.0s"
