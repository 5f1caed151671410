#!/usr/bin/env python3
"""
VoiceTrace - Speaker diarization for timed transcripts

Reads Whisper-style transcript JSON (segments with start/end and optional
word timings) and labels every span with a speaker. With --audio, speakers
are told apart from per-word audio windows; otherwise timing and recognizer
confidence serve as voice proxies.

Usage:
    voicetrace diarize transcript.json -o dialogue.md
    voicetrace diarize transcript.json --audio meeting.wav -l es
    voicetrace diarize transcript.json --strategy segment single --json
    voicetrace languages
    voicetrace info
"""

import argparse
import json
import logging
import sys
import time
import warnings
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import colorama

from . import config
from .labels import DEFAULT_CATALOG, get_labels
from .pipeline.audio import open_audio
from .pipeline.diarization import DiarizationOutcome, Diarizer
from .pipeline.spans import parse_segments
from .transcript import format_dialogue, speaker_summary

# Enable ANSI colors on Windows
colorama.just_fix_windows_console()

# === Colors ===
C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_GREEN = "\033[92m"
C_CYAN = "\033[96m"
C_YELLOW = "\033[93m"
C_RED = "\033[91m"
C_MAGENTA = "\033[95m"

logger = logging.getLogger(__name__)


def setup_logging() -> Path:
    """Log everything to a timestamped file, errors to the console."""
    config.ensure_dirs()
    log_file = config.LOGS_DIR / f"{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))

    logging.basicConfig(level=logging.DEBUG, handlers=[file_handler, console_handler], force=True)
    logging.captureWarnings(True)
    warnings.filterwarnings("default")
    return log_file


# === Helpers ===


def _format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as human-readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.1f}s"


@contextmanager
def step(num: int, total: int, desc: str, emoji: str = "🔄"):
    """Context manager that prints step header and elapsed time on completion."""
    print(f"\n{C_CYAN}[{num}/{total}]{C_RESET} {emoji}  {C_BOLD}{desc}{C_RESET}")
    t = time.time()
    yield
    elapsed = time.time() - t
    print(f"  {C_GREEN}✅ Done {C_DIM}({_format_elapsed(elapsed)}){C_RESET}")


def ok(msg: str) -> None:
    """Print a success sub-status line."""
    print(f"  {C_GREEN}✔{C_RESET}  {msg}")


def warn(msg: str) -> None:
    """Print a warning sub-status line."""
    print(f"  {C_YELLOW}⚠️{C_RESET}  {msg}")


def info(msg: str) -> None:
    """Print an info sub-status line."""
    print(f"  {C_DIM}→{C_RESET}  {msg}")


def outcome_to_dict(outcome: DiarizationOutcome, language: str) -> dict:
    """JSON-ready view of a diarization outcome."""
    return {
        "strategy": outcome.strategy,
        "cancelled": outcome.cancelled,
        "num_speakers": outcome.num_speakers,
        "summary": speaker_summary(outcome.spans, language),
        "spans": [
            {
                "text": s.text,
                "start": s.start,
                "end": s.end,
                "speaker_id": s.speaker_id,
                "speaker": s.label,
                "confidence": round(s.confidence, 4),
            }
            for s in outcome.spans
        ],
    }


def load_transcript(path: Path):
    """Read and parse a transcript JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Transcript not found: {path}")
    with open(path, encoding="utf-8") as f:
        return parse_segments(json.load(f))


# === Commands ===


def cmd_diarize(args):
    """Label transcript spans with speakers and write the dialogue."""
    transcript_path = Path(args.transcript)
    diar_config = config.DiarizationConfig(
        language=args.language,
        workers=args.workers,
        show_progress=not args.json,
    )
    if args.strategy:
        diar_config = diar_config.with_overrides(strategies=tuple(args.strategy))

    if args.json:
        spans = load_transcript(transcript_path)
        audio = open_audio(Path(args.audio), diar_config.sample_rate) if args.audio else None
        outcome = Diarizer(diar_config, audio=audio).diarize(spans)
        payload = json.dumps(outcome_to_dict(outcome, args.language), ensure_ascii=False, indent=2)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
        else:
            print(payload)
        return

    print(f"\n{C_MAGENTA}{'═' * 60}{C_RESET}")
    print(f"  🎙️  {C_BOLD}VoiceTrace{C_RESET}")
    print(f"{C_MAGENTA}{'═' * 60}{C_RESET}")
    print(f"  📄 Transcript: {C_BOLD}{transcript_path.name}{C_RESET}")
    if args.audio:
        print(f"  🔊 Audio:      {C_BOLD}{Path(args.audio).name}{C_RESET}")
    print(f"  🌐 Language:   {C_CYAN}{args.language}{C_RESET}")
    print(f"  🧭 Strategies: {C_CYAN}{' → '.join(diar_config.strategies)}{C_RESET}")
    print(f"{C_MAGENTA}{'═' * 60}{C_RESET}")

    total_start = time.time()

    with step(1, 3, "Loading inputs", "📥"):
        spans = load_transcript(transcript_path)
        ok(f"{len(spans)} segments")
        audio = None
        if args.audio:
            audio = open_audio(Path(args.audio), diar_config.sample_rate)
            ok(f"Audio loaded ({_format_elapsed(audio.duration)})")
        elif "word" in diar_config.strategies:
            info("No audio given, word-level analysis will be skipped")

    with step(2, 3, "Diarization", "👥"):
        outcome = Diarizer(diar_config, audio=audio).diarize(spans)
        if not outcome.ok:
            warn(f"Nothing to label ({outcome.reason})")
        else:
            ok(f"Strategy: {outcome.strategy}")
            ok(speaker_summary(outcome.spans, args.language))

    with step(3, 3, "Writing output", "💾"):
        dialogue = format_dialogue(outcome.spans, args.language)
        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(dialogue, encoding="utf-8")
            ok(f"{len(outcome.spans)} spans written")
        else:
            print()
            print(dialogue)

    total_elapsed = time.time() - total_start
    print(f"\n{C_GREEN}{'═' * 60}{C_RESET}")
    elapsed_str = _format_elapsed(total_elapsed)
    print(f"  🎉 {C_GREEN}{C_BOLD}Done!{C_RESET} {C_DIM}({elapsed_str}){C_RESET}")
    if args.output:
        print(f"  📄 Output: {args.output}")
    print(f"  📊 Total: {len(outcome.spans)} spans, {outcome.num_speakers} speaker(s)")
    print(f"{C_GREEN}{'═' * 60}{C_RESET}\n")


def cmd_languages(args):
    """List languages with localized speaker labels."""
    print(f"\n  🌐 {C_BOLD}Supported languages{C_RESET}\n")
    for code in DEFAULT_CATALOG.languages():
        labels = get_labels(code)
        print(f"  {C_CYAN}{code:<4}{C_RESET} {labels.speaker} 1  {C_DIM}({labels.rate}, {labels.rate_unit}){C_RESET}")
    print()


def cmd_info(args):
    """Show data directories and configuration."""
    defaults = config.DiarizationConfig()
    print(f"\n{C_MAGENTA}{'═' * 60}{C_RESET}")
    print(f"  ℹ️  {C_BOLD}VoiceTrace Configuration{C_RESET}")
    print(f"{C_MAGENTA}{'═' * 60}{C_RESET}\n")
    print(f"  📂 Data:       {C_DIM}{config.DATA_DIR}{C_RESET}")
    print(f"  📦 Cache:      {C_DIM}{config.CACHE_DIR}{C_RESET}")
    print(f"  📋 Logs:       {C_DIM}{config.LOGS_DIR}{C_RESET}")
    print(f"\n  🧭 Strategies:  {C_CYAN}{' → '.join(defaults.strategies)}{C_RESET}")
    print(f"  🎚️  Sample rate: {C_CYAN}{defaults.sample_rate} Hz{C_RESET}")
    for preset in (defaults.word, defaults.enhanced, defaults.segment):
        print(
            f"  {preset.name:<9} {C_DIM}{preset.mode}, match {preset.match_threshold:.2f}, "
            f"merge {preset.merge_threshold:.2f}{C_RESET}"
        )
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VoiceTrace - Speaker diarization for timed transcripts"
    )
    subs = parser.add_subparsers(dest="command", required=True)

    # diarize
    p = subs.add_parser("diarize", help="Label transcript segments with speakers")
    p.add_argument("transcript", help="Transcript JSON (Whisper-style segments)")
    p.add_argument("--audio", default=None, help="Recording for word-level analysis")
    p.add_argument("-l", "--language", default=config.DEFAULT_LANGUAGE, help="Label language")
    p.add_argument("-o", "--output", default=None, help="Output path (stdout if omitted)")
    p.add_argument(
        "--strategy",
        nargs="+",
        choices=config.STRATEGIES,
        default=None,
        help="Strategies to try, in order",
    )
    p.add_argument("--workers", type=int, default=1, help="Feature extraction threads")
    p.add_argument("--json", action="store_true", help="Write JSON instead of Markdown")
    p.set_defaults(func=cmd_diarize)

    # languages
    p = subs.add_parser("languages", help="List supported label languages")
    p.set_defaults(func=cmd_languages)

    # info
    p = subs.add_parser("info", help="Show configuration and data directories")
    p.set_defaults(func=cmd_info)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    try:
        args.func(args)
    except Exception as e:
        logger.debug("Command %r failed", args.command, exc_info=True)
        print(f"\n  {C_RED}❌ Error:{C_RESET} {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
