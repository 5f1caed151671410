"""Diarization service: adapts API requests to the pipeline."""

import logging

from voicetrace import config
from voicetrace.pipeline.diarization import Diarizer
from voicetrace.pipeline.spans import parse_segments
from voicetrace.transcript import format_dialogue, speaker_summary

from ..models import DiarizeRequest, DiarizeResponse, LabeledSegmentOut

logger = logging.getLogger(__name__)


def build_config(request: DiarizeRequest) -> config.DiarizationConfig:
    """Run configuration for a request.

    Raises:
        ValueError: If a strategy name is unknown.
    """
    diar_config = config.DiarizationConfig(language=request.language, workers=request.workers)
    if request.strategies:
        diar_config = diar_config.with_overrides(strategies=tuple(request.strategies))
    return diar_config


def diarize_request(request: DiarizeRequest) -> DiarizeResponse:
    """Label the request's segments with speakers.

    Raises:
        MalformedInputError: If segment timing is invalid.
        ValueError: If the configuration is invalid.
    """
    diar_config = build_config(request)
    spans = parse_segments([segment.model_dump() for segment in request.segments])
    outcome = Diarizer(diar_config).diarize(spans)
    logger.info(
        "Diarized %d segments via %r: %d speaker(s)",
        len(spans),
        outcome.strategy,
        outcome.num_speakers,
    )

    return DiarizeResponse(
        strategy=outcome.strategy,
        cancelled=outcome.cancelled,
        num_speakers=outcome.num_speakers,
        summary=speaker_summary(outcome.spans, request.language),
        dialogue=format_dialogue(outcome.spans, request.language),
        segments=[
            LabeledSegmentOut(
                text=s.text,
                start=s.start,
                end=s.end,
                speaker_id=s.speaker_id,
                speaker=s.label,
                confidence=s.confidence,
            )
            for s in outcome.spans
        ],
    )
