"""Diarization routes."""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from voicetrace.labels import DEFAULT_CATALOG, get_labels
from voicetrace.pipeline.spans import MalformedInputError

from ..models import DiarizeRequest, DiarizeResponse, LanguageInfo
from ..services.diarization import diarize_request

router = APIRouter()


@router.post("/diarize", response_model=DiarizeResponse)
def diarize(request: DiarizeRequest):
    """Label transcript segments with speakers."""
    try:
        return diarize_request(request)
    except MalformedInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/languages", response_model=list[LanguageInfo])
async def list_languages():
    """List languages with localized speaker labels."""
    return [
        LanguageInfo(code=code, **asdict(get_labels(code)))
        for code in DEFAULT_CATALOG.languages()
    ]
