"""FastAPI application for the VoiceTrace API."""

from fastapi import FastAPI

from voicetrace import __version__

from .routes import diarize


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="VoiceTrace",
        description="Speaker diarization for timed transcripts",
        version=__version__,
    )

    app.include_router(diarize.router, prefix="/api", tags=["diarization"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the web server."""
    import uvicorn

    from voicetrace import config

    # Ensure directories exist
    config.ensure_dirs()

    app = create_app()
    print("\n  VoiceTrace API")
    print(f"  http://{host}:{port}/docs\n")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
