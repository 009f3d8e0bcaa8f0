"""FastAPI service for reply drafting.

Endpoints:
- GET /health
- GET /status
- POST /warmup
- POST /reply  { "incoming": "...", "context": "...", "tone": "friendly", ... }
"""
from __future__ import annotations
import asyncio
import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from reply_agent.common.config import load_settings
from reply_agent.common.errors import InputInvalid
from reply_agent.common.logging_setup import setup_logging
from reply_agent.common.schema import Length, ReplyRequest, Tone
from reply_agent.gateway import build_gateway
from reply_agent.pipeline.reply import draft_reply, warm_up

LOGGER = logging.getLogger("reply_agent.serve.app")

SETTINGS = load_settings()
setup_logging(SETTINGS.log_level)
GATEWAY = build_gateway(SETTINGS)

MODEL_STATUS = {"text": "Model not loaded yet"}


class ReplyIn(BaseModel):
    incoming: str
    context: str = ""
    tone: Tone = Tone.FRIENDLY
    length: Length = Length.SHORT
    language: str = "auto"


class ReplyOut(BaseModel):
    text: str
    used_fallback: bool
    status: str
    share_url: str | None = None


class StatusOut(BaseModel):
    status: str


app = FastAPI(title="Reply Agent")


async def _delayed_warm_up(delay: float) -> None:
    await asyncio.sleep(delay)
    MODEL_STATUS["text"] = "Loading model (downloads weights on first run)..."
    MODEL_STATUS["text"] = await warm_up(GATEWAY, timeout=SETTINGS.request_timeout)


@app.on_event("startup")
async def _schedule_warm_up() -> None:
    """Warm the backend in the background so startup is not blocked."""
    app.state.warm_up_task = asyncio.create_task(_delayed_warm_up(SETTINGS.warmup_delay))


@app.get("/health")
def health() -> dict[str, str]:
    return {
        "status": "ok",
        "backend": SETTINGS.backend,
        "model": str(getattr(GATEWAY, "model", "")),
    }


@app.get("/status", response_model=StatusOut)
def status() -> StatusOut:
    return StatusOut(status=MODEL_STATUS["text"])


@app.post("/warmup", response_model=StatusOut)
async def warmup() -> StatusOut:
    MODEL_STATUS["text"] = await warm_up(GATEWAY, timeout=SETTINGS.request_timeout)
    return StatusOut(status=MODEL_STATUS["text"])


@app.post("/reply", response_model=ReplyOut)
async def reply(body: ReplyIn) -> ReplyOut:
    request = ReplyRequest(
        incoming=body.incoming,
        context=body.context,
        tone=body.tone,
        length=body.length,
        language=body.language,
    )
    try:
        result = await draft_reply(
            request,
            GATEWAY,
            temperature=SETTINGS.temperature,
            top_p=SETTINGS.top_p,
            timeout=SETTINGS.request_timeout,
        )
    except InputInvalid as e:
        raise HTTPException(status_code=422, detail=str(e))

    if result.used_fallback:
        LOGGER.info("Served fallback reply: %s", result.status)
    return ReplyOut(
        text=result.text,
        used_fallback=result.used_fallback,
        status=result.status,
        share_url=result.share_url,
    )


def main() -> None:
    import uvicorn

    uvicorn.run("reply_agent.serve.fastapi_app:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
