"""Draft a single reply from the command line."""
from __future__ import annotations
import argparse
import asyncio
import logging

from reply_agent.common.config import load_settings
from reply_agent.common.logging_setup import setup_logging
from reply_agent.common.schema import Length, ReplyRequest, ReplyResult, Tone
from reply_agent.gateway import build_gateway
from reply_agent.pipeline.reply import draft_reply

LOGGER = logging.getLogger("reply_agent.cli")


def run(args: argparse.Namespace) -> ReplyResult:
    settings = load_settings(args.cfg)
    if args.backend:
        settings.backend = args.backend
    gateway = build_gateway(settings)
    request = ReplyRequest(
        incoming=args.incoming,
        context=args.context,
        tone=Tone(args.tone),
        length=Length(args.length),
        language=args.language,
    )
    return asyncio.run(
        draft_reply(
            request,
            gateway,
            temperature=settings.temperature,
            top_p=settings.top_p,
            timeout=settings.request_timeout,
        )
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Draft a WhatsApp reply")
    ap.add_argument("--incoming", required=True, help="Last incoming message")
    ap.add_argument("--context", default="", help="Earlier messages, one per line")
    ap.add_argument("--tone", default="friendly", choices=[t.value for t in Tone])
    ap.add_argument("--length", default="short", choices=[n.value for n in Length])
    ap.add_argument("--language", default="auto", help='"auto" or a language code')
    ap.add_argument("--backend", choices=["none", "http", "gguf"], help="Override configured backend")
    ap.add_argument("--cfg", default=None, help="YAML config path")
    return ap


def main() -> None:
    setup_logging()
    args = build_parser().parse_args()
    result = run(args)
    LOGGER.info("%s", result.status)
    print(result.text)
    if result.share_url:
        print(result.share_url)


if __name__ == "__main__":
    main()
