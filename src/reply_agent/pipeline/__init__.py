"""Reply pipeline: normalizer, fallback composer and orchestration."""
from reply_agent.pipeline.fallback import compose_fallback
from reply_agent.pipeline.normalize import normalize
from reply_agent.pipeline.reply import draft_reply, warm_up

__all__ = ["compose_fallback", "normalize", "draft_reply", "warm_up"]
