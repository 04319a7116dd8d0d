"""Streaming transform for NDJSON responses."""

import json
from collections.abc import AsyncIterator
from typing import Any

from rag_gateway.llm.streaming import UpstreamStream


def encode_ndjson_line(payload: dict[str, Any]) -> bytes:
    return (json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n").encode("utf-8")


async def append_trailer(
    upstream: UpstreamStream,
    trailer: dict[str, Any] | None = None,
) -> AsyncIterator[bytes]:
    """Forward upstream chunks verbatim, then emit `trailer` as one last line.

    Upstream errors propagate to the consumer. The upstream response is
    closed on every exit path, including the consumer going away.

    Args:
        upstream: Open upstream stream.
        trailer: JSON object appended after upstream EOF, if any.

    Yields:
        Byte chunks for the downstream response.
    """
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
        if trailer is not None:
            yield encode_ndjson_line(trailer)
    finally:
        await upstream.aclose()
