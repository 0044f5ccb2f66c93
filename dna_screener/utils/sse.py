# dna_screener/utils/sse.py

"""
Server-sent-events framing for pipeline events.

One JSON object per ``data:`` line, each frame terminated by a blank
line, and a ``[DONE]`` sentinel after the terminal event.
"""

import json
from typing import AsyncIterable, AsyncIterator

from dna_screener.models.outputs import TERMINAL_EVENT_TYPES, SSEEvent

SSE_DONE = "data: [DONE]\n\n"


def format_sse(event: SSEEvent) -> str:
    """Frame a single event."""
    return f"data: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"


async def sse_stream(events: AsyncIterable[SSEEvent]) -> AsyncIterator[str]:
    """Frame an event stream up to its terminal event, then the sentinel."""
    async for event in events:
        yield format_sse(event)
        if event.type in TERMINAL_EVENT_TYPES:
            break
    yield SSE_DONE
