"""Minimal demonstration of the chat session with the simulated reply source."""

import asyncio

from chat_core import ChatSession
from chat_core.providers.simulated_client import SimulatedReplySource


async def main() -> None:
    session = ChatSession(reply_source=SimulatedReplySource(delay=0.2))
    session.set_display_name("Alice")
    for text in ["こんにちは", "   ", "元気ですか？"]:
        await session.send(text)
    for m in session.snapshot().messages:
        print(f"[{m.time}] {m.author}: {m.text}")


if __name__ == "__main__":
    asyncio.run(main())
