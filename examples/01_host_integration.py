"""Example: wiring withvibes into a host agent runtime.

Run with ZEP_API_KEY set to store messages in Zep Cloud. Without it the
memory layer is a no-op and only skills found under ./.opencode/skills are
available.
"""

import asyncio
from pathlib import Path

from withvibes.plugin import WithvibesPlugin


class ConsoleSession:
    """Host session that prints injected messages."""

    async def inject(self, text: str, *, no_reply: bool = True) -> None:
        print(f"[injected, no_reply={no_reply}]\n{text}\n")


async def main():
    session = ConsoleSession()
    plugin = await WithvibesPlugin.start(Path.cwd(), session=session)

    print("Tools:", ", ".join(sorted(plugin.tools)) or "(none)")

    # The host calls this after every message it produces
    await plugin.on_message("user", [{"type": "text", "text": "I prefer tabs over spaces."}])
    await plugin.on_message("assistant", [{"type": "text", "text": "Noted, tabs it is."}])

    if plugin.memory_enabled:
        print(await plugin.tools["remember"].execute(fact="The user prefers tabs"))
        print(await plugin.tools["recall"].execute(query="indentation preference"))

    for bundle in plugin.skills:
        print(await plugin.invoke_skill(bundle.name))

    # Before exit: flush queued writes
    await plugin.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
