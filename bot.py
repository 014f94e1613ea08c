import asyncio
import os
import sys

import discord
import httpx
from config.loader import ConfigError
from config.loader import load_config
from misc.runtime_deps import SharedState
from misc.runtime_wiring import wire_bot_runtime
from state.persistent import StateError
from state.persistent import load_persistent_state


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True
    intents.voice_states = True
    intents.reactions = True
    return intents


async def run_bot(client: discord.Client, token: str, *, shared: SharedState, http: httpx.AsyncClient) -> None:
    """Wire the plugin chain, then stay connected until the client closes. Closes `http` on the way out."""
    async with http:
        wire_bot_runtime(client, shared=shared, http=http)
        async with client:
            await client.start(token)


def main() -> None:
    # =========================
    # CONFIG + STATE
    # =========================
    try:
        cfg = load_config()
    except ConfigError as e:
        print(f"[CFG] {e}", file=sys.stderr)
        raise SystemExit(1) from e

    token = os.getenv("DISCORD_TOKEN") or cfg.general.discord_token
    if not token:
        raise RuntimeError("Missing DISCORD_TOKEN env var and general.discord_token in config")

    try:
        pstate = load_persistent_state()
    except StateError as e:
        print(f"[State] {e}", file=sys.stderr)
        raise SystemExit(1) from e

    print(f"[CFG] loaded {cfg.source_path} (prefix={cfg.general.command_prefix!r})")
    print(f"[State] loaded {pstate.path} ({len(pstate.vc_notify_followers)} vc-notify followers)")

    # =========================
    # DISCORD CLIENT
    # =========================
    client = discord.Client(intents=build_intents())
    # No timeout: local models can take minutes to answer.
    http = httpx.AsyncClient(timeout=None)
    discord.utils.setup_logging()

    try:
        asyncio.run(run_bot(client, token, shared=SharedState(cfg, pstate), http=http))
    except KeyboardInterrupt:
        print("[Boot] interrupted; shutting down")


if __name__ == "__main__":
    main()
