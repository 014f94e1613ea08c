from __future__ import annotations

from misc.events_runtime import register_runtime_events
from misc.runtime_deps import RuntimeDeps
from misc.runtime_deps import SharedState
from plugins.registry import plugins as default_plugins


def wire_bot_runtime(
    client,
    *,
    shared: SharedState,
    http,
    plugins=None,
) -> RuntimeDeps:
    deps = RuntimeDeps(
        shared=shared,
        http=http,
        plugins=list(plugins) if plugins is not None else default_plugins(),
    )
    register_runtime_events(client, deps=deps)
    print(f"[Boot] plugin chain: {', '.join(p.name for p in deps.plugins)}")
    return deps
