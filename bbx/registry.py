"""
bbx/registry.py - Deploy script discovery and ordering

Deploy scripts live in bbx/deploy/ and register themselves on import. Each
script has tags (for `bbx deploy --tags`) and dependencies (tags that must run
first). Scripts run in registration order, except that a script's
dependencies always run before it.
"""

import importlib
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class DeployScript:
    name: str
    func: Callable  # func(env) -> None
    tags: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    skip: Callable | None = None  # skip(env) -> bool

    def should_skip(self, env) -> bool:
        return bool(self.skip and self.skip(env))


class ScriptNotFoundError(KeyError):
    """Raised when a tag matches no registered deploy script."""


# ============================================================================
# Registry State
# ============================================================================

_scripts: dict[str, DeployScript] = {}
_loaded: bool = False

DEPLOY_PACKAGE = "bbx.deploy"


# ============================================================================
# Public API
# ============================================================================


def register(
    name: str,
    func: Callable,
    tags: list[str] | None = None,
    dependencies: list[str] | None = None,
    skip: Callable | None = None,
) -> DeployScript:
    """Register a deploy script. Re-registering a name replaces it in place."""
    script = DeployScript(
        name=name,
        func=func,
        tags=list(tags or []),
        dependencies=list(dependencies or []),
        skip=skip,
    )
    _scripts[name] = script
    return script


def list_scripts() -> list[DeployScript]:
    _ensure_loaded()
    return list(_scripts.values())


def resolve(tags: list[str] | None = None) -> list[DeployScript]:
    """Scripts to run for tags (all scripts when tags is empty), in order.

    Raises:
        ScriptNotFoundError: a requested tag or dependency matches nothing
    """
    _ensure_loaded()
    if not tags:
        return _order(list(_scripts.values()))

    selected: set[str] = set()
    pending = list(tags)
    seen_tags: set[str] = set()
    while pending:
        tag = pending.pop()
        if tag in seen_tags:
            continue
        seen_tags.add(tag)

        matches = [s for s in _scripts.values() if tag in s.tags]
        if not matches:
            available = ", ".join(sorted({t for s in _scripts.values() for t in s.tags}))
            raise ScriptNotFoundError(f"No deploy script tagged {tag!r}. Available: {available}")
        for script in matches:
            selected.add(script.name)
            pending.extend(script.dependencies)

    return _order([s for s in _scripts.values() if s.name in selected])


def reset() -> None:
    """Clear all state. Intended for tests only."""
    global _loaded
    _scripts.clear()
    _loaded = False


# ============================================================================
# Internal
# ============================================================================


def _order(scripts: list[DeployScript]) -> list[DeployScript]:
    """Registration order, except that dependencies always come first."""
    by_tag: dict[str, list[DeployScript]] = {}
    for script in scripts:
        for tag in script.tags:
            by_tag.setdefault(tag, []).append(script)

    ordered: list[DeployScript] = []
    placed: set[str] = set()

    def visit(script: DeployScript, stack: tuple[str, ...]) -> None:
        if script.name in placed:
            return
        if script.name in stack:
            raise ValueError(f"Deploy script dependency cycle: {' -> '.join(stack + (script.name,))}")
        for dep in script.dependencies:
            for dependency in by_tag.get(dep, []):
                visit(dependency, stack + (script.name,))
        placed.add(script.name)
        ordered.append(script)

    for script in scripts:
        visit(script, ())
    return ordered


def _ensure_loaded() -> None:
    """Import the bundled deploy scripts on first access."""
    global _loaded
    if _loaded:
        return
    _loaded = True
    package = importlib.import_module(DEPLOY_PACKAGE)
    for script_module in package.SCRIPT_MODULES:
        qualified = f"{DEPLOY_PACKAGE}.{script_module}"
        if qualified in sys.modules:
            # Already imported before a reset(): run it again so it re-registers
            importlib.reload(sys.modules[qualified])
        else:
            importlib.import_module(qualified)
        logger.debug("Loaded deploy script module %s", qualified)
