"""
Section Lifecycle Registry.

Section controllers register optional init/cleanup/refresh hooks by name.
A missing hook is a no-op. Hooks may be plain callables or coroutine
functions. Failures are contained here: init and refresh errors are reported
to the user, cleanup errors are only logged so a broken teardown never blocks
entering the next section.
"""

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Union

from dashboard.errors import RenderError
from dashboard.logging_config import logger


Hook = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class SectionHooks:
    init: Optional[Hook] = None
    cleanup: Optional[Hook] = None
    refresh: Optional[Hook] = None


class LifecycleRegistry:
    """Maps section names to their lifecycle hooks"""

    def __init__(self, notifier=None):
        self._notifier = notifier
        self._hooks: Dict[str, SectionHooks] = {}

    def register(
        self,
        section: str,
        init: Optional[Hook] = None,
        cleanup: Optional[Hook] = None,
        refresh: Optional[Hook] = None,
    ) -> SectionHooks:
        """Register hooks for a section; replaces any earlier registration"""
        hooks = SectionHooks(init=init, cleanup=cleanup, refresh=refresh)
        self._hooks[section] = hooks
        logger.debug(f"Registered lifecycle hooks for {section}")
        return hooks

    def get(self, section: str) -> Optional[SectionHooks]:
        return self._hooks.get(section)

    def __contains__(self, section: str) -> bool:
        return section in self._hooks

    async def init(self, section: str) -> bool:
        """Run the init hook; returns False if it raised"""
        return await self._run_reported(section, "init")

    async def refresh(self, section: str) -> bool:
        """Run the refresh hook; returns False if it raised"""
        return await self._run_reported(section, "refresh")

    async def cleanup(self, section: str) -> bool:
        """Run the cleanup hook; errors are logged and swallowed"""
        hook = self._lookup(section, "cleanup")
        if hook is None:
            return True
        try:
            await _call(hook)
            return True
        except Exception as e:
            logger.log_error_with_context(e, context=f"section-cleanup:{section}")
            return False

    def _lookup(self, section: str, phase: str) -> Optional[Hook]:
        hooks = self._hooks.get(section)
        if hooks is None:
            return None
        return getattr(hooks, phase)

    async def _run_reported(self, section: str, phase: str) -> bool:
        hook = self._lookup(section, phase)
        if hook is None:
            return True
        try:
            await _call(hook)
            return True
        except Exception as e:
            error = RenderError(section, e, phase=phase)
            if self._notifier is not None:
                self._notifier.report_error(f"section-{phase}", error)
            else:
                logger.log_error_with_context(error, context=f"section-{phase}:{section}")
            return False


async def _call(hook: Hook) -> None:
    result = hook()
    if inspect.isawaitable(result):
        await result
