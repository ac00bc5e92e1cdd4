"""
Unit Tests for the Section Lifecycle Registry
Tests for: registration, sync/async hooks, fault isolation
"""
import pytest

from dashboard.errors import RenderError
from dashboard.lifecycle import LifecycleRegistry


class TestRegistration:
    """Test hook registration"""

    def test_register_and_get(self, registry):
        init = lambda: None
        registry.register("complaints", init=init)

        hooks = registry.get("complaints")
        assert hooks.init is init
        assert hooks.cleanup is None
        assert "complaints" in registry

    def test_register_replaces_previous(self, registry):
        registry.register("users", init=lambda: None, cleanup=lambda: None)
        registry.register("users", refresh=lambda: None)

        hooks = registry.get("users")
        assert hooks.init is None
        assert hooks.cleanup is None
        assert hooks.refresh is not None

    @pytest.mark.asyncio
    async def test_unregistered_section_is_noop(self, registry, toasts):
        assert await registry.init("settings") is True
        assert await registry.refresh("settings") is True
        assert await registry.cleanup("settings") is True
        assert toasts == []

    @pytest.mark.asyncio
    async def test_missing_hook_is_noop(self, registry):
        registry.register("users", init=lambda: None)

        assert await registry.cleanup("users") is True
        assert await registry.refresh("users") is True


class TestHookExecution:
    """Test sync and async hooks run"""

    @pytest.mark.asyncio
    async def test_sync_and_async_hooks(self, registry):
        calls = []

        async def init():
            calls.append("init")

        registry.register("complaints", init=init, cleanup=lambda: calls.append("cleanup"))

        await registry.init("complaints")
        await registry.cleanup("complaints")

        assert calls == ["init", "cleanup"]


class TestFaultIsolation:
    """Test that hook failures are contained"""

    @pytest.mark.asyncio
    async def test_init_failure_is_reported(self, registry, toasts, error_records):
        def broken():
            raise ValueError("chart failed")

        registry.register("analytics", init=broken)

        result = await registry.init("analytics")

        assert result is False
        assert len(toasts) == 1
        assert toasts[0].message == "Failed to initialize this section."
        record, error = error_records[0]
        assert record.context == "section-init"
        assert record.kind == "render"
        assert isinstance(error, RenderError)
        assert error.section == "analytics"
        assert isinstance(error.cause, ValueError)

    @pytest.mark.asyncio
    async def test_refresh_failure_is_reported(self, registry, toasts, error_records):
        async def broken():
            raise RuntimeError("boom")

        registry.register("complaints", refresh=broken)

        assert await registry.refresh("complaints") is False
        assert toasts[0].message == "Failed to refresh this section."
        assert error_records[0][0].context == "section-refresh"

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_logged_not_raised(self, registry, toasts, error_records):
        def broken():
            raise RuntimeError("teardown failed")

        registry.register("complaints", cleanup=broken)

        assert await registry.cleanup("complaints") is False
        assert toasts == []
        assert error_records == []

    @pytest.mark.asyncio
    async def test_without_notifier_init_failure_still_contained(self):
        registry = LifecycleRegistry()
        registry.register("users", init=lambda: 1 / 0)

        assert await registry.init("users") is False
