"""Tests for scopes and the scope stack."""

import asyncio
import threading

import pytest

from watchpost.errors import IllegalStateError, InvalidInputError
from watchpost.scope.models import Breadcrumb, RequestInfo, SeverityLevel, User
from watchpost.scope.scope import Scope, ScopeStack


class TestScope:
    """Test scope data handling."""

    def test_tags_last_write_wins(self) -> None:
        """Test that setting a tag twice keeps the last value."""
        scope = Scope()
        scope.set_tag("tier", "free")
        scope.set_tag("tier", "pro")
        assert scope.tags == {"tier": "pro"}

    def test_empty_key_is_rejected(self) -> None:
        """Test that an empty tag key is a programmer error."""
        with pytest.raises(InvalidInputError):
            Scope().set_tag("", "x")

    def test_breadcrumb_ring_buffer_evicts_oldest(self) -> None:
        """Test that the oldest breadcrumb is dropped when the buffer is full."""
        scope = Scope(max_breadcrumbs=2)
        for message in ("one", "two", "three"):
            scope.add_breadcrumb(Breadcrumb(message=message))
        assert [b.message for b in scope.breadcrumbs] == ["two", "three"]

    def test_zero_capacity_keeps_nothing(self) -> None:
        """Test that a zero-sized buffer discards every breadcrumb."""
        scope = Scope(max_breadcrumbs=0)
        scope.add_breadcrumb(Breadcrumb(message="x"))
        assert len(scope.breadcrumbs) == 0

    def test_copy_is_independent(self) -> None:
        """Test that writes to a copy never leak back to the original."""
        scope = Scope()
        scope.set_tag("a", "1")
        scope.set_user(User(id="1"))
        scope.set_request(RequestInfo(headers={"Accept": "*/*"}))

        clone = scope.copy()
        clone.set_tag("b", "2")
        assert clone.user is not None and clone.request is not None
        clone.user.with_data("k", "v")
        clone.request.headers["X-New"] = "1"

        assert scope.tags == {"a": "1"}
        assert scope.user is not None and scope.user.data == {}
        assert scope.request is not None and "X-New" not in scope.request.headers

    def test_clear_resets_everything(self) -> None:
        """Test that clear drops all data but keeps capacity."""
        scope = Scope(max_breadcrumbs=5)
        scope.set_tag("a", "1")
        scope.set_level(SeverityLevel.FATAL)
        scope.add_breadcrumb(Breadcrumb(message="x"))
        scope.clear()
        assert scope.tags == {}
        assert scope.level is None
        assert len(scope.breadcrumbs) == 0
        assert scope.max_breadcrumbs == 5

    def test_to_dict_omits_unset_optional_parts(self) -> None:
        """Test that user, level and transaction appear only when set."""
        data = Scope().to_dict()
        assert "user" not in data
        assert "level" not in data
        assert "transaction" not in data


class TestScopeStack:
    """Test nested scopes."""

    def test_push_copies_current(self) -> None:
        """Test that a pushed scope starts as a copy of its parent."""
        stack = ScopeStack()
        stack.current.set_tag("service", "api")
        nested = stack.push()
        nested.set_tag("request", "r1")
        assert stack.depth == 2
        assert stack.current is nested
        assert nested.tags == {"service": "api", "request": "r1"}

    def test_pop_restores_parent(self) -> None:
        """Test that popping discards the nested scope's changes."""
        stack = ScopeStack()
        stack.push().set_tag("temp", "1")
        stack.pop()
        assert stack.current.tags == {}

    def test_root_cannot_be_popped(self) -> None:
        """Test that popping the root scope is an illegal state."""
        with pytest.raises(IllegalStateError):
            ScopeStack().pop()

    def test_scoped_pops_on_error(self) -> None:
        """Test that the scoped block always restores the stack."""
        stack = ScopeStack()
        with pytest.raises(RuntimeError):
            with stack.scoped() as scope:
                scope.set_tag("x", "1")
                stack.push()
                raise RuntimeError("boom")
        assert stack.depth == 1
        assert stack.current.tags == {}

    @pytest.mark.asyncio
    async def test_tasks_keep_their_own_scopes(self) -> None:
        """Test that concurrent tasks never see each other's pushed scopes."""
        stack = ScopeStack()
        seen: dict[str, dict[str, str]] = {}

        async def handle(name: str, delay: float) -> None:
            with stack.scoped() as scope:
                scope.set_tag("request", name)
                await asyncio.sleep(delay)
                seen[name] = dict(stack.current.tags)
            seen[name + "_after"] = dict(stack.current.tags)

        await asyncio.gather(handle("a", 0.01), handle("b", 0.03))

        assert seen["a"] == {"request": "a"}
        assert seen["b"] == {"request": "b"}
        assert seen["a_after"] == {} and seen["b_after"] == {}
        assert stack.depth == 1

    def test_thread_pushes_stay_in_thread(self) -> None:
        """Test that a scope pushed on another thread is invisible here."""
        stack = ScopeStack()
        main_scope = stack.push()
        main_scope.set_tag("request", "main")

        def work() -> None:
            stack.push().set_tag("request", "worker")

        worker = threading.Thread(target=work)
        worker.start()
        worker.join()

        assert stack.current is main_scope
        assert stack.current.tags == {"request": "main"}
        assert stack.depth == 2
