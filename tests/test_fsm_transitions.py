from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from westworld.fsm import Handler, StateMachine, StateStack, StateTransition, TransitionKind


@dataclass
class Trace:
    calls: list[tuple[str, str]] = field(default_factory=list)
    updates: int = 0


class _ScriptedHandler(Handler[str, Trace]):
    """Records every callback; `update` replays a per-state script of transitions."""

    def __init__(self, script: dict[str, list[StateTransition[str]]] | None = None) -> None:
        self._script = {k: list(v) for k, v in (script or {}).items()}

    def on_start(self, state: str, ctx: Trace) -> None:
        ctx.calls.append(("start", state))

    def on_stop(self, state: str, ctx: Trace) -> None:
        ctx.calls.append(("stop", state))

    def on_pause(self, state: str, ctx: Trace) -> None:
        ctx.calls.append(("pause", state))

    def on_resume(self, state: str, ctx: Trace) -> None:
        ctx.calls.append(("resume", state))

    def update(self, state: str, ctx: Trace) -> StateTransition[str]:
        ctx.updates += 1
        ctx.calls.append(("update", state))
        queue = self._script.get(state)
        if queue:
            return queue.pop(0)
        return StateTransition.none()


def _stack(*states: str) -> StateStack[str]:
    stack: StateStack[str] = StateStack()
    for s in states:
        stack.push(s)
    return stack


def test_transition_factories() -> None:
    assert StateTransition.none().kind == TransitionKind.none
    assert StateTransition.pop().kind == TransitionKind.pop
    assert StateTransition.quit().kind == TransitionKind.quit
    assert StateTransition.push("B") == StateTransition(kind=TransitionKind.push, state="B")
    assert StateTransition.switch("C").state == "C"


def test_default_handler_update_stays() -> None:
    stack = _stack("A")
    StateMachine.update(Handler(), stack, object())

    assert stack.states() == ("A",)


def test_none_transition_does_not_touch_stack() -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack = _stack("A", "B")

    StateMachine.update(handler, stack, trace)

    assert stack.states() == ("A", "B")
    assert trace.calls == [("update", "B")]


@pytest.mark.parametrize("n", [1, 2, 5])
def test_push_sequence_pauses_each_previous_top_before_start(n: int) -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack: StateStack[str] = StateStack()
    names = [f"S{i}" for i in range(1, n + 1)]

    for name in names:
        StateMachine.transition(handler, StateTransition.push(name), stack, trace)

    assert len(stack) == n
    assert stack.last() == names[-1]

    expected: list[tuple[str, str]] = [("start", names[0])]
    for prev, cur in zip(names, names[1:]):
        expected += [("pause", prev), ("start", cur)]
    assert trace.calls == expected


def test_push_on_empty_stack_never_fires_pause() -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack: StateStack[str] = StateStack()

    StateMachine.push(handler, "A", stack, trace)

    assert trace.calls == [("start", "A")]
    assert stack.states() == ("A",)


def test_pop_last_state_stops_machine_without_resume() -> None:
    handler = _ScriptedHandler({"A": [StateTransition.pop()]})
    trace = Trace()
    stack = _stack("A")

    StateMachine.update(handler, stack, trace)

    assert stack.is_empty()
    assert trace.calls == [("update", "A"), ("stop", "A")]
    assert not StateMachine.is_running(stack)


def test_pop_resumes_new_top_after_stop() -> None:
    handler = _ScriptedHandler({"B": [StateTransition.pop()]})
    trace = Trace()
    stack = _stack("A", "B")

    StateMachine.update(handler, stack, trace)

    assert stack.states() == ("A",)
    assert trace.calls == [("update", "B"), ("stop", "B"), ("resume", "A")]


def test_pop_on_empty_stack_is_noop() -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack: StateStack[str] = StateStack()

    StateMachine.transition(handler, StateTransition.pop(), stack, trace)

    assert stack.is_empty()
    assert trace.calls == []


def test_switch_replaces_top_without_pause_or_resume() -> None:
    handler = _ScriptedHandler({"B": [StateTransition.switch("C")]})
    trace = Trace()
    stack = _stack("A", "B")

    StateMachine.update(handler, stack, trace)

    assert stack.states() == ("A", "C")
    assert trace.calls == [("update", "B"), ("stop", "B"), ("start", "C")]


def test_switch_on_empty_stack_just_starts() -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack: StateStack[str] = StateStack()

    StateMachine.transition(handler, StateTransition.switch("A"), stack, trace)

    assert stack.states() == ("A",)
    assert trace.calls == [("start", "A")]


@pytest.mark.parametrize("n", [0, 1, 4])
def test_quit_stops_every_state_top_to_bottom(n: int) -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    names = [f"S{i}" for i in range(n)]
    stack = _stack(*names)

    StateMachine.transition(handler, StateTransition.quit(), stack, trace)

    assert stack.is_empty()
    assert trace.calls == [("stop", s) for s in reversed(names)]


def test_update_on_empty_stack_is_idempotent() -> None:
    handler = _ScriptedHandler()
    trace = Trace()
    stack: StateStack[str] = StateStack()

    for _ in range(3):
        StateMachine.update(handler, stack, trace)

    assert stack.is_empty()
    assert trace.calls == []
    assert trace.updates == 0


def test_push_then_pop_scenario() -> None:
    handler = _ScriptedHandler({"A": [StateTransition.push("B")], "B": [StateTransition.pop()]})
    trace = Trace()
    stack: StateStack[str] = StateStack()

    StateMachine.push(handler, "A", stack, trace)
    assert trace.calls == [("start", "A")]

    StateMachine.update(handler, stack, trace)
    assert trace.calls[1:] == [("update", "A"), ("pause", "A"), ("start", "B")]
    assert stack.states() == ("A", "B")

    StateMachine.update(handler, stack, trace)
    assert trace.calls[4:] == [("update", "B"), ("stop", "B"), ("resume", "A")]
    assert stack.states() == ("A",)

    StateMachine.update(handler, stack, trace)
    assert trace.calls[7:] == [("update", "A")]
    assert len(stack) == 1
    assert stack.last() == "A"


def test_always_quit_state_stops_in_one_update() -> None:
    class _Quitter(Handler[str, Trace]):
        def on_stop(self, state: str, ctx: Trace) -> None:
            ctx.calls.append(("stop", state))

        def update(self, state: str, ctx: Trace) -> StateTransition[str]:
            ctx.updates += 1
            return StateTransition.quit()

    trace = Trace()
    stack = StateStack.new_initial_state("S")

    StateMachine.update(_Quitter(), stack, trace)
    assert stack.is_empty()
    assert trace.calls == [("stop", "S")]
    assert not StateMachine.is_running(stack)

    StateMachine.update(_Quitter(), stack, trace)
    assert trace.updates == 1
    assert trace.calls == [("stop", "S")]


def test_callbacks_share_the_mutable_context() -> None:
    class _Counter(Handler[str, dict]):
        def on_pause(self, state: str, ctx: dict) -> None:
            ctx["paused"] = state

        def on_start(self, state: str, ctx: dict) -> None:
            # Sees what on_pause wrote earlier in the same tick.
            ctx["started_over"] = ctx.get("paused")

        def update(self, state: str, ctx: dict) -> StateTransition[str]:
            return StateTransition.push("B")

    ctx: dict = {}
    stack = StateStack.new_initial_state("A")
    StateMachine.update(_Counter(), stack, ctx)

    assert ctx == {"paused": "A", "started_over": "A"}


def test_callback_exceptions_propagate() -> None:
    class _Boom(Handler[str, None]):
        def on_start(self, state: str, ctx: None) -> None:
            raise RuntimeError("boom")

        def update(self, state: str, ctx: None) -> StateTransition[str]:
            return StateTransition.switch("B")

    stack = StateStack.new_initial_state("A")
    with pytest.raises(RuntimeError, match="boom"):
        StateMachine.update(_Boom(), stack, None)

    # The stack reflects the mutations made before the callback raised.
    assert stack.states() == ("B",)


def test_independent_stacks_share_one_handler() -> None:
    handler = _ScriptedHandler({"A": [StateTransition.quit()]})
    t1, t2 = Trace(), Trace()
    s1, s2 = _stack("A"), _stack("B")

    StateMachine.update(handler, s1, t1)
    StateMachine.update(handler, s2, t2)

    assert s1.is_empty()
    assert s2.states() == ("B",)
    assert t2.calls == [("update", "B")]
