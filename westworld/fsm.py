"""A generic stack-based state machine.

The machine is split in two:

- `StateStack` holds the ordered state values (top = active state).
- `StateMachine` asks the handler what the top state wants to do and applies
  the resulting `StateTransition`, firing lifecycle callbacks on the way.

State values are plain tags (usually enum members). Behavior lives in a
`Handler`, which receives the state value plus a caller-owned mutable context
on every callback.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
D = TypeVar("D")


class TransitionKind(StrEnum):
    none = "none"
    pop = "pop"
    push = "push"
    switch = "switch"
    quit = "quit"


@dataclass(frozen=True, slots=True)
class StateTransition(Generic[S]):
    """A transition request returned by `Handler.update`.

    - `none`: stay in the current state.
    - `pop`: end the current state and resume the previous one, if any.
    - `push`: pause the current state and start `state` on top of it.
    - `switch`: stop the current state and start `state` in its place.
    - `quit`: stop every state on the stack.
    """

    kind: TransitionKind
    state: S | None = None

    @staticmethod
    def none() -> "StateTransition[S]":
        return StateTransition(kind=TransitionKind.none)

    @staticmethod
    def pop() -> "StateTransition[S]":
        return StateTransition(kind=TransitionKind.pop)

    @staticmethod
    def push(state: S) -> "StateTransition[S]":
        return StateTransition(kind=TransitionKind.push, state=state)

    @staticmethod
    def switch(state: S) -> "StateTransition[S]":
        return StateTransition(kind=TransitionKind.switch, state=state)

    @staticmethod
    def quit() -> "StateTransition[S]":
        return StateTransition(kind=TransitionKind.quit)


class Handler(Generic[S, D]):
    """Lifecycle callbacks for one or more state values.

    Every method is optional. Callbacks may mutate `ctx` freely but only the
    return value of `update` changes the stack.
    """

    def on_start(self, state: S, ctx: D) -> None:
        """Called when the state is put on the stack by a push or a switch."""

    def on_stop(self, state: S, ctx: D) -> None:
        """Called when the state is removed from the stack for good."""

    def on_pause(self, state: S, ctx: D) -> None:
        """Called when another state is pushed on top of this one."""

    def on_resume(self, state: S, ctx: D) -> None:
        """Called when the state just above this one is popped."""

    def update(self, state: S, ctx: D) -> StateTransition[S]:
        """Called once per tick while the state is at the top of the stack."""

        return StateTransition.none()


class StateStack(Generic[S]):
    """LIFO sequence of state values. Mutating it fires no callbacks."""

    __slots__ = ("_states",)

    def __init__(self) -> None:
        self._states: list[S] = []

    @classmethod
    def new_initial_state(cls, initial_state: S) -> "StateStack[S]":
        stack: StateStack[S] = cls()
        stack._states.append(initial_state)
        return stack

    def is_empty(self) -> bool:
        return not self._states

    def last(self) -> S | None:
        return self._states[-1] if self._states else None

    # State values are treated as immutable tags, so the mutable accessor
    # returns the same object as `last`.
    last_mut = last

    def push(self, state: S) -> None:
        self._states.append(state)

    def pop(self) -> S | None:
        if not self._states:
            return None
        return self._states.pop()

    def states(self) -> tuple[S, ...]:
        """Snapshot of the stack, bottom first."""

        return tuple(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __bool__(self) -> bool:
        return bool(self._states)

    def __iter__(self) -> Iterator[S]:
        return iter(tuple(self._states))

    def __repr__(self) -> str:
        return f"StateStack({list(self._states)!r})"


class StateMachine:
    """Applies transitions to a `StateStack` on behalf of a `Handler`.

    Holds no state of its own: every method takes the handler, the stack and
    the context explicitly, so one machine can drive any number of
    independent stacks. Exceptions raised by callbacks are not caught.
    """

    @staticmethod
    def is_running(stack: StateStack[S]) -> bool:
        return not stack.is_empty()

    @classmethod
    def update(cls, handler: Handler[S, D], stack: StateStack[S], ctx: D) -> None:
        """Run the top state's `update` and apply the transition it returns."""

        if stack.is_empty():
            return

        top = stack.last()
        request = handler.update(top, ctx)  # type: ignore[arg-type]
        cls.transition(handler, request, stack, ctx)

    @classmethod
    def transition(
        cls,
        handler: Handler[S, D],
        request: StateTransition[S],
        stack: StateStack[S],
        ctx: D,
    ) -> None:
        kind = request.kind
        if kind == TransitionKind.none:
            return

        logger.debug("fsm transition %s state=%r depth=%d", kind.value, request.state, len(stack))

        if kind == TransitionKind.pop:
            cls.pop(handler, stack, ctx)
        elif kind == TransitionKind.push:
            cls.push(handler, request.state, stack, ctx)  # type: ignore[arg-type]
        elif kind == TransitionKind.switch:
            cls.switch(handler, request.state, stack, ctx)  # type: ignore[arg-type]
        elif kind == TransitionKind.quit:
            cls.stop(handler, stack, ctx)
        else:  # pragma: no cover
            raise ValueError(f"Unknown transition kind: {kind!r}")

    @staticmethod
    def push(handler: Handler[S, D], state: S, stack: StateStack[S], ctx: D) -> None:
        """Pause the current top (if any), then push and start `state`.

        Pushing onto an empty stack is how a machine is seeded with its
        first state: `on_start` fires and no `on_pause` does.
        """

        if not stack.is_empty():
            handler.on_pause(stack.last(), ctx)  # type: ignore[arg-type]

        stack.push(state)
        handler.on_start(state, ctx)

    @staticmethod
    def pop(handler: Handler[S, D], stack: StateStack[S], ctx: D) -> None:
        if stack.is_empty():
            return

        popped = stack.pop()
        handler.on_stop(popped, ctx)  # type: ignore[arg-type]

        if not stack.is_empty():
            handler.on_resume(stack.last(), ctx)  # type: ignore[arg-type]

    @staticmethod
    def switch(handler: Handler[S, D], state: S, stack: StateStack[S], ctx: D) -> None:
        if not stack.is_empty():
            handler.on_stop(stack.pop(), ctx)  # type: ignore[arg-type]

        stack.push(state)
        handler.on_start(state, ctx)

    @staticmethod
    def stop(handler: Handler[S, D], stack: StateStack[S], ctx: D) -> None:
        """Pop every state, top first, firing `on_stop` on each."""

        while not stack.is_empty():
            handler.on_stop(stack.pop(), ctx)  # type: ignore[arg-type]
