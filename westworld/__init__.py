"""Stack-based finite state machines driving a small agent simulation."""

from westworld.fsm import Handler, StateMachine, StateStack, StateTransition, TransitionKind

__all__ = [
    "Handler",
    "StateMachine",
    "StateStack",
    "StateTransition",
    "TransitionKind",
]
