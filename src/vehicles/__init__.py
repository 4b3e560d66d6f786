"""
どこで: `vehicles` パッケージ。
何を: Actor と振る舞い（pursuer/lead）の公開面。import 時に振る舞いをレジストリへ登録する。
"""

from . import lead, pursuer  # noqa: F401  (登録の副作用)
from .actor import ACTOR_LAYER, Actor, make_behavior
from .lead import LeadBehavior, LeadMode
from .pursuer import PursuerBehavior
from .registry import behavior, get_behavior, list_behaviors
from .state import ActorState, clamp_velocity, integrate

__all__ = [
    "ACTOR_LAYER",
    "Actor",
    "ActorState",
    "LeadBehavior",
    "LeadMode",
    "PursuerBehavior",
    "behavior",
    "clamp_velocity",
    "get_behavior",
    "integrate",
    "list_behaviors",
    "make_behavior",
]
