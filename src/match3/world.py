import random

from esper import World
from match3.events.bus import EventBus
from match3.config import MatchConfig
from match3.components.selection import SelectionState
from match3.components.swap_state import SwapState


def create_world(
    event_bus: EventBus,
    config: MatchConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> World:
    """Create the esper World shared by all match-3 systems.

    The world carries two plain resources as attributes: ``random`` (the only
    source of tile draws, so seeding it makes a session reproducible) and
    ``config`` (a validated MatchConfig). The swap and selection singletons are
    created up front so systems can look them up without ordering concerns.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", (config or MatchConfig()).validate())

    world.create_entity(SwapState())
    world.create_entity(SelectionState())
    return world


def get_swap_state(world: World) -> SwapState:
    """Return the shared SwapState component, creating it if absent."""
    existing = list(world.get_component(SwapState))
    if existing:
        return existing[0][1]
    state = SwapState()
    world.create_entity(state)
    return state


def get_selection_state(world: World) -> SelectionState:
    existing = list(world.get_component(SelectionState))
    if existing:
        return existing[0][1]
    state = SelectionState()
    world.create_entity(state)
    return state
