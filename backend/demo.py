"""Seed story inserted into an empty (or partially seeded) node store."""

from endless_tale.models import AdventureNode
from endless_tale.store import NodeStore, seed_store

DEMO_NODES = [
    AdventureNode(
        id="root",
        choice_text="Root",
        story_text="This is a branching text adventure. Click on one of the options "
        "to read it and see its branching paths, or contribute one of your own "
        "at any point.",
    ),
    AdventureNode(
        id="torch_passage",
        parent_id="root",
        choice_text="Take the torch and explore the dark passage ahead",
        story_text="You grab the torch from its sconce. The warmth is comforting "
        "against the chill. The passage ahead slopes downward, and you can hear "
        "the faint sound of dripping water echoing from somewhere deeper within.",
    ),
    AdventureNode(
        id="search_chamber",
        parent_id="root",
        choice_text="Search the chamber for clues about your identity",
        story_text="You run your hands along the rough stone walls, searching for "
        "anything that might explain your situation. In a corner, your fingers "
        "brush against something metallic - a small iron key, covered in "
        "cobwebs. Near it lies a torn piece of parchment with faded writing.",
    ),
    AdventureNode(
        id="call_out",
        parent_id="root",
        choice_text="Call out into the darkness",
        story_text="\"Hello?\" your voice echoes through the chamber, bouncing off "
        "unseen walls in the darkness. For a moment, silence. Then... footsteps. "
        "Slow, deliberate footsteps approaching from the passage ahead. A raspy "
        "voice calls back: \"Another one awakens...\"",
    ),
    AdventureNode(
        id="deep_passage",
        parent_id="torch_passage",
        choice_text="Continue deeper into the passage",
        story_text="The passage opens into a vast underground cavern. Your "
        "torchlight barely reaches the ceiling high above. In the center, an "
        "ancient stone altar stands, covered in strange symbols that seem to "
        "glow faintly. Three corridors branch off in different directions.",
    ),
]


def create_demo_data(store: NodeStore) -> int:
    """Insert the demo story without touching existing nodes. Returns nodes added."""
    return seed_store(store, DEMO_NODES)
