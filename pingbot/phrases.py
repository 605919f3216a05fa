from __future__ import annotations

import secrets

WORDS = (
    "amber", "anchor", "arrow", "badge", "banner", "beacon", "birch", "blade", "bloom", "bolt",
    "breeze", "bridge", "brook", "canyon", "cedar", "chalk", "cinder", "cliff", "clover", "comet",
    "coral", "crane", "crest", "dawn", "delta", "drift", "dune", "eagle", "ember", "falcon",
    "fern", "field", "flint", "forge", "frost", "gale", "garnet", "glacier", "grove", "harbor",
    "hawk", "hazel", "heron", "hollow", "island", "ivory", "jade", "juniper", "kettle", "lagoon",
    "lantern", "laurel", "ledge", "lily", "maple", "marble", "meadow", "mesa", "mist", "moss",
    "nectar", "north", "oak", "ocean", "onyx", "orbit", "otter", "pebble", "pine", "plume",
    "prairie", "quartz", "quill", "raven", "reef", "ridge", "river", "robin", "saber", "sage",
    "shore", "signal", "slate", "spark", "spruce", "stone", "summit", "thistle", "thunder", "tide",
    "timber", "torch", "tundra", "valley", "vapor", "willow", "winter", "wren", "yarrow", "zephyr",
)


def random_phrase(count: int = 3, join: str = "_") -> str:
    """Short human readable token such as ``AMBER_RIVER_OTTER``.

    Good enough to tell concurrent pings apart; not globally unique.
    """
    return join.join(secrets.choice(WORDS).upper() for _ in range(count))
