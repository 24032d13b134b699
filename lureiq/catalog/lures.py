"""
Static lure catalog.

Nineteen largemouth-bass presentations with base weights and retrieve/depth
presets. Catalog order matters: when tie-break jitter is disabled, the first
of several equally scored lures wins.

Base weights are configuration, not computed. A hosted override document can
replace individual weights at startup (see ``ingestion.weights_client``).
"""

from __future__ import annotations

from lureiq.models.recommendation import LureProfile
from lureiq.taxonomy.conditions import Clarity

TEXAS_RIG = "Texas-Rigged Creature"
SENKO = "Weightless Senko"
DROP_SHOT = "Drop Shot"
CHATTERBAIT = "Chatterbait"
SWIM_JIG = "Swim Jig"
FLIPPING_JIG = "Flipping Jig"
FOOTBALL_JIG = "Football Jig"
SQUAREBILL = "Squarebill Crankbait"
BLADE_BAIT = "Blade Bait"
SPINNERBAIT = "Spinnerbait"
WALKING_TOPWATER = "Topwater (Walking Bait)"
BUZZBAIT = "Buzzbait"
LIPLESS = "Lipless Crankbait"
POPPING_FROG = "Popping Frog"
JERKBAIT = "Jerkbait"
SOFT_SWIMBAIT = "Soft Swimbait"
NED_RIG = "Ned Rig"
CAROLINA_RIG = "Carolina Rig"
UNDERSPIN = "Underspin"

LURE_CATALOG: tuple[LureProfile, ...] = (
    LureProfile(name=TEXAS_RIG,        base_weight=2, retrieve="Pitch/drag with pauses",      depth="2-8 ft"),
    LureProfile(name=SENKO,            base_weight=2, retrieve="Slow sink; short twitches",   depth="2-10 ft"),
    LureProfile(name=DROP_SHOT,        base_weight=1, retrieve="Twitch-shake in place",       depth="10-25 ft"),
    LureProfile(name=CHATTERBAIT,      base_weight=2, retrieve="Steady; rip free from grass", depth="2-6 ft"),
    LureProfile(name=SWIM_JIG,         base_weight=2, retrieve="Slow roll edges/lanes",       depth="2-6 ft"),
    LureProfile(name=FLIPPING_JIG,     base_weight=2, retrieve="Pitch to targets; short hops", depth="2-10 ft"),
    LureProfile(name=FOOTBALL_JIG,     base_weight=2, retrieve="Drag bottom; occasional hops", depth="8-15 ft"),
    LureProfile(name=SQUAREBILL,       base_weight=1, retrieve="Deflect off rock/cover",      depth="3-6 ft"),
    LureProfile(name=BLADE_BAIT,       base_weight=1, retrieve="Lift-drop near bottom",       depth="10-25 ft"),
    LureProfile(name=SPINNERBAIT,      base_weight=1, retrieve="Burn then pause",             depth="2-8 ft"),
    LureProfile(name=WALKING_TOPWATER, base_weight=1, retrieve="Walk-the-dog",                depth="Surface"),
    LureProfile(name=BUZZBAIT,         base_weight=1, retrieve="Steady buzz",                 depth="Surface"),
    LureProfile(name=LIPLESS,          base_weight=1, retrieve="Burn/yo-yo over grass",       depth="2-6 ft"),
    LureProfile(name=POPPING_FROG,     base_weight=1, retrieve="Pop/twitch over mats",        depth="Surface"),
    LureProfile(name=JERKBAIT,         base_weight=1, retrieve="Twitch-twitch, long pause",   depth="4-8 ft"),
    LureProfile(name=SOFT_SWIMBAIT,    base_weight=1, retrieve="Slow roll mid-column",        depth="3-10 ft"),
    LureProfile(name=NED_RIG,          base_weight=1, retrieve="Short hops; deadstick",       depth="6-20 ft"),
    LureProfile(name=CAROLINA_RIG,     base_weight=1, retrieve="Drag along points/ledges",    depth="8-20 ft"),
    LureProfile(name=UNDERSPIN,        base_weight=1, retrieve="Slow roll near bait balls",   depth="6-15 ft"),
)

# Color guidance by clarity
COLOR_BY_CLARITY: dict[Clarity, str] = {
    Clarity.CLEAR:   "Natural (Green Pumpkin/Watermelon/Shad)",
    Clarity.STAINED: "Chartreuse/White or Junebug",
    Clarity.MUDDY:   "Black/Blue",
}


def catalog_by_name(catalog: tuple[LureProfile, ...] = LURE_CATALOG) -> dict[str, LureProfile]:
    """Index a catalog by lure name, preserving catalog order."""
    return {profile.name: profile for profile in catalog}


def lure_names(catalog: tuple[LureProfile, ...] = LURE_CATALOG) -> list[str]:
    return [profile.name for profile in catalog]
