from __future__ import annotations

import random
from dataclasses import dataclass, fields
from typing import Mapping, Optional

# Four traits drive every computer seat. Each lives in [0, 1]:
#   tightness      0 plays many hands      .. 1 plays few hands
#   aggression     0 checks and calls      .. 1 bets and raises
#   adaptability   0 ignores position      .. 1 leans hard on position
#   risk_tolerance 0 avoids variance       .. 1 embraces variance

RANDOM_CHOICE = "RANDOM"


@dataclass(frozen=True)
class StrategyProfile:
    tightness: float = 0.5
    aggression: float = 0.5
    adaptability: float = 0.5
    risk_tolerance: float = 0.5
    name: str = "Custom"
    description: str = ""

    def __post_init__(self) -> None:
        for trait in ("tightness", "aggression", "adaptability", "risk_tolerance"):
            value = getattr(self, trait)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{trait} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{trait} must be within [0, 1], got {value}")

    @classmethod
    def from_value(cls, value: object, rng: Optional[random.Random] = None) -> "StrategyProfile":
        """Build a profile from a preset key, a legacy strategy name, a mapping or RANDOM.

        This is the only place loose inputs are interpreted; everything downstream
        receives a StrategyProfile.
        """
        rng = rng or random.Random()
        if value is None:
            return PRESETS["SHARK"]
        if isinstance(value, StrategyProfile):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        if isinstance(value, str):
            key = value.strip()
            # Upper-case RANDOM picks a preset; lower-case "random" is the legacy style.
            if key == RANDOM_CHOICE:
                return PRESETS[rng.choice(sorted(PRESETS))]
            preset_key = key.upper().replace(" ", "_").replace("-", "_")
            if preset_key in PRESETS:
                return PRESETS[preset_key]
            if key.lower() in LEGACY_STRATEGIES:
                return PRESETS[LEGACY_STRATEGIES[key.lower()]]
            for preset in PRESETS.values():
                if preset.name.lower() == key.lower():
                    return preset
        raise ValueError(f"Unknown strategy profile {value!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "StrategyProfile":
        known = {field.name for field in fields(cls)}
        values = dict(data)
        if "riskTolerance" in values and "risk_tolerance" not in values:
            values["risk_tolerance"] = values.pop("riskTolerance")
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        return cls(**values)  # type: ignore[arg-type]

    @classmethod
    def random(cls, rng: Optional[random.Random] = None) -> "StrategyProfile":
        rng = rng or random.Random()
        return cls(
            tightness=round(rng.random(), 3),
            aggression=round(rng.random(), 3),
            adaptability=round(rng.random(), 3),
            risk_tolerance=round(rng.random(), 3),
            name="Random",
            description="Randomly generated traits",
        )

    def describe(self) -> str:
        """One line summary used in logs and decision context."""
        return (
            f"{self.name}: tightness {self.tightness:.2f}, aggression {self.aggression:.2f}, "
            f"adaptability {self.adaptability:.2f}, risk tolerance {self.risk_tolerance:.2f}"
        )

    def personality_prompt(self, player_name: str = "AI") -> str:
        tight = _grade(self.tightness, ("very loose", "somewhat loose", "somewhat tight", "very tight"))
        aggressive = _grade(
            self.aggression, ("very passive", "somewhat passive", "somewhat aggressive", "very aggressive")
        )
        adaptable = _grade(
            self.adaptability,
            ("very consistent", "somewhat consistent", "somewhat adaptable", "highly adaptable"),
        )
        risk = _grade(
            self.risk_tolerance,
            ("very risk averse", "prefers low risk", "comfortable with moderate risk", "loves high variance plays"),
        )
        hands = "few" if self.tightness > 0.6 else "moderate" if self.tightness > 0.4 else "many"
        if self.aggression > 0.6:
            betting = "frequently bet and raise"
        elif self.aggression > 0.4:
            betting = "bet moderately"
        else:
            betting = "prefer to call and check"
        if self.adaptability > 0.6:
            decisions = "adjust your strategy based on opponents"
        else:
            decisions = "stick to consistent patterns"
        variance = "embrace high variance situations" if self.risk_tolerance > 0.6 else "prefer predictable outcomes"
        return "\n".join(
            [
                f"You are {player_name}, a poker player with the following characteristics:",
                f"- Playing Style: {tight} and {aggressive}",
                f"- Adaptability: {adaptable} in response to opponents and situations",
                f"- Risk Tolerance: {risk}",
                f"- Hand Selection: You play {hands} hands",
                f"- Betting Style: You {betting}",
                f"- Decision Making: You {decisions}",
                f"- Variance: You {variance}",
            ]
        )


def _grade(value: float, labels: tuple) -> str:
    if value > 0.7:
        return labels[3]
    if value > 0.5:
        return labels[2]
    if value > 0.3:
        return labels[1]
    return labels[0]


PRESETS = {
    "NIT": StrategyProfile(0.9, 0.2, 0.1, 0.1, "Nit", "Extremely tight-passive player who only plays premium hands"),
    "ROCK": StrategyProfile(0.8, 0.4, 0.2, 0.3, "Rock", "Solid, tight-aggressive player who plays ABC poker"),
    "TAG": StrategyProfile(0.7, 0.8, 0.6, 0.5, "TAG", "Classic tight-aggressive player with good fundamentals"),
    "LAG": StrategyProfile(0.3, 0.9, 0.8, 0.8, "LAG", "Loose-aggressive player who applies constant pressure"),
    "CALLING_STATION": StrategyProfile(
        0.2, 0.1, 0.1, 0.6, "Calling Station", "Loose-passive player who calls too much and rarely folds"
    ),
    "MANIAC": StrategyProfile(0.1, 0.95, 0.3, 0.95, "Maniac", "Plays almost every hand aggressively"),
    "FISH": StrategyProfile(0.4, 0.3, 0.1, 0.7, "Fish", "Recreational player with poor fundamentals"),
    "SHARK": StrategyProfile(0.6, 0.7, 0.9, 0.4, "Shark", "Skilled player who adapts to opponents and situations"),
    "PROFESSOR": StrategyProfile(0.8, 0.5, 0.8, 0.2, "Professor", "Mathematical player who plays the odds"),
    "GAMBLER": StrategyProfile(0.3, 0.6, 0.4, 0.9, "Gambler", "Action-seeking player who loves big pots"),
}

# Older seat configs named a playing style instead of traits.
LEGACY_STRATEGIES = {
    "aggressive": "LAG",
    "tight": "ROCK",
    "mathematical": "PROFESSOR",
    "random": "FISH",
    "positional": "TAG",
    "balanced": "SHARK",
    "randomly-determined": "FISH",
}
