"""Animal personas fighters pick for a fight.

One canonical, versioned set. Version 1 shipped the first eight animals;
version 2 extended it to twenty. Older fights only ever hold v1 members, which
stay valid.
"""
from enum import Enum

PERSONA_SET_VERSION = 2


class Animal(str, Enum):
    """Persona a fighter takes in a fight."""
    LION = 'lion'
    OWL = 'owl'
    FOX = 'fox'
    BEAR = 'bear'
    RABBIT = 'rabbit'
    ELEPHANT = 'elephant'
    WOLF = 'wolf'
    EAGLE = 'eagle'
    # v2
    TIGER = 'tiger'
    SHARK = 'shark'
    DRAGON = 'dragon'
    SNAKE = 'snake'
    GORILLA = 'gorilla'
    CHEETAH = 'cheetah'
    RHINO = 'rhino'
    OCTOPUS = 'octopus'
    DOLPHIN = 'dolphin'
    TURTLE = 'turtle'
    PENGUIN = 'penguin'
    FLAMINGO = 'flamingo'


# (name, emoji, traits)
PERSONAS: dict[Animal, tuple[str, str, str]] = {
    Animal.LION: ('Lion', '🦁', 'Bold and fierce'),
    Animal.OWL: ('Owl', '🦉', 'Wise and thoughtful'),
    Animal.FOX: ('Fox', '🦊', 'Clever and cunning'),
    Animal.BEAR: ('Bear', '🐻', 'Strong and protective'),
    Animal.RABBIT: ('Rabbit', '🐰', 'Quick and cautious'),
    Animal.ELEPHANT: ('Elephant', '🐘', 'Gentle giant'),
    Animal.WOLF: ('Wolf', '🐺', 'Loyal pack leader'),
    Animal.EAGLE: ('Eagle', '🦅', 'Sharp and focused'),
    Animal.TIGER: ('Tiger', '🐅', 'Fierce hunter'),
    Animal.SHARK: ('Shark', '🦈', 'Relentless predator'),
    Animal.DRAGON: ('Dragon', '🐉', 'Mythical power'),
    Animal.SNAKE: ('Snake', '🐍', 'Cunning strategist'),
    Animal.GORILLA: ('Gorilla', '🦍', 'Raw strength'),
    Animal.CHEETAH: ('Cheetah', '🐆', 'Lightning fast'),
    Animal.RHINO: ('Rhino', '🦏', 'Unstoppable force'),
    Animal.OCTOPUS: ('Octopus', '🐙', 'Multi-tasker'),
    Animal.DOLPHIN: ('Dolphin', '🐬', 'Intelligent navigator'),
    Animal.TURTLE: ('Turtle', '🐢', 'Patient wisdom'),
    Animal.PENGUIN: ('Penguin', '🐧', 'Cool under pressure'),
    Animal.FLAMINGO: ('Flamingo', '🦩', 'Graceful balance'),
}

V1_ANIMALS = frozenset(list(Animal)[:8])


def parse_animal(value: str | None) -> Animal | None:
    """Look up a persona by id, case-insensitive. None if not a member."""
    if not value:
        return None
    try:
        return Animal(value.strip().lower())
    except ValueError:
        return None


def persona_label(animal: str | Animal) -> str:
    """Display label, e.g. '🦉 Owl'."""
    parsed = parse_animal(animal.value if isinstance(animal, Animal) else animal)
    if parsed is None:
        return str(animal)
    name, emoji, _ = PERSONAS[parsed]
    return f'{emoji} {name}'
