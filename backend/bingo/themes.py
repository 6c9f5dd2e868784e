"""Theme catalog: named pools of card content keyed by theme id."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Theme:
    key: str
    name: str
    items: Tuple[str, ...]

    def to_dict(self):
        return {
            'id': self.key,
            'name': self.name,
            'size': len(self.items),
        }


THEMES: Dict[str, Theme] = {
    'ds9': Theme(
        key='ds9',
        name='Star Trek: Deep Space Nine',
        items=(
            "Rule of acquisition",
            "Sexual tension between Odo and Quark",
            "Pretend to be nice to Cardassians",
            "Miles and Keiko disagree / argue",
            "Jake and Nog sit above promenade",
            "Odo shapeshifts",
            "Sisko misgenders Jadzia",
            "Gaslighting",
            "Morn!",
            "Flashing light",
            "Kira in just her tank top",
            "Bashir gets pushed against a wall",
            "Racism",
            "Odo accuses Quark",
            "Sisko sits on his little couch",
            "Odo is authoritarian",
            "Problem could be solved with CCTV",
            "Baseball mentioned / Baseball shown",
            "Prophets mentioned",
            "Wormhole gets used",
            "Odo solves the problem",
            "Dabo girl mentioned",
            "Quark moans",
            "Cardassian politics mentioned",
        ),
    ),
}


def get_theme(key) -> Optional[Theme]:
    if not isinstance(key, str):
        return None
    return THEMES.get(key)


def list_themes() -> List[Theme]:
    return list(THEMES.values())
