"""Localized speaker and speaking-rate labels."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class LanguageLabels:
    """Words used when rendering speaker labels for one language."""

    speaker: str
    rate: str
    rate_unit: str


_BUNDLES = {
    "en": LanguageLabels("Speaker", "rate", "w/s"),
    "es": LanguageLabels("Hablante", "velocidad", "p/s"),
    "fr": LanguageLabels("Intervenant", "débit", "m/s"),
    "de": LanguageLabels("Sprecher", "Tempo", "W/s"),
    "it": LanguageLabels("Parlante", "velocità", "p/s"),
    "pt": LanguageLabels("Falante", "velocidade", "p/s"),
    "ru": LanguageLabels("Говорящий", "скорость", "сл/с"),
    "pl": LanguageLabels("Mówca", "tempo", "sł/s"),
    "nl": LanguageLabels("Spreker", "tempo", "w/s"),
    "el": LanguageLabels("Ομιλητής", "ρυθμός", "λ/δ"),
    "sv": LanguageLabels("Talare", "takt", "o/s"),
    "da": LanguageLabels("Taler", "hastighed", "o/s"),
    "no": LanguageLabels("Taler", "tempo", "o/s"),
    "fi": LanguageLabels("Puhuja", "nopeus", "s/s"),
    "cs": LanguageLabels("Řečník", "tempo", "s/s"),
    "hu": LanguageLabels("Beszélő", "sebesség", "sz/mp"),
    "sk": LanguageLabels("Rečník", "tempo", "s/s"),
    "ro": LanguageLabels("Vorbitor", "viteză", "c/s"),
    "bg": LanguageLabels("Говорител", "скорост", "д/с"),
    "hr": LanguageLabels("Govornik", "brzina", "r/s"),
    "sl": LanguageLabels("Govorec", "hitrost", "b/s"),
    "et": LanguageLabels("Kõneleja", "kiirus", "s/s"),
    "lv": LanguageLabels("Runātājs", "ātrums", "v/s"),
    "lt": LanguageLabels("Kalbėtojas", "greitis", "ž/s"),
    "mt": LanguageLabels("Kelliem", "rata", "k/s"),
    "tr": LanguageLabels("Konuşmacı", "hız", "k/sn"),
    "uk": LanguageLabels("Мовець", "швидкість", "сл/с"),
}


@dataclass(frozen=True)
class LabelCatalog:
    """Read-only language code -> labels lookup with a default bundle."""

    bundles: Mapping[str, LanguageLabels] = field(
        default_factory=lambda: MappingProxyType(dict(_BUNDLES))
    )
    default: str = "en"

    def __post_init__(self) -> None:
        if self.default not in self.bundles:
            raise ValueError(f"Default language {self.default!r} missing from catalog")
        if not isinstance(self.bundles, MappingProxyType):
            object.__setattr__(self, "bundles", MappingProxyType(dict(self.bundles)))

    def get(self, code: str | None) -> LanguageLabels:
        """Labels for a language code; region suffixes and unknown codes fall back."""
        if not code or code.lower() == "auto":
            return self.bundles[self.default]

        code = code.lower()
        if code in self.bundles:
            return self.bundles[code]

        # "en-US" / "pt_BR" -> base language
        base = code.replace("_", "-").split("-")[0]
        return self.bundles.get(base, self.bundles[self.default])

    def languages(self) -> list[str]:
        return sorted(self.bundles)


DEFAULT_CATALOG = LabelCatalog()


def get_labels(code: str | None, catalog: LabelCatalog = DEFAULT_CATALOG) -> LanguageLabels:
    """Labels for a language code, falling back to the catalog default."""
    return catalog.get(code)


def format_speaker_label(
    code: str | None, number: int, catalog: LabelCatalog = DEFAULT_CATALOG
) -> str:
    """Format a numbered speaker label, e.g. ``"Hablante 2"``."""
    return f"{get_labels(code, catalog).speaker} {number}"


def format_rate_label(
    code: str | None, rate: float, catalog: LabelCatalog = DEFAULT_CATALOG
) -> str:
    """Format a speaking-rate label, e.g. ``"rate: 2.5 w/s"``."""
    labels = get_labels(code, catalog)
    return f"{labels.rate}: {rate:.1f} {labels.rate_unit}"
