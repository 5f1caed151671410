from __future__ import annotations

import pytest

from voicetrace.labels import (
    DEFAULT_CATALOG,
    LabelCatalog,
    LanguageLabels,
    format_rate_label,
    format_speaker_label,
    get_labels,
)


def test_spanish_speaker_label() -> None:
    assert format_speaker_label("es", 2) == "Hablante 2"


def test_unknown_language_falls_back_to_english() -> None:
    assert format_speaker_label("xx", 1) == "Speaker 1"
    assert format_speaker_label(None, 3) == "Speaker 3"
    assert format_speaker_label("auto", 1) == "Speaker 1"


def test_region_suffix_uses_base_language() -> None:
    assert format_speaker_label("es-MX", 1) == "Hablante 1"
    assert format_speaker_label("DE_at", 1) == "Sprecher 1"


def test_rate_label() -> None:
    assert format_rate_label("en", 2.5) == "rate: 2.5 w/s"
    assert format_rate_label("es", 1.04) == "velocidad: 1.0 p/s"


def test_catalog_is_read_only() -> None:
    with pytest.raises(TypeError):
        DEFAULT_CATALOG.bundles["en"] = LanguageLabels("X", "y", "z")
    assert "es" in DEFAULT_CATALOG.languages()


def test_custom_catalog_requires_default() -> None:
    with pytest.raises(ValueError):
        LabelCatalog(bundles={"es": LanguageLabels("Hablante", "velocidad", "p/s")})

    catalog = LabelCatalog(
        bundles={"es": LanguageLabels("Hablante", "velocidad", "p/s")}, default="es"
    )
    assert format_speaker_label("fr", 4, catalog) == "Hablante 4"


def test_get_labels_bundle() -> None:
    labels = get_labels("pt-BR")
    assert (labels.speaker, labels.rate, labels.rate_unit) == ("Falante", "velocidade", "p/s")
    assert get_labels("") is DEFAULT_CATALOG.get("en")
