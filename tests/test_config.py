from __future__ import annotations

import pytest

from voicetrace import config


def test_default_strategy_order() -> None:
    diar_config = config.DiarizationConfig()
    assert diar_config.strategies == ("word", "enhanced", "segment", "single")
    assert diar_config.cluster_config("segment") is config.SEGMENT_BASIC
    assert diar_config.cluster_config("word").metric == config.METRIC_WORD


def test_strategies_are_normalized_and_validated() -> None:
    assert config.DiarizationConfig(strategies=("Segment", "SINGLE")).strategies == (
        "segment",
        "single",
    )
    with pytest.raises(ValueError):
        config.DiarizationConfig(strategies=("magic",))
    with pytest.raises(ValueError):
        config.DiarizationConfig(strategies=())


def test_with_overrides_ignores_none() -> None:
    diar_config = config.DiarizationConfig(language="es")
    updated = diar_config.with_overrides(language=None, workers=4)
    assert updated.language == "es"
    assert updated.workers == 4
    assert diar_config.workers == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"mode": "random"},
        {"metric": "cosine"},
        {"match_threshold": 1.5},
        {"merge_threshold": -0.1},
        {"rolling_window": 0},
    ],
)
def test_cluster_config_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        config.ClusterConfig(name="custom", **kwargs)


def test_presets() -> None:
    assert config.SEGMENT_BASIC.mode == config.MODE_GATED
    assert config.SEGMENT_BASIC.match_threshold == pytest.approx(0.75)
    assert config.SEGMENT_BASIC.min_words == 2
    assert config.SEGMENT_ENHANCED.mode == config.MODE_NEAREST
    assert config.WORD_LEVEL.merge_threshold == pytest.approx(0.85)
