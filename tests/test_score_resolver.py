import pytest

from errors import ClassificationFormatError
from mood_labels import Mood
from score_resolver import RawScore, parse_raw_classification, resolve


def test_empty_input_is_neutral():
    r = resolve([])
    assert r.to_dict() == {"mood": "neutral", "confidence": 0.5, "allScores": []}


def test_positional_winner_and_ranking():
    raw = [RawScore("LABEL_1", 0.2), RawScore("LABEL_0", 0.7), RawScore("LABEL_2", 0.1)]
    r = resolve(raw)
    assert r.mood is Mood.NEGATIVE
    assert r.confidence == 0.7
    assert r.to_dict()["allScores"] == [
        {"label": "negative", "score": 0.7},
        {"label": "neutral", "score": 0.2},
        {"label": "positive", "score": 0.1},
    ]


def test_ties_keep_classifier_order():
    r = resolve([RawScore("fear", 0.4), RawScore("joy", 0.4), RawScore("sadness", 0.2)])
    assert r.mood is Mood.FEAR
    assert [s.mood for s in r.all_scores] == [Mood.FEAR, Mood.JOY, Mood.SAD]


def test_confidence_rounding_is_display_only():
    r = resolve([RawScore("joy", 0.98765)])
    assert r.confidence == 0.98765
    assert r.to_dict()["confidence"] == 0.99


def test_unknown_labels_still_ranked():
    r = resolve([RawScore("LABEL_9", 0.9), RawScore("joy", 0.1)])
    assert r.mood is Mood.UNKNOWN


def test_resolve_accepts_plain_dicts():
    r = resolve([{"label": "sadness", "score": 0.6}, {"label": "joy", "score": 0.4}])
    assert r.mood is Mood.SAD


def test_resolve_rejects_malformed_input():
    with pytest.raises(ClassificationFormatError):
        resolve([{"label": "joy"}])


def test_parse_nested_inference_shape():
    raw = parse_raw_classification([[{"label": "joy", "score": 0.9}, {"label": "anger", "score": 0.1}]])
    assert raw == [RawScore("joy", 0.9), RawScore("anger", 0.1)]


def test_parse_flat_shape_and_empty():
    assert parse_raw_classification([{"label": "LABEL_0", "score": 1}]) == [RawScore("LABEL_0", 1.0)]
    assert parse_raw_classification([]) == []
    assert parse_raw_classification([[]]) == []


@pytest.mark.parametrize("payload", [
    {"error": "Model is loading"},
    "joy",
    None,
    [["joy", 0.9]],
    [{"label": 3, "score": 0.9}],
    [{"label": "joy", "score": "high"}],
    [{"label": "joy", "score": True}],
    [{"label": "joy", "score": 1.5}],
    [{"label": "joy", "score": float("nan")}],
])
def test_parse_rejects_bad_shapes(payload):
    with pytest.raises(ClassificationFormatError):
        parse_raw_classification(payload)


@pytest.mark.parametrize("raw", [5, 0.7, object()])
def test_resolve_rejects_non_iterables(raw):
    with pytest.raises(ClassificationFormatError):
        resolve(raw)


def test_resolve_accepts_one_shot_iterables():
    r = resolve(iter([RawScore("sadness", 0.3), RawScore("joy", 0.9)]))
    assert r.mood is Mood.JOY
    assert [s.mood for s in r.all_scores] == [Mood.JOY, Mood.SAD]
    assert resolve(s for s in [{"label": "anger", "score": 0.6}]).mood is Mood.ANGRY


def test_resolve_none_is_no_signal():
    assert resolve(None).to_dict() == {"mood": "neutral", "confidence": 0.5, "allScores": []}
