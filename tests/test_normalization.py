import numpy as np

from solr_ltr.ltr import build_nn_model
from src.data_matching.normalization import copies_for_score, min_max_bounds, normalize_training_dataset
from tests.helpers import example


class FixedRng:
    """Generator zwracający zawsze tę samą liczbę."""

    def __init__(self, value):
        self.value = value

    def integers(self, low, high):
        return self.value


def test_last_eight_features_scaled_to_unit_range():
    ds = [example(2.0, [100.0] + [float(i * k) for k in range(1, 9)]) for i in range(5)]

    result = normalize_training_dataset(ds, rng=np.random.default_rng(0))

    feats = np.array([e['features'] for e in result['ds']])
    assert feats[:, 0].tolist() == [100.0] * 5
    assert feats[:, 1:].min() == 0.0 and feats[:, 1:].max() == 1.0
    assert result['mins'] == [0.0] * 8
    assert result['maxs'] == [4.0 * k for k in range(1, 9)]


def test_max_starts_from_zero():
    ds = [example(2.0, [-4.0] * 8), example(2.0, [-2.0] * 8)]
    mins, maxs = min_max_bounds(ds)

    assert mins == [-4.0] * 8
    assert maxs == [0.0] * 8


def test_constant_feature_maps_to_zero():
    ds = [example(2.0, [0.0] * 8), example(2.0, [0.0] * 8)]
    result = normalize_training_dataset(ds, rng=np.random.default_rng(0))
    assert all(f == 0.0 for e in result['ds'] for f in e['features'])


def test_oversampling_factors():
    assert [copies_for_score(s) for s in (0.5, 1.0, 1.5, 2.0, 4.5)] == [4, 2, 4, 1, 1]

    ds = [example(s, [float(i)] * 8, movie_id=i) for i, s in enumerate([0.5, 1.0, 1.5, 2.0])]
    result = normalize_training_dataset(ds, rng=FixedRng(9))

    assert [e['movieId'] for e in result['ds']] == [0, 0, 0, 0, 1, 1, 2, 2, 2, 2, 3]


def test_undersampling_buckets():
    ds = [example(s, [1.0] * 8) for s in (3.0, 4.0, 5.0, 2.5)]

    dropped_low = normalize_training_dataset(ds, rng=FixedRng(0))['ds']
    assert [e['score'][0] for e in dropped_low] == [5.0, 2.5]

    kept_high = normalize_training_dataset(ds, rng=FixedRng(9))['ds']
    assert [e['score'][0] for e in kept_high] == [3.0, 4.0, 5.0, 2.5]

    # 3.0 odrzucane dla losowania < 6, 4.0 dla < 7
    boundary = normalize_training_dataset(ds, rng=FixedRng(6))['ds']
    assert [e['score'][0] for e in boundary] == [3.0, 5.0, 2.5]


def test_input_is_not_mutated():
    ds = [example(2.0, [5.0] * 8), example(2.0, [10.0] * 8)]
    normalize_training_dataset(ds, rng=np.random.default_rng(0))
    assert ds[0]['features'] == [5.0] * 8


def test_constant_feature_exports_valid_solr_normalizer():
    ds = [example(2.0, [float(i)] * 7 + [5.0]) for i in range(3)]
    result = normalize_training_dataset(ds, rng=np.random.default_rng(0))

    names = [{'name': f"f{i}"} for i in range(8)]
    model = build_nn_model('s', 'm', names, [], result['mins'], result['maxs'])

    assert [e['features'][-1] for e in result['ds']] == [0.0, 0.0, 0.0]
    assert model['features'][-1]['norm']['params'] == {'min': '5.0', 'max': '6.0'}
