"""
Normalizacja cech i proste wyrównywanie liczności ocen.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence

from solr_ltr.ltr import do_to_last_n

# popularity vote_average runtime revenue budget gender age occupation
TO_NORM_COUNT = 8

# Prawdopodobieństwo (w dziesiątych) odrzucenia przykładu o danej ocenie
UNDERSAMPLING = {
    3.0: 6,
    4.0: 7,
    5.0: 0,
}

# (górna granica oceny, liczba kopii) - pierwsza pasująca granica wygrywa
OVERSAMPLING = [
    (1.0, 4),
    (1.1, 2),
    (1.6, 4),
]


def min_max_bounds(dataset: Sequence[Dict], to_norm_count: int = TO_NORM_COUNT):
    """
    Minima i maksima ostatnich `to_norm_count` cech.

    Maksimum jest liczone od 0 (tak jak w modelu w Solr).
    """
    if not dataset:
        raise ValueError("Pusty zbiór danych")
    to_norm = np.array([entry['features'][-to_norm_count:] for entry in dataset], dtype=np.float64)
    if to_norm.shape[1] != to_norm_count:
        raise ValueError(f"Przykłady mają mniej niż {to_norm_count} cech")
    maxs = np.maximum(to_norm.max(axis=0), 0.0)
    mins = to_norm.min(axis=0)
    return mins.tolist(), maxs.tolist()


def copies_for_score(score: float) -> int:
    for upper, copies in OVERSAMPLING:
        if score < upper:
            return copies
    return 1


def normalize_training_dataset(dataset: Sequence[Dict], rng: Optional[np.random.Generator] = None,
                               to_norm_count: int = TO_NORM_COUNT) -> Dict:
    """
    Normalizuje ostatnie 8 cech zbioru (MinMax).
    Wykonuje proste undersampling dla ocen 3.0, 4.0, 5.0
    oraz oversampling dla ocen 0.5, 1.0, 1.5.

    Args:
        dataset: Zbiór z build_training_dataset
        rng: Generator liczb losowych (domyślnie np.random.default_rng())
        to_norm_count: Liczba normalizowanych cech na końcu wektora

    Returns:
        Słownik z kluczami:
        ds - znormalizowany zbiór o tej samej strukturze;
        mins - minima ostatnich cech;
        maxs - maksima ostatnich cech.
    """
    if rng is None:
        rng = np.random.default_rng()

    mins, maxs = min_max_bounds(dataset, to_norm_count)
    deltas = [hi - lo for lo, hi in zip(mins, maxs)]

    def scale(index: int, feat: float) -> float:
        if deltas[index] == 0:
            return 0.0
        return (feat - mins[index]) / deltas[index]

    normalized = [
        {**entry, 'features': do_to_last_n(entry['features'], to_norm_count, scale)}
        for entry in dataset
    ]

    # proste undersampling
    kept = []
    for entry in normalized:
        drop_tenths = UNDERSAMPLING.get(entry['score'][0], 0)
        if rng.integers(0, 10) < drop_tenths:
            continue
        kept.append(entry)

    # proste oversampling
    ds: List[Dict] = []
    for entry in kept:
        ds.extend([entry] * copies_for_score(entry['score'][0]))

    return {'ds': ds, 'mins': mins, 'maxs': maxs}
