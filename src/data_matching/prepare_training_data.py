"""
Moduł do przygotowywania danych treningowych.

1. Wczytuje użytkowników i oceny z plików CSV.
2. Pobiera z Solr wektory cech wszystkich filmów.
3. Łączy oceny z użytkownikami i cechami filmów (inner join).
4. Normalizuje ostatnie 8 cech i wyrównuje liczność ocen (normalization.py).
5. Dzieli dane na zbiór treningowy i testowy.
6. Zapisuje gotowe dane w formacie .npy oraz .jsonl.
"""

import json
import numpy as np
from pathlib import Path
from sklearn.model_selection import train_test_split
from typing import Dict, List, Optional, Sequence, Tuple

from database_user.movielens_parser import read_ratings, read_users
from solr_ltr.solr_client import SolrClient
from src.data_matching.normalization import normalize_training_dataset

USER_FEATURE_COUNT = 3


def build_training_dataset(ratings: Sequence[Dict], users: Sequence[Dict],
                           movie_features: Sequence[Dict]) -> List[Dict]:
    """
    Buduje zbiór danych do treningu/testu.

    Oceny bez pasującego użytkownika lub filmu są pomijane.

    Returns:
        Lista słowników z kluczami: movieId, userId, score, features,
        gdzie features to cechy filmu (bez 3 ostatnich) + [płeć, wiek, zawód] użytkownika.
    """
    users_by_id = {}
    for user in users:
        users_by_id.setdefault(user['userId'], user)
    movies_by_id = {}
    for movie in movie_features:
        movies_by_id.setdefault(str(movie['db_id']), movie)

    dataset = []
    for rating in ratings:
        user = users_by_id.get(rating['userId'])
        movie = movies_by_id.get(str(rating['movieId']))
        if user is None or movie is None:
            continue

        movie_feats = list(movie['features'])
        dataset.append({
            'movieId': int(movie['db_id']),
            'userId': rating['userId'],
            'score': [rating['rating']],
            'features': movie_feats[:max(0, len(movie_feats) - USER_FEATURE_COUNT)]
                        + [user['gender'], user['age'], user['occupation']],
        })
    return dataset


def dataset_to_xy(dataset: Sequence[Dict]) -> Tuple[np.ndarray, np.ndarray]:
    """Zamienia zbiór na macierze X (n, liczba cech) i y (n, 1)."""
    if not dataset:
        raise ValueError("Pusty zbiór danych")
    X = np.array([entry['features'] for entry in dataset], dtype=np.float32)
    y = np.array([entry['score'] for entry in dataset], dtype=np.float32).reshape(len(dataset), -1)
    return X, y


def split_dataset(dataset: Sequence[Dict], test_size: float = 0.1,
                  seed: Optional[int] = 42) -> Tuple[List[Dict], List[Dict]]:
    train, test = train_test_split(list(dataset), test_size=test_size, random_state=seed)
    return train, test


def save_dataset(dataset: Sequence[Dict], path: str):
    """Zapisuje zbiór w formacie JSON lines (jeden przykład na linię)."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        for entry in dataset:
            f.write(json.dumps(entry) + "\n")


def load_dataset(path: str) -> List[Dict]:
    with open(path, 'r', encoding='utf-8') as f:
        return [json.loads(line) for line in f if line.strip()]


class DataPreparer:
    """Klasa do przygotowywania danych treningowych (CSV + cechy z Solr)."""

    def __init__(self, users_csv: str, ratings_csv: str, solr_client: SolrClient,
                 store: str = "tmdb_features", seed: Optional[int] = 42):
        """
        Args:
            users_csv: Ścieżka do users.csv
            ratings_csv: Ścieżka do ratings.csv
            solr_client: Klient Solr
            store: Nazwa feature store
            seed: Ziarno losowości (próbkowanie i podział)
        """
        self.users_csv = users_csv
        self.ratings_csv = ratings_csv
        self.client = solr_client
        self.store = store
        self.seed = seed
        self.dataset = None
        self.normalized = None

    def build(self) -> List[Dict]:
        users = read_users(self.users_csv)
        ratings = read_ratings(self.ratings_csv)
        movie_features = self.client.extract_features(self.store)

        self.dataset = build_training_dataset(ratings, users, movie_features)
        print(f"✅ Zbudowano zbiór: {len(self.dataset)} przykładów "
              f"({len(ratings) - len(self.dataset)} ocen bez dopasowania pominięto)")
        return self.dataset

    def normalize(self) -> Dict:
        if self.dataset is None:
            self.build()
        rng = np.random.default_rng(self.seed)
        self.normalized = normalize_training_dataset(self.dataset, rng=rng)
        print(f"✅ Znormalizowano zbiór: {len(self.normalized['ds'])} przykładów po próbkowaniu")
        return self.normalized

    def save_prepared_data(self, output_dir: str, test_size: float = 0.1):
        """Orkiestruje całym procesem i zapisuje wyniki."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        normalized = self.normalize()
        train, test = split_dataset(normalized['ds'], test_size=test_size, seed=self.seed)
        print(f"✅ Podzielono dane: {len(train)} treningowych, {len(test)} testowych")

        save_dataset(train, str(output_path / "train.jsonl"))
        save_dataset(test, str(output_path / "test.jsonl"))
        with open(output_path / "normalization.json", 'w', encoding='utf-8') as f:
            json.dump({'mins': normalized['mins'], 'maxs': normalized['maxs']}, f)

        X_train, y_train = dataset_to_xy(train)
        X_test, y_test = dataset_to_xy(test)
        np.save(output_path / "X_train.npy", X_train)
        np.save(output_path / "X_test.npy", X_test)
        np.save(output_path / "y_train.npy", y_train)
        np.save(output_path / "y_test.npy", y_test)

        print(f"✅ Wszystkie pliki wynikowe zapisano w folderze: {output_path}")
