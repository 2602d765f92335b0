"""Parser dla plików CSV z użytkownikami i ocenami (schemat MovieLens)."""

import pandas as pd
from pathlib import Path
from typing import Callable, Dict, List, Optional

USER_FIELDS = ['userId', 'gender', 'age', 'occupation', 'zip']
RATING_FIELDS = ['userId', 'movieId', 'rating']

# Kod wieku "1" w MovieLens oznacza "poniżej 18" - traktujemy jako brak danych
UNKNOWN_AGE = "1"


def parse_gender(value: str) -> float:
    """Koduje płeć jako liczbę (F -> 0.0, M -> 1.0)."""
    if value == "F":
        return 0.0
    if value == "M":
        return 1.0
    raise ValueError(f"Nieznana wartość płci: {value!r}")


def parse_age(value: str) -> Optional[float]:
    if value == UNKNOWN_AGE:
        return None
    return float(value)


USER_FIELD_FNS: Dict[str, Callable] = {
    'userId': int,
    'gender': parse_gender,
    'age': parse_age,
    'occupation': float,
}

RATING_FIELD_FNS: Dict[str, Callable] = {
    'userId': int,
    'movieId': int,
    'rating': float,
}


def read_csv_records(csv_path: str, val_fns: Dict[str, Callable]) -> List[Dict]:
    """
    Wczytuje plik CSV jako listę słowników.

    Args:
        csv_path: Ścieżka do pliku CSV (z nagłówkiem)
        val_fns: Funkcje konwertujące wartości kolumn; kolumny bez funkcji są pomijane

    Returns:
        Lista rekordów z przekonwertowanymi wartościami
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Nie znaleziono pliku: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip()

    missing = [col for col in val_fns if col not in df.columns]
    if missing:
        raise ValueError(f"Brak kolumn {missing} w pliku: {path}")

    records = []
    for row in df[list(val_fns)].itertuples(index=False):
        records.append({col: fn(val.strip()) for (col, fn), val in zip(val_fns.items(), row)})
    return records


def read_users(users_csv: str) -> List[Dict]:
    """
    Ładuje użytkowników z users.csv.

    Kolumna zip jest pomijana, użytkownicy bez znanego wieku są odrzucani.

    Returns:
        Lista słowników z kluczami: userId, gender, age, occupation
    """
    users = read_csv_records(users_csv, USER_FIELD_FNS)
    known_age = [u for u in users if u['age'] is not None]
    print(f"✅ Załadowano {len(known_age)} użytkowników ({len(users) - len(known_age)} bez wieku pominięto)")
    return known_age


def read_ratings(ratings_csv: str) -> List[Dict]:
    """Ładuje oceny z ratings.csv (klucze: userId, movieId, rating)."""
    ratings = read_csv_records(ratings_csv, RATING_FIELD_FNS)
    print(f"✅ Załadowano {len(ratings)} ocen")
    return ratings
