"""
Definicje cech i modeli dla Solr Learning To Rank (LTR).

Zawiera:
- generatory cech (kolekcje, pola numeryczne, wartości zewnętrzne efi)
- zestaw cech projektu (build_features)
- budowę modelu NeuralNetworkModel z wytrenowanych warstw
- parsowanie wyniku transformera [features]
"""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

SOLR_FEATURE_CLASS = "org.apache.solr.ltr.feature.SolrFeature"
FIELD_VALUE_FEATURE_CLASS = "org.apache.solr.ltr.feature.FieldValueFeature"
VALUE_FEATURE_CLASS = "org.apache.solr.ltr.feature.ValueFeature"
NN_MODEL_CLASS = "org.apache.solr.ltr.model.NeuralNetworkModel"
MIN_MAX_NORM_CLASS = "org.apache.solr.ltr.norm.MinMaxNormalizer"

DEFAULT_STORE = "tmdb_features"

COLL_FIELDS = ['genres', 'production_countries', 'spoken_languages']
NUMERIC_FIELDS = ['popularity', 'vote_average', 'runtime', 'revenue', 'budget']
# Kolejność musi odpowiadać kolejności cech użytkownika w zbiorze treningowym
USER_FIELDS = ['gender', 'age', 'occupation']


def distinct_coll_values(movies: Iterable[Dict], field: str, key: Optional[str] = "name") -> List[str]:
    """
    Zbiera unikalne wartości pola-kolekcji ze wszystkich filmów.

    Wartości mogą być napisami albo słownikami (jak w danych TMDB, np.
    {"iso_639_1": "en", "name": "English"}) - wtedy brana jest wartość `key`.
    """
    values = set()
    for movie in movies:
        for item in movie.get(field) or []:
            if isinstance(item, dict):
                item = item.get(key)
            if item not in (None, ""):
                values.add(str(item))
    return sorted(values)


def coll_feature_name(field: str, value: str) -> str:
    """Nazwa cechy bez znaków "," i "=", które rozdzielają wynik transformera [features]."""
    return f"{field}_{value}".replace(",", "").replace("=", "_")


def gen_coll_features(movies: Iterable[Dict], field: str, store: str = DEFAULT_STORE,
                      key: Optional[str] = "name") -> List[Dict]:
    """Jedna cecha binarna (SolrFeature z fq) na każdą wartość kolekcji `field`."""
    return [
        {
            "store": store,
            "name": coll_feature_name(field, value),
            "class": SOLR_FEATURE_CLASS,
            "params": {"fq": [f"{{!term f={field}}}{value}"]},
        }
        for value in distinct_coll_values(movies, field, key)
    ]


def gen_field_feature(field: str, store: str = DEFAULT_STORE) -> Dict:
    return {
        "store": store,
        "name": field,
        "class": FIELD_VALUE_FEATURE_CLASS,
        "params": {"field": field},
    }


def gen_external_value_feature(name: str, required: bool = False, store: str = DEFAULT_STORE) -> Dict:
    """Cecha przekazywana w zapytaniu jako efi.<name> (np. cechy użytkownika)."""
    return {
        "store": store,
        "name": name,
        "class": VALUE_FEATURE_CLASS,
        "params": {"value": f"${{{name}}}", "required": required},
    }


def build_features(store: str, movies: Iterable[Dict]) -> List[Dict]:
    """
    Buduje wszystkie cechy projektu dla Solr LTR.

    Kolejność: cechy kolekcji (gatunki, kraje produkcji, języki), 5 cech
    numerycznych filmu, 3 cechy użytkownika. Ostatnie 8 cech jest
    normalizowanych (MinMax), ostatnie 3 są podmieniane danymi użytkownika.

    Args:
        store: Nazwa feature store
        movies: Dokumenty filmów (potrzebne do wyznaczenia wartości kolekcji)
    """
    movies = list(movies)
    features = []
    for field in COLL_FIELDS:
        features.extend(gen_coll_features(movies, field, store))
    # tagów jest za dużo, żeby ich użyć

    features.extend(gen_field_feature(field, store) for field in NUMERIC_FIELDS)
    features.extend(gen_external_value_feature(field, False, store) for field in USER_FIELDS)
    return features


def do_to_last_n(values: Sequence[float], n: int, fn: Callable[[int, float], float]) -> List[float]:
    """Stosuje fn(index, value) do ostatnich n wartości (index liczony od 0 w tym oknie)."""
    values = list(values)
    start = len(values) - n
    if start < 0:
        raise ValueError(f"Wektor ma {len(values)} wartości, nie można zmienić ostatnich {n}")
    return values[:start] + [fn(i, v) for i, v in enumerate(values[start:])]


def build_nn_model(
    store: str,
    model_name: str,
    features: Sequence[Dict],
    layers: Sequence[Dict],
    mins: Sequence[float],
    maxs: Sequence[float],
) -> Dict:
    """
    Buduje definicję modelu NeuralNetworkModel dla Solr LTR.

    Args:
        store: Nazwa feature store
        model_name: Nazwa modelu
        features: Cechy w kolejności ze store (wystarczy klucz "name")
        layers: Warstwy z export.get_layers (matrix, bias, activation)
        mins, maxs: Minima/maksima ostatnich len(mins) cech (MinMaxNormalizer)

    Returns:
        Słownik gotowy do wysłania jako JSON do /schema/model-store
    """
    if len(mins) != len(maxs):
        raise ValueError(f"Różne długości mins ({len(mins)}) i maxs ({len(maxs)})")
    if len(mins) > len(features):
        raise ValueError(f"Więcej normalizatorów ({len(mins)}) niż cech ({len(features)})")

    model_features = [{"name": f["name"]} for f in features]
    offset = len(model_features) - len(mins)
    for i, (lo, hi) in enumerate(zip(mins, maxs)):
        # Solr odrzuca min == max, a stała cecha i tak normalizuje się do 0
        if hi == lo:
            hi = lo + 1.0
        model_features[offset + i]["norm"] = {
            "class": MIN_MAX_NORM_CLASS,
            "params": {"min": str(float(lo)), "max": str(float(hi))},
        }

    return {
        "store": store,
        "name": model_name,
        "class": NN_MODEL_CLASS,
        "features": model_features,
        "params": {"layers": [dict(layer) for layer in layers]},
    }


def parse_feature_vector(raw: str) -> Tuple[List[str], List[float]]:
    """
    Parsuje wynik transformera [features] ("nazwa=wartość,nazwa=wartość").

    Returns:
        (nazwy cech, wartości cech) w kolejności z odpowiedzi
    """
    names, values = [], []
    if not raw:
        return names, values
    for pair in raw.split(","):
        name, _, value = pair.rpartition("=")
        if not name:
            raise ValueError(f"Niepoprawna cecha w odpowiedzi Solr: {pair!r}")
        names.append(name)
        values.append(float(value))
    return names, values
