"""Klient do komunikacji z Solr (wyszukiwanie i API Learning To Rank)."""

import requests
from typing import Dict, List, Optional, Sequence

from solr_ltr.ltr import parse_feature_vector


class SolrClient:
    """Klient dla rdzenia (core) Solr z włączonym pluginem LTR."""

    def __init__(self, base_url: str = "http://localhost:8983/solr", core: str = "tmdb", timeout: int = 60):
        """
        Inicjalizacja klienta Solr.

        Args:
            base_url: Adres Solr (bez nazwy core)
            core: Nazwa core z zaindeksowanymi filmami
            timeout: Timeout pojedynczego zapytania (sekundy)
        """
        self.base_url = base_url.rstrip("/")
        self.core = core
        self.timeout = timeout
        self.session = requests.Session()

    @property
    def core_url(self) -> str:
        return f"{self.base_url}/{self.core}"

    def _make_request(self, method: str, endpoint: str, params: Optional[Dict] = None,
                      json_body=None) -> Dict:
        """
        Wykonuje zapytanie do Solr.

        Błędy HTTP nie są przechwytywane - raise_for_status rzuca requests.HTTPError.

        Args:
            method: Metoda HTTP
            endpoint: Endpoint względem core (np. "select")
            params: Parametry zapytania
            json_body: Ciało zapytania (JSON)

        Returns:
            Odpowiedź JSON z Solr
        """
        url = f"{self.core_url}/{endpoint}"
        params = dict(params or {})
        params.setdefault('wt', 'json')

        response = self.session.request(method, url, params=params, json=json_body, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def select(self, params: Dict) -> List[Dict]:
        """Zapytanie /select, zwraca listę dokumentów."""
        result = self._make_request('GET', 'select', params)
        return result.get('response', {}).get('docs', [])

    def fetch_movies(self, fields: Sequence[str], rows: int = 10000) -> List[Dict]:
        """
        Pobiera dokumenty wszystkich filmów (tylko wskazane pola).

        Args:
            fields: Pola do zwrócenia (np. genres, spoken_languages)
            rows: Maksymalna liczba dokumentów
        """
        return self.select({
            'q': '*:*',
            'rows': str(rows),
            'sort': 'db_id asc',
            'fl': ','.join(['db_id', *fields]),
        })

    def extract_features(self, store: str, rows: int = 10000, sort: str = "db_id asc",
                         fl: str = "db_id") -> List[Dict]:
        """
        Pobiera z Solr wektory cech wszystkich filmów.

        Args:
            store: Nazwa feature store
            rows: Maksymalna liczba dokumentów
            sort: Sortowanie
            fl: Pola dokumentu zwracane obok cech

        Returns:
            Lista słowników z kluczami:
            db_id - id filmu (str);
            features - lista wartości cech w kolejności ze store.
        """
        docs = self.select({
            'q': '*:*',
            'rows': str(rows),
            'sort': sort,
            'fl': f"{fl},[features store={store}]",
            'store': store,
        })

        movie_features = []
        for doc in docs:
            _, values = parse_feature_vector(doc.get('[features]', ''))
            movie_features.append({'db_id': str(doc['db_id']), 'features': values})

        print(f"✅ Pobrano cechy dla {len(movie_features)} filmów (store: {store})")
        return movie_features

    def rerank(self, model_name: str, efi: Dict[str, float], q: str = "*:*", rows: int = 10,
               rerank_docs: int = 100, fl: str = "db_id,score") -> List[Dict]:
        """
        Wyszukiwanie z przeliczeniem kolejności modelem LTR.

        Args:
            model_name: Nazwa modelu w model-store
            efi: Zewnętrzne wartości cech (np. {"gender": 1.0, "age": 25.0, "occupation": 4.0})
            q: Zapytanie
            rows: Liczba wyników
            rerank_docs: Ile pierwszych dokumentów przeliczyć modelem
            fl: Zwracane pola
        """
        local_params = [f"model={model_name}", f"reRankDocs={rerank_docs}"]
        local_params.extend(f"efi.{name}={value}" for name, value in efi.items())
        rq = "{!ltr " + " ".join(local_params) + "}"
        return self.select({'q': q, 'rows': str(rows), 'fl': fl, 'rq': rq})

    # --- Feature store ---

    def list_feature_stores(self) -> List[str]:
        result = self._make_request('GET', 'schema/feature-store')
        return result.get('featureStores', [])

    def get_features(self, store: str) -> List[Dict]:
        result = self._make_request('GET', f'schema/feature-store/{store}')
        return result.get('features', [])

    def upload_features(self, features: List[Dict]) -> Dict:
        """Wysyła definicje cech (PUT /schema/feature-store)."""
        result = self._make_request('PUT', 'schema/feature-store', json_body=features)
        print(f"✅ Wysłano {len(features)} cech do feature store")
        return result

    def delete_feature_store(self, store: str) -> Dict:
        result = self._make_request('DELETE', f'schema/feature-store/{store}')
        print(f"🗑️  Usunięto feature store: {store}")
        return result

    # --- Model store ---

    def list_models(self) -> List[Dict]:
        result = self._make_request('GET', 'schema/model-store')
        return result.get('models', [])

    def upload_model(self, model: Dict) -> Dict:
        """Wysyła definicję modelu (PUT /schema/model-store)."""
        result = self._make_request('PUT', 'schema/model-store', json_body=model)
        print(f"✅ Wysłano model: {model.get('name')}")
        return result

    def delete_model(self, model_name: str) -> Dict:
        result = self._make_request('DELETE', f'schema/model-store/{model_name}')
        print(f"🗑️  Usunięto model: {model_name}")
        return result
