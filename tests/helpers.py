import requests


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return self.payload


class FakeSession:
    """Zastępuje requests.Session - odpowiedzi wybierane po (metoda, koniec URL)."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({'method': method, 'url': url, 'params': params, 'json': json})
        for (route_method, suffix), response in self.routes.items():
            if route_method == method and url.endswith(suffix):
                if isinstance(response, FakeResponse):
                    return response
                return FakeResponse(response)
        return FakeResponse({})


def features_doc(db_id, values):
    """Dokument Solr z transformerem [features] (cechy f0, f1, ...)."""
    names = [f"f{i}" for i in range(len(values))]
    return {'db_id': db_id, '[features]': ",".join(f"{n}={v}" for n, v in zip(names, values))}


def example(score, features, movie_id=1, user_id=1):
    return {'movieId': movie_id, 'userId': user_id, 'score': [score], 'features': list(features)}
