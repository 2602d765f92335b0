"""
Eksport wag wytrenowanej sieci do formatu warstw NeuralNetworkModel (Solr LTR).

Każda warstwa liniowa to słownik:
    matrix - macierz wag [wyjście][wejście]
    bias - wektor biasów [wyjście]
    activation - "relu" albo "identity" (zawsze dla ostatniej warstwy)
"""

import torch.nn as nn
from sklearn.neural_network import MLPRegressor
from typing import Dict, List


def _finalize(layers: List[Dict]) -> List[Dict]:
    if not layers:
        raise ValueError("Model nie zawiera warstw liniowych")
    layers[-1]['activation'] = 'identity'
    return layers


def get_layers_torch(model: nn.Module) -> List[Dict]:
    """Wyciąga warstwy nn.Linear w kolejności forward (wagi torch mają już kształt [out, in])."""
    layers = []
    for module in model.modules():
        if isinstance(module, nn.Linear):
            layers.append({
                'matrix': module.weight.detach().cpu().numpy().astype(float).tolist(),
                'bias': module.bias.detach().cpu().numpy().astype(float).tolist(),
                'activation': 'relu',
            })
    return _finalize(layers)


def get_layers_sklearn(model: MLPRegressor) -> List[Dict]:
    """Wyciąga warstwy z MLPRegressor (coefs_ mają kształt [in, out] - transpozycja)."""
    if not hasattr(model, 'coefs_'):
        raise ValueError("MLPRegressor nie jest wytrenowany")
    if model.activation != 'relu':
        raise ValueError(f"Nieobsługiwana aktywacja: {model.activation}")

    layers = []
    for coef, intercept in zip(model.coefs_, model.intercepts_):
        layers.append({
            'matrix': coef.T.astype(float).tolist(),
            'bias': intercept.astype(float).tolist(),
            'activation': 'relu',
        })
    return _finalize(layers)


def get_layers(model) -> List[Dict]:
    """Warstwy modelu gotowe do JSON (PyTorch lub scikit-learn)."""
    if isinstance(model, nn.Module):
        return get_layers_torch(model)
    if isinstance(model, MLPRegressor):
        return get_layers_sklearn(model)
    raise ValueError(f"Nieobsługiwany typ modelu: {type(model).__name__}")
