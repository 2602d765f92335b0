import numpy as np
import pytest
import torch

from src.model.export import get_layers
from src.model.model import create_model
from src.model.sklearn_training import create_sklearn_model


def forward(layers, x):
    for layer in layers:
        x = np.array(layer['matrix']) @ x + np.array(layer['bias'])
        if layer['activation'] == 'relu':
            x = np.maximum(x, 0)
    return x


def test_torch_layers_shapes_and_activations():
    layers = get_layers(create_model(203))

    assert [np.array(l['matrix']).shape for l in layers] == [(512, 203), (128, 512), (16, 128), (1, 16)]
    assert [len(l['bias']) for l in layers] == [512, 128, 16, 1]
    assert [l['activation'] for l in layers] == ['relu', 'relu', 'relu', 'identity']


def test_torch_layers_reproduce_eval_forward():
    torch.manual_seed(0)
    model = create_model(6, hidden_dims=[5, 3])
    model.eval()
    x = np.random.default_rng(0).random(6).astype(np.float32)

    with torch.no_grad():
        expected = model(torch.from_numpy(x).unsqueeze(0)).numpy()[0]

    np.testing.assert_allclose(forward(get_layers(model), x), expected, rtol=1e-5, atol=1e-6)


def test_sklearn_layers_transposed():
    rng = np.random.default_rng(0)
    X, y = rng.random((30, 4)), rng.random(30)
    model = create_sklearn_model(hidden_layer_sizes=(6, 3), batch_size=10, random_state=0)
    model.partial_fit(X, y)

    layers = get_layers(model)

    assert [np.array(l['matrix']).shape for l in layers] == [(6, 4), (3, 6), (1, 3)]
    assert layers[-1]['activation'] == 'identity'
    np.testing.assert_allclose(forward(layers, X[0]), model.predict(X[:1]), rtol=1e-6)


def test_unsupported_model():
    with pytest.raises(ValueError):
        get_layers(object())
    with pytest.raises(ValueError):
        get_layers(create_sklearn_model())
