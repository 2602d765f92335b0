import torch
import torch.nn as nn

from src.model.model import create_model


def test_default_topology():
    model = create_model()
    linear = [m for m in model.modules() if isinstance(m, nn.Linear)]
    dropout = [m for m in model.modules() if isinstance(m, nn.Dropout)]

    assert [(l.in_features, l.out_features) for l in linear] == [(203, 512), (512, 128), (128, 16), (16, 1)]
    assert len(dropout) == 2 and all(d.p == 0.5 for d in dropout)
    assert isinstance(model.net[-1], nn.Linear)


def test_forward_shape():
    model = create_model(10, hidden_dims=[8, 4])
    model.eval()
    with torch.no_grad():
        out = model(torch.randn(5, 10))
    assert out.shape == (5, 1)
