"""
Model sieci neuronowej przewidującej ocenę filmu (PyTorch).

Architektura (perceptron z 4 warstwami liniowymi):
- 203 cechy wejściowe (cechy filmu z Solr + płeć, wiek, zawód użytkownika)
- Linear 512 -> ReLU -> Dropout 0.5
- Linear 128 -> ReLU -> Dropout 0.5
- Linear 16 -> ReLU
- Linear 1 (regresja, bez aktywacji)

Tylko warstwy Linear i ReLU - taki model da się wyeksportować do
NeuralNetworkModel w Solr LTR (dropout działa tylko w trakcie treningu).
"""

import torch
import torch.nn as nn

DEFAULT_INPUT_DIM = 203


class GoaRatingNet(nn.Module):
    """Sieć przewidująca ocenę na podstawie cech filmu i użytkownika (Gender/Occupation/Age)."""

    def __init__(
        self,
        input_dim: int = DEFAULT_INPUT_DIM,
        hidden_dims: list = None,
        dropout_rate: float = 0.5
    ):
        """
        Args:
            input_dim: Liczba cech wejściowych
            hidden_dims: Wymiary warstw ukrytych (default: [512, 128, 16])
            dropout_rate: Dropout po wszystkich warstwach ukrytych poza ostatnią
        """
        super(GoaRatingNet, self).__init__()

        if hidden_dims is None:
            hidden_dims = [512, 128, 16]

        self.input_dim = input_dim
        self.hidden_dims = list(hidden_dims)

        layers = []
        in_dim = input_dim
        for i, out_dim in enumerate(hidden_dims):
            layers.append(nn.Linear(in_dim, out_dim))
            layers.append(nn.ReLU())
            if i < len(hidden_dims) - 1:
                layers.append(nn.Dropout(dropout_rate))
            in_dim = out_dim
        layers.append(nn.Linear(in_dim, 1))

        self.net = nn.Sequential(*layers)
        self._init_weights()

    def _init_weights(self):
        # Xavier
        for module in self.modules():
            if isinstance(module, nn.Linear):
                nn.init.xavier_uniform_(module.weight)
                nn.init.zeros_(module.bias)

    def forward(self, x):
        """
        Args:
            x: Input tensor (batch_size, input_dim)

        Returns:
            Przewidywane oceny (batch_size, 1)
        """
        return self.net(x)


def create_model(input_dim: int = DEFAULT_INPUT_DIM, **kwargs):
    """
    Factory function do tworzenia modelu.

    Przykład:
        >>> model = create_model(203)
        >>> model = create_model(203, hidden_dims=[64, 16])
    """
    return GoaRatingNet(input_dim, **kwargs)
