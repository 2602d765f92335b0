"""
Wizualizacja modelu i przebiegu treningu.
"""

import matplotlib.pyplot as plt
import torch
import torch.nn as nn
from pathlib import Path
from torch.utils.tensorboard import SummaryWriter
from typing import Optional, Sequence


def render_model(model: nn.Module, input_dim: int, log_dir: str) -> str:
    """
    Zapisuje graf sieci do TensorBoard (zakładka Graphs).

    Returns:
        Katalog logów TensorBoard
    """
    was_training = model.training
    model.eval()
    device = next(model.parameters()).device
    writer = SummaryWriter(log_dir)
    try:
        writer.add_graph(model, torch.zeros(1, input_dim, device=device))
    finally:
        writer.close()
        model.train(was_training)
    print(f"📊 Graf modelu zapisany: tensorboard --logdir={log_dir}")
    return log_dir


def plot_training_history(train_losses: Sequence[float], val_losses: Sequence[float],
                          path: Optional[str] = None, title: str = "MSE"):
    """Wykres MSE treningowego i testowego po epokach; zapis do PNG gdy podano path."""
    fig, ax = plt.subplots(figsize=(8, 4))
    epochs = range(1, len(train_losses) + 1)
    ax.plot(epochs, train_losses, label="train")
    ax.plot(epochs, val_losses, label="test")
    ax.set_xlabel("epoka")
    ax.set_ylabel("MSE")
    ax.set_title(title)
    ax.legend()

    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path)
        plt.close(fig)
        print(f"📊 Wykres zapisany: {path}")
    return fig
