"""
Alternatywny trening tej samej sieci w scikit-learn (MLPRegressor).

MLPRegressor nie ma dropoutu - regularyzacja przez L2 (alpha).
Trening epoka po epoce przez partial_fit, żeby mieć stałą liczbę epok
i MSE na zbiorze testowym po każdej z nich.
"""

import pickle
import numpy as np
from pathlib import Path
from sklearn.neural_network import MLPRegressor
from sklearn.metrics import mean_squared_error
from tqdm import tqdm
from typing import Optional, Sequence


def create_sklearn_model(
    hidden_layer_sizes: Sequence[int] = (512, 128, 16),
    learning_rate: float = 0.01,
    momentum: float = 0.001,
    batch_size: int = 200,
    alpha: float = 1e-4,
    random_state: Optional[int] = None
) -> MLPRegressor:
    return MLPRegressor(
        hidden_layer_sizes=tuple(hidden_layer_sizes),
        activation='relu',
        solver='sgd',
        learning_rate='constant',
        learning_rate_init=learning_rate,
        momentum=momentum,
        nesterovs_momentum=False,
        batch_size=batch_size,
        alpha=alpha,
        random_state=random_state,
    )


class SklearnGoaTrainer:
    """Trainer dla MLPRegressor z tym samym interfejsem co GoaTrainer."""

    def __init__(self, model: Optional[MLPRegressor] = None):
        self.model = model if model is not None else create_sklearn_model()
        self.train_losses = []
        self.val_losses = []
        self.best_val_loss = float('inf')

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Przewidywania w kształcie (n, 1)."""
        return np.asarray(self.model.predict(X)).reshape(len(X), 1)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """MSE na zbiorze (X, y)."""
        return float(mean_squared_error(np.ravel(y), self.predict(X).ravel()))

    def train(
        self,
        X_train: np.ndarray,
        y_train: np.ndarray,
        X_test: np.ndarray,
        y_test: np.ndarray,
        num_epochs: int = 100,
        checkpoint_dir: Optional[str] = None
    ):
        """
        Pętla treningowa (jedno partial_fit = jedna epoka).

        Args:
            X_train, y_train: Dane treningowe
            X_test, y_test: Dane testowe
            num_epochs: Liczba epok
            checkpoint_dir: Folder na best_model.pkl
        """
        y_train = np.ravel(y_train)

        print(f"\n🚀 Rozpoczynam trening MLPRegressor ({num_epochs} epok)...")
        progress = tqdm(range(num_epochs), desc="Trening", unit="epoka")
        for epoch in progress:
            self.model.partial_fit(X_train, y_train)

            train_loss = self.score(X_train, y_train)
            val_loss = self.score(X_test, y_test)
            self.train_losses.append(train_loss)
            self.val_losses.append(val_loss)
            progress.set_postfix(train_mse=f"{train_loss:.4f}", val_mse=f"{val_loss:.4f}")

            if val_loss < self.best_val_loss:
                self.best_val_loss = val_loss
                if checkpoint_dir:
                    self.save_checkpoint(str(Path(checkpoint_dir) / 'best_model.pkl'), epoch)

        print(f"\n✅ Trening zakończony! Best val MSE: {self.best_val_loss:.4f}")

    def save_checkpoint(self, path: str, epoch: Optional[int] = None):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'wb') as f:
            pickle.dump({'epoch': epoch, 'model': self.model}, f)

    def load_checkpoint(self, path: str) -> dict:
        with open(path, 'rb') as f:
            checkpoint = pickle.load(f)
        self.model = checkpoint['model']
        print(f"✅ Załadowano checkpoint z: {path}")
        return checkpoint
