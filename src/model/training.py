"""
Proces trenowania modelu (PyTorch).

Zawiera:
- Przygotowanie danych (DataLoader)
- Pętla treningowa ze stałą liczbą epok
- Walidacja (MSE)
- Zapisywanie i ładowanie checkpointów
- TensorBoard logging
"""

import torch
import torch.nn as nn
import torch.optim as optim
from torch.utils.data import DataLoader, TensorDataset
from torch.utils.tensorboard import SummaryWriter
import numpy as np
from pathlib import Path
from tqdm import tqdm
import time
from typing import Optional, Tuple

from src.model.model import create_model


class GoaTrainer:
    """Trainer dla modelu GoaRatingNet."""

    def __init__(
        self,
        model: nn.Module,
        device: str = 'cuda' if torch.cuda.is_available() else 'cpu',
        learning_rate: float = 0.01,
        momentum: float = 0.001,
        lr_step: int = 3000,
        lr_factor: float = 0.9
    ):
        """
        Args:
            model: Model PyTorch
            device: 'cuda' lub 'cpu'
            learning_rate: Learning rate dla SGD
            momentum: Momentum dla SGD
            lr_step: Co ile kroków (batchy) zmniejszać learning rate
            lr_factor: Mnożnik learning rate co lr_step kroków
        """
        self.model = model.to(device)
        self.device = device

        self.optimizer = optim.SGD(
            self.model.parameters(),
            lr=learning_rate,
            momentum=momentum
        )
        self.criterion = nn.MSELoss()

        # Scheduler krokowy - wywoływany po każdym batchu
        self.scheduler = optim.lr_scheduler.StepLR(
            self.optimizer,
            step_size=lr_step,
            gamma=lr_factor
        )

        self.train_losses = []
        self.val_losses = []
        self.best_val_loss = float('inf')

        print(f"✅ Trainer zainicjalizowany")
        print(f"   Device: {device}")
        print(f"   Model parameters: {sum(p.numel() for p in model.parameters()):,}")
        print(f"   Learning rate: {learning_rate}")

    def train_epoch(self, train_loader: DataLoader) -> float:
        """
        Trenuje model przez jedną epokę.

        Returns:
            Średni loss na epoce
        """
        self.model.train()
        total_loss = 0
        num_batches = 0

        for X_batch, y_batch in train_loader:
            X_batch = X_batch.to(self.device)
            y_batch = y_batch.to(self.device)

            self.optimizer.zero_grad()
            predictions = self.model(X_batch)
            loss = self.criterion(predictions, y_batch)
            loss.backward()
            self.optimizer.step()
            self.scheduler.step()

            total_loss += loss.item()
            num_batches += 1

        return total_loss / num_batches

    def predict(self, loader: DataLoader) -> np.ndarray:
        """Zwraca przewidywania modelu dla całego loadera (n, 1)."""
        self.model.eval()
        all_predictions = []
        with torch.no_grad():
            for X_batch, _ in loader:
                predictions = self.model(X_batch.to(self.device))
                all_predictions.append(predictions.cpu().numpy())
        return np.concatenate(all_predictions)

    def score(self, loader: DataLoader) -> float:
        """MSE na zbiorze z loadera (loader bez shuffle)."""
        predictions = self.predict(loader)
        targets = np.concatenate([y_batch.numpy() for _, y_batch in loader])
        return float(np.mean((predictions - targets) ** 2))

    def train(
        self,
        train_loader: DataLoader,
        val_loader: DataLoader,
        num_epochs: int = 100,
        checkpoint_dir: Optional[str] = None,
        tensorboard_dir: Optional[str] = None,
        checkpoint_every: int = 10
    ):
        """
        Główna pętla treningowa.

        Args:
            train_loader: DataLoader treningowy
            val_loader: DataLoader testowy
            num_epochs: Liczba epok
            checkpoint_dir: Folder do zapisywania checkpointów
            tensorboard_dir: Folder dla TensorBoard
            checkpoint_every: Co ile epok zapisywać checkpoint
        """
        writer = None
        if tensorboard_dir:
            writer = SummaryWriter(tensorboard_dir)
            print(f"📊 TensorBoard: {tensorboard_dir}")

        if checkpoint_dir:
            checkpoint_path = Path(checkpoint_dir)
            checkpoint_path.mkdir(parents=True, exist_ok=True)

        print(f"\n🚀 Rozpoczynam trening ({num_epochs} epok)...")
        start_time = time.time()

        progress = tqdm(range(num_epochs), desc="Trening", unit="epoka")
        for epoch in progress:
            train_loss = self.train_epoch(train_loader)
            val_loss = self.score(val_loader)

            self.train_losses.append(train_loss)
            self.val_losses.append(val_loss)

            if writer:
                writer.add_scalar('Loss/train', train_loss, epoch)
                writer.add_scalar('Loss/val', val_loss, epoch)
                writer.add_scalar('LR', self.optimizer.param_groups[0]['lr'], epoch)

            progress.set_postfix(train_mse=f"{train_loss:.4f}", val_mse=f"{val_loss:.4f}")

            if val_loss < self.best_val_loss:
                self.best_val_loss = val_loss
                if checkpoint_dir:
                    self.save_checkpoint(str(checkpoint_path / 'best_model.pth'), epoch, val_loss)

            if checkpoint_dir and (epoch + 1) % checkpoint_every == 0:
                self.save_checkpoint(str(checkpoint_path / f'checkpoint_epoch_{epoch+1}.pth'), epoch, val_loss)

        total_time = time.time() - start_time

        print(f"\n✅ Trening zakończony!")
        print(f"   Czas: {total_time/60:.1f} min")
        print(f"   Best val MSE: {self.best_val_loss:.4f}")
        if self.train_losses:
            print(f"   Final train MSE: {self.train_losses[-1]:.4f}")
            print(f"   Final val MSE: {self.val_losses[-1]:.4f}")

        if writer:
            writer.close()

    def save_checkpoint(self, path: str, epoch: int, val_loss: Optional[float] = None):
        """Zapisuje model, stan optymalizatora i architekturę."""
        torch.save({
            'epoch': epoch,
            'model_state_dict': self.model.state_dict(),
            'optimizer_state_dict': self.optimizer.state_dict(),
            'scheduler_state_dict': self.scheduler.state_dict(),
            'val_loss': val_loss,
            'input_dim': self.model.input_dim,
            'hidden_dims': self.model.hidden_dims,
        }, path)

    def load_checkpoint(self, checkpoint_path: str):
        """Ładuje checkpoint (razem ze stanem optymalizatora)."""
        checkpoint = torch.load(checkpoint_path, map_location=self.device, weights_only=False)
        self.model.load_state_dict(checkpoint['model_state_dict'])
        self.optimizer.load_state_dict(checkpoint['optimizer_state_dict'])
        if 'scheduler_state_dict' in checkpoint:
            self.scheduler.load_state_dict(checkpoint['scheduler_state_dict'])
        print(f"✅ Załadowano checkpoint z: {checkpoint_path}")
        return checkpoint

    def sanity_check(self, k: int, loader: DataLoader, y: np.ndarray):
        """Wypisuje MSE na zbiorze testowym i pierwsze k przewidywań obok prawdziwych ocen."""
        score = self.score(loader)
        predictions = self.predict(loader)[:k].flatten()
        ground_truth = np.asarray(y)[:k].flatten()

        print("Score on Test Set: ")
        print(f"[mse {score:.7f}]")
        print("\nPredictions: ")
        print(np.round(predictions, 7).tolist())
        print("\nGround Truth: ")
        print(ground_truth.tolist())
        return score, predictions, ground_truth


def load_model(checkpoint_path: str, device: str = 'cpu') -> nn.Module:
    """Odtwarza model z checkpointu (bez optymalizatora), w trybie eval."""
    checkpoint = torch.load(checkpoint_path, map_location=device, weights_only=False)
    if 'input_dim' not in checkpoint:
        raise ValueError("Checkpoint modelu jest niekompatybilny (brak 'input_dim').")

    model = create_model(checkpoint['input_dim'], hidden_dims=checkpoint.get('hidden_dims'))
    model.load_state_dict(checkpoint['model_state_dict'])
    model.to(device)
    model.eval()
    return model


def create_dataloaders(
    X_train: np.ndarray,
    y_train: np.ndarray,
    X_val: np.ndarray,
    y_val: np.ndarray,
    batch_size: int = 2000
) -> Tuple[DataLoader, DataLoader]:
    """
    Tworzy DataLoadery.

    Args:
        X_train, y_train: Dane treningowe (y w kształcie (n, 1))
        X_val, y_val: Dane testowe
        batch_size: Rozmiar batcha

    Returns:
        (train_loader, val_loader)
    """
    train_dataset = TensorDataset(
        torch.FloatTensor(X_train),
        torch.FloatTensor(np.asarray(y_train).reshape(len(y_train), -1))
    )
    val_dataset = TensorDataset(
        torch.FloatTensor(X_val),
        torch.FloatTensor(np.asarray(y_val).reshape(len(y_val), -1))
    )

    train_loader = DataLoader(train_dataset, batch_size=batch_size, shuffle=True, num_workers=0)
    val_loader = DataLoader(val_dataset, batch_size=batch_size, shuffle=False, num_workers=0)

    return train_loader, val_loader
