"""
Główny pipeline: od cech w Solr do modelu LTR "ltrGoaModel" (Gender/Occupation/Age).

Przepływ:
1. Wczytanie konfiguracji Solr z .env.
2. Krok 1: Zbudowanie i wysłanie cech do feature store.
3. Krok 2: Przygotowanie danych (cechy z Solr + users.csv + ratings.csv).
4. Krok 3: Trenowanie sieci (PyTorch albo scikit-learn).
5. Krok 4: Eksport wag i wysłanie modelu NeuralNetworkModel do Solr.
"""

import sys
import argparse
import json
import os
import time
import traceback
from pathlib import Path

import matplotlib
import numpy as np
from dotenv import load_dotenv

from solr_ltr.ltr import COLL_FIELDS, build_features, build_nn_model
from solr_ltr.solr_client import SolrClient

project_root = Path(__file__).parent


def banner(title: str):
    print("\n" + "="*50 + f"\n{title}\n" + "="*50)


def step1_upload_features(client: SolrClient, store: str, replace: bool) -> bool:
    banner("KROK 1: Cechy LTR (feature store)")
    try:
        movies = client.fetch_movies(COLL_FIELDS)
        features = build_features(store, movies)
        print(f"   Zbudowano {len(features)} cech z {len(movies)} filmów")

        if replace and store in client.list_feature_stores():
            client.delete_feature_store(store)
        client.upload_features(features)
        print(f"✅ Krok 1 zakończony.")
        return True
    except Exception as e:
        print(f"❌ Błąd w kroku 1: {e}")
        traceback.print_exc()
        return False


def step2_prepare_training_data(client: SolrClient, store: str, users_csv: str, ratings_csv: str,
                                output_dir: str, seed: int) -> bool:
    banner("KROK 2: Przygotowanie danych")
    from src.data_matching.prepare_training_data import DataPreparer
    try:
        preparer = DataPreparer(users_csv, ratings_csv, client, store=store, seed=seed)
        preparer.save_prepared_data(output_dir)
        print(f"✅ Krok 2 zakończony pomyślnie.")
        return True
    except Exception as e:
        print(f"❌ Błąd w kroku 2: {e}")
        traceback.print_exc()
        return False


def step3_train_model(framework: str, data_dir: str, checkpoint_dir: str, num_epochs: int, seed: int,
                      hidden_dims: list = None) -> bool:
    banner(f"KROK 3: Trenowanie modelu ({framework}, {num_epochs} epok)")
    from src.model.visualization import plot_training_history
    try:
        data_path = Path(data_dir)
        X_train, y_train = np.load(data_path / "X_train.npy"), np.load(data_path / "y_train.npy")
        X_test, y_test = np.load(data_path / "X_test.npy"), np.load(data_path / "y_test.npy")
        print(f"   Zbiór treningowy: {len(X_train)} próbek, testowy: {len(X_test)} próbek")

        if framework == 'torch':
            import torch
            from src.model.model import create_model
            from src.model.training import GoaTrainer, create_dataloaders
            from src.model.visualization import render_model

            torch.manual_seed(seed)
            train_loader, test_loader = create_dataloaders(X_train, y_train, X_test, y_test)
            model = create_model(input_dim=X_train.shape[1], hidden_dims=hidden_dims)
            trainer = GoaTrainer(model)

            runs_dir = Path(checkpoint_dir).parent / "runs" / f"training_{int(time.time())}"
            render_model(model, X_train.shape[1], str(runs_dir / "graph"))
            trainer.train(train_loader, test_loader, num_epochs,
                          checkpoint_dir=checkpoint_dir, tensorboard_dir=str(runs_dir))
            trainer.load_checkpoint(str(Path(checkpoint_dir) / "best_model.pth"))
            trainer.sanity_check(20, test_loader, y_test)
        else:
            from src.model.sklearn_training import SklearnGoaTrainer, create_sklearn_model

            sklearn_kwargs = {"hidden_layer_sizes": hidden_dims} if hidden_dims else {}
            trainer = SklearnGoaTrainer(create_sklearn_model(random_state=seed, **sklearn_kwargs))
            trainer.train(X_train, y_train, X_test, y_test, num_epochs, checkpoint_dir=checkpoint_dir)

        plot_training_history(trainer.train_losses, trainer.val_losses,
                              str(Path(checkpoint_dir) / f"history_{framework}.png"))
        print(f"✅ Krok 3 zakończony pomyślnie.")
        return True
    except Exception as e:
        print(f"❌ Błąd w kroku 3: {e}")
        traceback.print_exc()
        return False


def step4_export_model(client: SolrClient, framework: str, store: str, model_name: str,
                       data_dir: str, checkpoint_dir: str, upload: bool) -> bool:
    banner(f"KROK 4: Eksport modelu {model_name}")
    from src.model.export import get_layers
    try:
        if framework == 'torch':
            from src.model.training import load_model
            model = load_model(str(Path(checkpoint_dir) / "best_model.pth"))
        else:
            from src.model.sklearn_training import SklearnGoaTrainer
            trainer = SklearnGoaTrainer()
            trainer.load_checkpoint(str(Path(checkpoint_dir) / "best_model.pkl"))
            model = trainer.model

        with open(Path(data_dir) / "normalization.json", encoding='utf-8') as f:
            norm = json.load(f)

        features = client.get_features(store)
        solr_model = build_nn_model(store, model_name, features, get_layers(model), norm['mins'], norm['maxs'])

        model_path = Path(checkpoint_dir) / f"{model_name}.json"
        with open(model_path, 'w', encoding='utf-8') as f:
            json.dump(solr_model, f)
        print(f"💾 Zapisano model do: {model_path}")

        if upload:
            if any(m.get('name') == model_name for m in client.list_models()):
                client.delete_model(model_name)
            client.upload_model(solr_model)
        print(f"✅ Krok 4 zakończony pomyślnie.")
        return True
    except Exception as e:
        print(f"❌ Błąd w kroku 4: {e}")
        traceback.print_exc()
        return False


def main():
    parser = argparse.ArgumentParser(description="Pipeline treningu modelu Solr LTR (Gender/Occupation/Age).")
    parser.add_argument('--framework', choices=['torch', 'sklearn'], default='torch', help='Biblioteka do treningu')
    parser.add_argument('--epochs', type=int, default=100, help='Liczba epok treningu')
    parser.add_argument('--users-csv', default=str(project_root / "data" / "users.csv"))
    parser.add_argument('--ratings-csv', default=str(project_root / "data" / "ratings.csv"))
    parser.add_argument('--seed', type=int, default=42)
    parser.add_argument('--skip-features', action='store_true', help='Nie wysyłaj ponownie cech do Solr')
    parser.add_argument('--replace-features', action='store_true', help='Usuń istniejący feature store przed wysłaniem')
    parser.add_argument('--skip-upload', action='store_true', help='Zapisz model tylko lokalnie')
    args = parser.parse_args()

    # --- Konfiguracja ---
    matplotlib.use("Agg")
    load_dotenv(project_root / '.env')
    solr_url = os.getenv("SOLR_URL", "http://localhost:8983/solr")
    solr_core = os.getenv("SOLR_CORE", "tmdb")
    store = os.getenv("LTR_FEATURE_STORE", "tmdb_features")
    model_name = os.getenv("LTR_MODEL_NAME", "ltrGoaModel")

    client = SolrClient(solr_url, solr_core)
    prepared_dir = project_root / "data" / "prepared"
    checkpoint_dir = project_root / "checkpoints" / args.framework

    banner("🎬 START PIPELINE (Solr LTR)")
    print(f"🔎 Solr: {client.core_url} | store: {store} | model: {model_name}")

    # --- Uruchomienie Kroków ---
    if not args.skip_features:
        if not step1_upload_features(client, store, args.replace_features): return 1
    if not step2_prepare_training_data(client, store, args.users_csv, args.ratings_csv,
                                       str(prepared_dir), args.seed): return 1
    if not step3_train_model(args.framework, str(prepared_dir), str(checkpoint_dir), args.epochs, args.seed): return 1
    if not step4_export_model(client, args.framework, store, model_name, str(prepared_dir),
                              str(checkpoint_dir), not args.skip_upload): return 1

    banner("🎉 PIPELINE ZAKOŃCZONY POMYŚLNIE!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
