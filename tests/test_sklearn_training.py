import numpy as np

from src.model.sklearn_training import SklearnGoaTrainer, create_sklearn_model


def make_data(n=60, dim=5, seed=0):
    rng = np.random.default_rng(seed)
    X = rng.random((n, dim))
    y = (X.mean(axis=1) * 5).reshape(-1, 1)
    return X, y


def test_default_model_configuration():
    model = create_sklearn_model()
    assert model.hidden_layer_sizes == (512, 128, 16)
    assert model.activation == 'relu'
    assert model.solver == 'sgd'
    assert model.batch_size == 200


def test_train_fixed_epochs_and_checkpoint(tmp_path):
    X, y = make_data()
    trainer = SklearnGoaTrainer(create_sklearn_model(hidden_layer_sizes=(8, 4), batch_size=20, random_state=0))

    trainer.train(X[:45], y[:45], X[45:], y[45:], num_epochs=4, checkpoint_dir=str(tmp_path))

    assert len(trainer.train_losses) == 4
    assert trainer.best_val_loss == min(trainer.val_losses)
    assert trainer.predict(X[:3]).shape == (3, 1)

    restored = SklearnGoaTrainer()
    checkpoint = restored.load_checkpoint(str(tmp_path / "best_model.pkl"))
    assert checkpoint['epoch'] in range(4)
    np.testing.assert_allclose(restored.predict(X[45:]).ravel(),
                               restored.model.predict(X[45:]))
