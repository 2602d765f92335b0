import json

import numpy as np

from pipeline import step1_upload_features, step2_prepare_training_data, step3_train_model, step4_export_model
from solr_ltr.ltr import NN_MODEL_CLASS
from src.model.sklearn_training import SklearnGoaTrainer, create_sklearn_model
from tests.helpers import features_doc


def test_step1_replaces_feature_store(fake_client):
    movies = [{'db_id': '1', 'genres': ['Drama'], 'spoken_languages': [{'name': 'English'}]}]
    client = fake_client({
        ('GET', '/select'): {'response': {'docs': movies}},
        ('GET', '/schema/feature-store'): {'featureStores': ['tmdb_features']},
    })

    assert step1_upload_features(client, 'tmdb_features', replace=True)

    calls = [(c['method'], c['url'].rsplit('/solr/tmdb/', 1)[1]) for c in client.session.calls]
    assert calls[-2:] == [('DELETE', 'schema/feature-store/tmdb_features'), ('PUT', 'schema/feature-store')]
    uploaded = [f['name'] for f in client.session.calls[-1]['json']]
    assert uploaded[:2] == ['genres_Drama', 'spoken_languages_English']
    assert uploaded[-3:] == ['gender', 'age', 'occupation']


def test_step4_exports_and_uploads_sklearn_model(tmp_path, fake_client):
    names = ['genres_Drama', 'genres_Comedy', 'popularity', 'vote_average', 'runtime', 'revenue', 'budget',
             'gender', 'age', 'occupation']
    data_dir, checkpoint_dir = tmp_path / "prepared", tmp_path / "checkpoints"
    data_dir.mkdir()
    (data_dir / "normalization.json").write_text(json.dumps({'mins': [0.0] * 8, 'maxs': [1.0] * 8}))

    rng = np.random.default_rng(0)
    trainer = SklearnGoaTrainer(create_sklearn_model(hidden_layer_sizes=(4,), batch_size=10, random_state=0))
    trainer.model.partial_fit(rng.random((20, len(names))), rng.random(20))
    trainer.save_checkpoint(str(checkpoint_dir / "best_model.pkl"))

    client = fake_client({
        ('GET', '/schema/feature-store/tmdb_features'): {'features': [{'name': n} for n in names]},
        ('GET', '/schema/model-store'): {'models': [{'name': 'ltrGoaModel'}]},
    })

    assert step4_export_model(client, 'sklearn', 'tmdb_features', 'ltrGoaModel',
                              str(data_dir), str(checkpoint_dir), upload=True)

    upload = client.session.calls[-1]
    assert upload['method'] == 'PUT'
    model = upload['json']
    assert model['class'] == NN_MODEL_CLASS
    assert [f['name'] for f in model['features']] == names
    assert 'norm' not in model['features'][1] and 'norm' in model['features'][2]
    assert [l['activation'] for l in model['params']['layers']] == ['relu', 'identity']
    assert json.loads((checkpoint_dir / "ltrGoaModel.json").read_text()) == model
    assert any(c['method'] == 'DELETE' for c in client.session.calls)


def test_step4_reports_failure(tmp_path, fake_client):
    assert not step4_export_model(fake_client(), 'torch', 'tmdb_features', 'ltrGoaModel',
                                  str(tmp_path), str(tmp_path), upload=False)


def test_steps_2_and_3_train_torch_model(tmp_path, write_csv, fake_client):
    users_csv = write_csv("users.csv", "userId,gender,age,occupation,zip\n1,M,25,4,1\n2,F,35,7,2\n")
    ratings_csv = write_csv("ratings.csv", "userId,movieId,rating\n" + "".join(
        f"{user_id},{movie_id},2.0\n" for user_id in (1, 2) for movie_id in range(1, 11)))
    docs = [features_doc(str(m), [float(m % 2)] + [float(m)] * 10) for m in range(1, 11)]
    client = fake_client({('GET', '/select'): {'response': {'docs': docs}}})
    data_dir, checkpoint_dir = tmp_path / "prepared", tmp_path / "checkpoints" / "torch"

    assert step2_prepare_training_data(client, 'tmdb_features', users_csv, ratings_csv, str(data_dir), seed=0)
    assert (data_dir / "X_train.npy").exists() and (data_dir / "normalization.json").exists()

    assert step3_train_model('torch', str(data_dir), str(checkpoint_dir), num_epochs=2, seed=0, hidden_dims=[4])

    assert (checkpoint_dir / "best_model.pth").exists()
    assert (checkpoint_dir / "history_torch.png").exists()
    assert list((tmp_path / "checkpoints" / "runs").glob("training_*/graph/events.out.tfevents.*"))


def test_step2_reports_missing_csv(tmp_path, fake_client):
    assert not step2_prepare_training_data(fake_client(), 'tmdb_features', str(tmp_path / "users.csv"),
                                           str(tmp_path / "ratings.csv"), str(tmp_path / "out"), seed=0)
