import numpy as np
import pytest

from densenets import (
    ConcurrentTrainingError,
    DataPoint,
    Dataset,
    DimensionMismatchError,
    EmptyDatasetError,
    InvalidHyperparameterError,
    NeuralNetworkModel,
)
from densenets.data import from_arrays, get_dataset


def _sum_dataset():
    rows = [[0.1, 0.2], [0.2, 0.1], [0.3, 0.3], [0.05, 0.15]]
    points = [
        DataPoint(features={"a": a, "b": b}, target=a + b, point_id=f"s{idx}")
        for idx, (a, b) in enumerate(rows)
    ]
    return Dataset(points, task_type="regression", dataset_id="sum")


_SUM_OPTIONS = {
    "hidden_layers": [4],
    "epochs": 50,
    "learning_rate": 0.01,
    "batch_size": 2,
    "dropout_rate": 0.0,
    "seed": 0,
}


def test_small_regression_run_converges():
    model = NeuralNetworkModel()
    result = model.train(_sum_dataset(), _SUM_OPTIONS)

    assert result.success
    assert result.error is None
    assert result.converged
    assert result.stop_epoch is None
    assert result.epochs_completed == 50
    assert len(result.loss_history) == 50
    assert np.isfinite(result.final_loss)
    assert result.final_loss < result.loss_history[0]
    assert result.training_data == {
        "layers": 3,
        "layer_dims": [2, 2, 4, 1],
        "total_parameters": 2 * 3 + 4 * 3 + 1 * 5,
        "training_samples": 4,
        "final_learning_rate": 0.01,
    }
    assert model.network.architecture == "2->4->1"


def test_training_metrics_mirror_accuracy():
    result = NeuralNetworkModel().train(_sum_dataset(), _SUM_OPTIONS)
    metrics = result.metrics
    assert metrics.precision == metrics.recall == metrics.f1_score == metrics.accuracy
    assert metrics.loss >= 0.0
    assert {"mae", "mse", "rmse"} <= set(metrics.custom_metrics)


def test_empty_dataset_fails_without_building():
    model = NeuralNetworkModel()
    result = model.train(Dataset([], task_type="regression"), _SUM_OPTIONS)

    assert not result.success
    assert isinstance(result.error, EmptyDatasetError)
    assert not model.is_built
    with pytest.raises(EmptyDatasetError):
        result.raise_for_error()


def test_invalid_hyperparameters_fail_without_building():
    model = NeuralNetworkModel()
    result = model.train(_sum_dataset(), {**_SUM_OPTIONS, "learning_rate": 2.0})

    assert not result.success
    assert isinstance(result.error, InvalidHyperparameterError)
    assert "Parameter validation failed" in result.message
    assert not model.is_built


def test_empty_hidden_layers_build_input_to_output():
    model = NeuralNetworkModel()
    result = model.train(_sum_dataset(), {**_SUM_OPTIONS, "hidden_layers": [], "epochs": 2})

    assert result.success
    assert model.network.architecture == "2->1"
    assert result.training_data["layer_dims"] == [2, 2, 1]


@pytest.mark.parametrize("hidden", [8, "8", None])
def test_non_list_hidden_layers_fail_as_a_result(hidden):
    model = NeuralNetworkModel()
    result = model.train(_sum_dataset(), {**_SUM_OPTIONS, "hidden_layers": hidden})

    assert not result.success
    assert isinstance(result.error, InvalidHyperparameterError)
    assert "hidden_layers" in result.message
    assert not model.is_built


def test_three_class_network_predicts_known_classes():
    dataset = get_dataset("blobs", n_per_class=8, n_classes=3, seed=1)
    model = NeuralNetworkModel()
    result = model.train(
        dataset,
        {"hidden_layers": [8], "epochs": 10, "learning_rate": 0.1, "batch_size": 4,
         "dropout_rate": 0.0, "seed": 5},
    )
    assert result.success
    assert model.network.output_dim == 3

    predicted = model.predict(dataset, include_probabilities=True)
    assert predicted.success
    assert len(predicted.predictions) == len(dataset)
    for prediction in predicted.predictions:
        assert prediction.value in {0, 1, 2}
        assert set(prediction.probabilities) == {"class_0", "class_1", "class_2"}
        assert prediction.confidence == pytest.approx(max(prediction.probabilities.values()))
    assert "macro_f1" in result.metrics.custom_metrics


@pytest.mark.parametrize(
    "task_type, targets, expected",
    [
        ("regression", [0.2, 0.4, 0.6], 1),
        ("classification", [0, 1, 0], 2),
        ("classification", [0, 0, 0], 1),
    ],
)
def test_output_size_follows_task(task_type, targets, expected):
    dataset = from_arrays(np.array([[0.1], [0.5], [0.9]]), targets, task_type=task_type)
    model = NeuralNetworkModel()
    model.train(dataset, {"hidden_layers": [2], "epochs": 1, "seed": 0})
    assert model.network.output_dim == expected


def test_predict_before_training_is_a_dimension_mismatch():
    result = NeuralNetworkModel().predict(_sum_dataset())
    assert not result.success
    assert isinstance(result.error, DimensionMismatchError)
    assert "Model not trained" in result.message


def test_predict_with_wrong_feature_count():
    model = NeuralNetworkModel()
    model.train(_sum_dataset(), _SUM_OPTIONS)
    wide = from_arrays(np.array([[0.1, 0.2, 0.3]]), None, task_type="regression")

    result = model.predict(wide)
    assert not result.success
    assert isinstance(result.error, DimensionMismatchError)
    with pytest.raises(DimensionMismatchError):
        result.raise_for_error()


def test_prediction_reuses_training_feature_order():
    model = NeuralNetworkModel()
    model.train(_sum_dataset(), _SUM_OPTIONS)
    forward = Dataset([DataPoint({"a": 0.1, "b": 0.3})])
    reordered = Dataset([DataPoint({"extra": 9.0, "b": 0.3, "a": 0.1})])

    first = model.predict(forward).predictions[0]
    second = model.predict(reordered).predictions[0]
    assert first.value == second.value
    assert 0.8 <= first.confidence < 0.99


def test_predict_on_empty_dataset():
    model = NeuralNetworkModel()
    model.train(_sum_dataset(), _SUM_OPTIONS)
    result = model.predict(Dataset([]))
    assert isinstance(result.error, EmptyDatasetError)


def test_evaluate_reports_accuracy_based_loss():
    dataset = get_dataset("blobs", n_per_class=6, n_classes=2, seed=3)
    model = NeuralNetworkModel()
    model.train(dataset, {"hidden_layers": [4], "epochs": 5, "learning_rate": 0.1,
                          "dropout_rate": 0.0, "seed": 2})

    evaluation = model.evaluate(dataset)
    metrics = evaluation.metrics
    assert evaluation.success
    assert metrics.loss == pytest.approx(1.0 - metrics.accuracy)
    assert metrics.precision == metrics.accuracy
    assert evaluation.report.startswith("Neural Network Evaluation Report\n")
    assert f"Test Samples: {len(dataset)}" in evaluation.report
    assert f"Network Architecture: {model.network.architecture}" in evaluation.report


def test_evaluate_before_training():
    evaluation = NeuralNetworkModel().evaluate(_sum_dataset())
    assert not evaluation.success
    assert isinstance(evaluation.error, DimensionMismatchError)


def test_identical_seeds_reproduce_bit_for_bit():
    model_a = NeuralNetworkModel()
    model_b = NeuralNetworkModel()
    result_a = model_a.train(_sum_dataset(), _SUM_OPTIONS)
    result_b = model_b.train(_sum_dataset(), _SUM_OPTIONS)

    assert result_a.loss_history == result_b.loss_history
    assert result_a.final_loss == result_b.final_loss
    values_a = [p.value for p in model_a.predict(_sum_dataset()).predictions]
    values_b = [p.value for p in model_b.predict(_sum_dataset()).predictions]
    assert values_a == values_b


def test_retraining_rebuilds_the_network():
    model = NeuralNetworkModel()
    model.train(_sum_dataset(), _SUM_OPTIONS)
    first_network = model.network

    wider = from_arrays(np.random.default_rng(0).random((5, 3)), [0.1] * 5,
                        task_type="regression")
    model.train(wider, {**_SUM_OPTIONS, "epochs": 2})
    assert model.network is not first_network
    assert model.network.input_dim == 3


def test_concurrent_training_is_rejected():
    model = NeuralNetworkModel()
    dataset = _sum_dataset()

    def _nested_train(epoch, metrics):
        model.train(dataset, _SUM_OPTIONS)

    with pytest.raises(ConcurrentTrainingError):
        model.train(dataset, {**_SUM_OPTIONS, "epochs": 2}, callbacks=[_nested_train])

    # the lock is released once the failed run unwinds
    result = model.train(dataset, {**_SUM_OPTIONS, "epochs": 2})
    assert result.success


def test_evaluate_tolerates_missing_class_targets():
    train_set = Dataset(
        [DataPoint({"a": 0.1}, 0), DataPoint({"a": 0.9}, 1)], task_type="classification"
    )
    model = NeuralNetworkModel()
    model.train(train_set, {"hidden_layers": [2], "epochs": 2, "dropout_rate": 0.0, "seed": 0})

    evaluation = model.evaluate(
        Dataset([DataPoint({"a": 1.0}, target=float("nan"))], task_type="classification")
    )
    assert evaluation.success
    assert evaluation.metrics.accuracy == 0.0
    assert evaluation.metrics.loss == 1.0
