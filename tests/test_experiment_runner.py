from collections import Counter

import pytest

from masi_agreement.errors import ConfigurationError
from masi_agreement.experiment.runner import AgreementExperiment, run_experiment


def _experiment(backend, **kwargs):
    kwargs.setdefault("show_progress", False)
    return AgreementExperiment(backend=backend, **kwargs)


def test_zero_trials_calls_each_coefficient_once(sample_table, fake_backend):
    result = _experiment(fake_backend).run(sample_table, trials=0)
    assert fake_backend.count("alpha") == 1
    assert fake_backend.count("kappa") == 1
    assert result.alpha_null == []
    assert result.kappa_null == []
    assert result.completed_trials == 0
    assert not result.partial
    assert result.observed_alpha.value == pytest.approx(6 / 11)


def test_observed_uses_real_table(sample_table, fake_backend):
    _experiment(fake_backend, confidence_level=0.9).run(sample_table, trials=0)
    name, ratings, weights, labels, level = fake_backend.calls[0]
    assert ratings is sample_table
    assert labels == ("l1", "l1, l2", "l2")
    assert level == 0.9


def test_null_samples_have_one_value_per_trial(sample_table, fake_backend):
    result = _experiment(fake_backend).run(sample_table, trials=7, seed=3)
    assert len(result.alpha_null) == 7
    assert len(result.kappa_null) == 7
    assert result.completed_trials == result.requested_trials == 7
    assert fake_backend.count("alpha") == 8
    assert fake_backend.count("kappa") == 8
    assert all(v is not None for v in result.alpha_null)


def test_every_call_shares_one_weight_matrix(sample_table, fake_backend):
    _experiment(fake_backend).run(sample_table, trials=5, seed=1)
    weights = [call[2] for call in fake_backend.calls]
    assert all(w is weights[0] for w in weights)
    assert len({call[3] for call in fake_backend.calls}) == 1


def test_trials_see_reshuffled_tables(sample_table, fake_backend):
    _experiment(fake_backend).run(sample_table, trials=5, seed=1)
    source = Counter(sample_table.to_numpy(dtype=object).ravel().tolist())
    for _, ratings, _, _, _ in fake_backend.calls[2:]:
        assert ratings is not sample_table
        assert ratings.shape == sample_table.shape
        assert Counter(ratings.to_numpy(dtype=object).ravel().tolist()) == source


def test_seeded_runs_are_reproducible(sample_table, make_backend):
    first = _experiment(make_backend()).run(sample_table, trials=10, seed=42)
    second = _experiment(make_backend()).run(sample_table, trials=10, seed=42)
    assert first.alpha_null == second.alpha_null
    assert first.kappa_null == second.kappa_null


def test_thread_pool_matches_sequential(sample_table, make_backend):
    sequential = _experiment(make_backend()).run(sample_table, trials=12, seed=5)
    pooled = _experiment(make_backend(), workers=3, executor="thread").run(
        sample_table, trials=12, seed=5
    )
    assert pooled.alpha_null == sequential.alpha_null
    assert pooled.kappa_null == sequential.kappa_null
    assert pooled.completed_trials == 12


def test_process_pool_matches_sequential_with_irrcac(sample_table):
    sequential = AgreementExperiment(show_progress=False).run(
        sample_table, trials=4, seed=3
    )
    pooled = AgreementExperiment(show_progress=False, workers=2, executor="process").run(
        sample_table, trials=4, seed=3
    )
    assert pooled.completed_trials == 4
    assert not pooled.failures
    assert pooled.alpha_null == sequential.alpha_null
    assert pooled.kappa_null == sequential.kappa_null
    assert pooled.observed_alpha.value == sequential.observed_alpha.value


def test_default_backend_rejects_unsupported_confidence_level():
    with pytest.raises(ConfigurationError, match="irrCAC"):
        AgreementExperiment(confidence_level=0.8)


def test_failed_trials_are_recorded_not_dropped(sample_table, make_backend):
    backend = make_backend(fail_kappa_every=2)
    result = _experiment(backend).run(sample_table, trials=4, seed=0)
    assert result.completed_trials == 4
    assert len(result.kappa_null) == 4
    assert result.kappa_null[1] is None and result.kappa_null[3] is None
    assert result.kappa_null[0] is not None
    assert all(v is not None for v in result.alpha_null)
    assert [(f.trial, f.coefficient) for f in result.failures] == [
        (1, "fleiss_kappa"),
        (3, "fleiss_kappa"),
    ]
    assert "ValueError" in result.failures[0].error
    assert result.partial


def test_nan_estimates_count_as_failures(sample_table, make_backend):
    backend = make_backend(nan_alpha_every=1)
    result = _experiment(backend).run(sample_table, trials=3, seed=0)
    assert result.alpha_null == [None, None, None]
    assert len(result.failures) == 3
    assert result.partial


def test_observed_failure_propagates(sample_table):
    class Broken:
        def compute_alpha(self, *args):
            raise RuntimeError("library exploded")

        def compute_kappa(self, *args):
            raise RuntimeError("library exploded")

    with pytest.raises(RuntimeError):
        _experiment(Broken()).run(sample_table, trials=3)


def test_time_budget_returns_partial_result(sample_table, make_backend):
    backend = make_backend(delay=0.1)
    result = _experiment(backend, time_budget=0.15).run(sample_table, trials=20, seed=0)
    assert result.completed_trials < 20
    assert len(result.alpha_null) == result.completed_trials
    assert result.budget_exhausted
    assert result.partial


def test_time_budget_with_thread_pool(sample_table, make_backend):
    backend = make_backend(delay=0.1)
    result = _experiment(backend, workers=2, executor="thread", time_budget=0.15).run(
        sample_table, trials=30, seed=0
    )
    assert result.completed_trials < 30
    assert result.partial


def test_invalid_settings():
    with pytest.raises(ConfigurationError):
        AgreementExperiment(backend=object(), confidence_level=1.5)
    with pytest.raises(ConfigurationError):
        AgreementExperiment(backend=object(), workers=0)
    with pytest.raises(ConfigurationError):
        AgreementExperiment(backend=object(), executor="gpu")
    with pytest.raises(ConfigurationError):
        AgreementExperiment(backend=object(), time_budget=0)


def test_negative_trials_rejected(sample_table, fake_backend):
    with pytest.raises(ConfigurationError):
        _experiment(fake_backend).run(sample_table, trials=-1)


def test_run_experiment_wrapper(sample_table, fake_backend):
    result = run_experiment(
        sample_table, trials=2, seed=9, backend=fake_backend, show_progress=False
    )
    assert result.seed == 9
    assert set(result.observed) == {"krippendorff_alpha", "fleiss_kappa"}
    assert len(result.null_samples["fleiss_kappa"]) == 2
