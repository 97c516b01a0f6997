import yaml
import pytest

from masi_agreement import config as config_module
from masi_agreement.config import ExperimentConfig
from masi_agreement.errors import ConfigurationError
from masi_agreement.infra import env as env_module


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.setattr(env_module, "_ENV_LOADED", True)
    for name in list(config_module._ENV_FIELDS):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = ExperimentConfig()
    assert cfg.separator == ", "
    assert cfg.trials == 500
    assert cfg.confidence_level == 0.95
    assert cfg.executor == "process"


def test_from_yaml(tmp_path):
    path = tmp_path / "experiment.yaml"
    path.write_text(
        yaml.dump(
            {
                "experiment": {"trials": 50, "seed": 7, "workers": 2, "executor": "thread"},
                "matrix": {"separator": ";", "jaccard_only": True, "empty_fallback": 0.0},
                "output_dir": "results",
            }
        )
    )

    cfg = ExperimentConfig.from_yaml(str(path))
    assert cfg.trials == 50
    assert cfg.seed == 7
    assert cfg.workers == 2
    assert cfg.separator == ";"
    assert cfg.jaccard_only is True
    assert cfg.empty_fallback == 0.0
    assert cfg.output_dir == "results"


def test_from_yaml_rejects_unknown_keys(tmp_path):
    path = tmp_path / "experiment.yaml"
    path.write_text(yaml.dump({"experiment": {"trails": 10}}))
    with pytest.raises(ConfigurationError, match="trails"):
        ExperimentConfig.from_yaml(str(path))


def test_validate_reports_every_problem(tmp_path):
    path = tmp_path / "experiment.yaml"
    path.write_text(
        yaml.dump({"experiment": {"trials": -1, "confidence_level": 1.2, "workers": 0}})
    )
    with pytest.raises(ConfigurationError) as excinfo:
        ExperimentConfig.from_yaml(str(path))
    message = str(excinfo.value)
    assert "trials" in message
    assert "confidence_level" in message
    assert "workers" in message


def test_from_env(monkeypatch):
    monkeypatch.setenv("MASI_TRIALS", "25")
    monkeypatch.setenv("MASI_SEED", "3")
    monkeypatch.setenv("MASI_EXECUTOR", "thread")
    monkeypatch.setenv("MASI_TIME_BUDGET", "12.5")
    cfg = ExperimentConfig.from_env()
    assert cfg.trials == 25
    assert cfg.seed == 3
    assert cfg.executor == "thread"
    assert cfg.time_budget == 12.5


def test_from_env_invalid_number(monkeypatch):
    monkeypatch.setenv("MASI_TRIALS", "many")
    with pytest.raises(ConfigurationError, match="MASI_TRIALS"):
        ExperimentConfig.from_env()


def test_override_skips_none_and_validates():
    cfg = ExperimentConfig(trials=10).override(trials=None, seed=4)
    assert cfg.trials == 10
    assert cfg.seed == 4
    with pytest.raises(ConfigurationError):
        cfg.override(executor="gpu")


def test_experiment_kwargs():
    kwargs = ExperimentConfig(workers=3).experiment_kwargs()
    assert kwargs["workers"] == 3
    assert "trials" not in kwargs
