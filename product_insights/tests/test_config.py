from __future__ import annotations

from types import SimpleNamespace

from product_insights.config import DevelopmentConfig, TestingConfig, get_config
from product_insights.credentials import load_service_account_credentials
from product_insights.preference_filter import FilterThresholds


def test_get_config_selects_class_by_name():
    assert isinstance(get_config("testing"), TestingConfig)
    assert isinstance(get_config("unknown-env"), DevelopmentConfig)


def test_thresholds_from_config():
    cfg = SimpleNamespace(
        FILTER_KETO_MAX_CARBS="12",
        FILTER_DIABETIC_MAX_SUGAR=4,
        FILTER_HYPERTENSION_MAX_SODIUM=150,
        FILTER_WEIGHT_LOSS_MAX_CALORIES=250,
        FILTER_MUSCLE_GAIN_MIN_PROTEIN=15,
    )
    t = FilterThresholds.from_config(cfg)
    assert t == FilterThresholds(12.0, 4.0, 150.0, 250.0, 15.0)


def test_default_thresholds():
    t = FilterThresholds()
    assert (t.keto_max_carbs, t.diabetic_max_sugar, t.hypertension_max_sodium) == (10.0, 5.0, 200.0)
    assert (t.weight_loss_max_calories, t.muscle_gain_min_protein) == (300.0, 10.0)


def test_credentials_default_to_adc(monkeypatch):
    monkeypatch.setattr(
        "product_insights.credentials.get_config",
        lambda: SimpleNamespace(GCP_CREDENTIALS_SECRET=""),
    )
    assert load_service_account_credentials() is None


def test_credentials_loaded_from_secret(monkeypatch):
    info = {"client_email": "svc@example.iam.gserviceaccount.com", "type": "service_account"}
    secret_client = SimpleNamespace(
        access_secret_version=lambda request: SimpleNamespace(
            payload=SimpleNamespace(data=b'{"client_email": "svc@example.iam.gserviceaccount.com", "type": "service_account"}')
        )
    )
    seen = {}

    def fake_from_info(data):
        seen["info"] = data
        return "creds"

    monkeypatch.setattr(
        "product_insights.credentials.service_account.Credentials.from_service_account_info",
        fake_from_info,
    )
    assert load_service_account_credentials("projects/p/secrets/s/versions/latest", secret_client) == "creds"
    assert seen["info"] == info


def test_attempt_bound_has_no_env_override():
    assert not hasattr(get_config(), "LLM_MAX_ATTEMPTS")
