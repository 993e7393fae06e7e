import pytest
from pydantic import ValidationError

from fortstats.config.settings import Settings


def test_defaults() -> None:
    settings = Settings()

    assert settings.default_points_per_cap == 10
    assert settings.conc_duration_seconds == 10
    assert settings.unknown_value_placeholder == "(not found)"
    assert settings.max_event_details == 0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORTSTATS_POINTS_PER_CAP", "25")
    monkeypatch.setenv("FORTSTATS_MVP_WEIGHT_BONUS_CAPTURE", "3.5")

    settings = Settings()

    assert settings.default_points_per_cap == 25
    assert settings.mvp_weight_bonus_capture == 3.5


def test_fields_accept_their_python_names() -> None:
    settings = Settings(conc_duration_seconds=8, medic_conc_duration_seconds=4)

    assert settings.conc_duration_for(is_medic=False) == 8
    assert settings.conc_duration_for(is_medic=True) == 4


def test_negative_detail_cap_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(max_event_details=-1)
