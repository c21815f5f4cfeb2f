"""
Unit tests for configuration loading.
"""

import json
from decimal import Decimal

import pytest

from configs import ConfigError, ConfigLoader
from decimal_ta.indicators.trend.manager import TrendIndicators


def write_config(directory, payload):
    path = directory / "indicators.json"
    path.write_text(json.dumps(payload) if not isinstance(payload, str) else payload,
                    encoding="utf-8")
    return path


class TestConfigLoader:

    def test_bundled_config_loads(self):
        loader = ConfigLoader()
        assert loader.get_precision() == 6
        assert loader.get_indicator_defaults("rsi")["period"] == 14
        assert "indicators" in loader.get_all_configs()

    def test_missing_file_means_defaults(self, tmp_path):
        loader = ConfigLoader(str(tmp_path))
        assert loader.get_config("indicators") == {}
        assert loader.get_precision() == 6
        assert loader.get_indicator_defaults("sma") == {}

    def test_custom_directory(self, tmp_path):
        write_config(tmp_path, {"precision": 3, "indicators": {"sma": {"period": 4}}})
        loader = ConfigLoader(str(tmp_path))
        assert loader.get_precision() == 3
        assert loader.get_indicator_defaults("sma") == {"period": 4}

    def test_malformed_json(self, tmp_path):
        write_config(tmp_path, "{not json")
        with pytest.raises(ConfigError) as exc:
            ConfigLoader(str(tmp_path))
        assert exc.value.config_name == "indicators"

    @pytest.mark.parametrize("payload", [
        {"precision": -1},
        {"precision": 40},
        {"indicators": {"ichimoku": {"period": 9}}},
        {"indicators": {"sma": {"period": [1, 2]}}},
        {"rounding": "half_up"},
    ])
    def test_schema_violations(self, tmp_path, payload):
        write_config(tmp_path, payload)
        with pytest.raises(ConfigError):
            ConfigLoader(str(tmp_path))

    def test_reload_picks_up_changes(self, tmp_path):
        write_config(tmp_path, {"precision": 2})
        loader = ConfigLoader(str(tmp_path))
        write_config(tmp_path, {"precision": 4})
        loader.reload_config("indicators")
        assert loader.get_precision() == 4

    def test_failed_reload_keeps_previous(self, tmp_path):
        write_config(tmp_path, {"precision": 2})
        loader = ConfigLoader(str(tmp_path))
        write_config(tmp_path, {"precision": "two"})
        with pytest.raises(ConfigError):
            loader.reload_config("indicators")
        assert loader.get_precision() == 2


class TestCategoryFromLoader:

    def test_overrides_flow_into_indicators(self, tmp_path, series):
        write_config(tmp_path, {
            "precision": 1,
            "indicators": {"sma": {"period": 2}, "ema": {"smoothing": "0.5", "period": 1}},
        })
        trend = TrendIndicators.from_loader(ConfigLoader(str(tmp_path)))

        assert trend.get("sma").required_periods() == 2
        assert [r.value for r in trend.sma(series(1, 2)).values] == [Decimal("1.5")]
        assert trend.get("ema").defaults.alpha == Decimal("0.5")

    def test_bundled_defaults_match_builtin(self, synthetic_bars):
        configured = TrendIndicators.from_loader(ConfigLoader())
        builtin = TrendIndicators()
        assert configured.sma(synthetic_bars).values == builtin.sma(synthetic_bars).values
