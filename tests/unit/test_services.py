"""Unit tests for the service layer: risk, configuration and orchestration."""

import math

import pytest
import yaml

from portfolio_lens.config.market_assumptions import DEFAULT_ASSUMPTIONS_PATH
from portfolio_lens.errors import NoReturnData
from portfolio_lens.models.data_models import RiskRequest
from portfolio_lens.portfolio.snapshot import AllocationSettings
from portfolio_lens.services import (
    ConfigurationService,
    RiskAnalysisService,
    calculate_risk_metrics,
    handle_risk_request,
)

RESULT_KEYS = {
    'portfolioVolatility', 'benchmarkVolatility', 'maxDrawdown', 'valueAtRisk',
    'trackingError', 'beta', 'alpha', 'sharpeRatio', 'informationRatio',
    'riskContributions', 'calculationSteps',
}


class TestRiskService:
    def test_result_shape(self, random_snapshot):
        data = calculate_risk_metrics(random_snapshot, "Market").to_dict()
        assert set(data) == RESULT_KEYS
        assert len(data['riskContributions']) == 4
        assert set(data['riskContributions'][0]) == {'id', 'name', 'contribution', 'contributionPercentage'}
        assert set(data['calculationSteps'][0]) == {
            'assetName', 'assetId', 'weight', 'individualVolatility',
            'marginalContribution', 'contribution', 'contributionPercentage', 'portfolioVolatility',
        }

    def test_metrics_consistent(self, random_snapshot):
        result = calculate_risk_metrics(random_snapshot)
        assert result.portfolio_volatility > 0
        assert result.periods == 36
        assert 0.0 <= result.max_drawdown <= 1.0
        assert result.euler_identity_check < 0.01

    def test_missing_benchmark_gives_zero_relative_metrics(self, random_snapshot):
        result = calculate_risk_metrics(random_snapshot, "MSCI World")
        assert result.benchmark_volatility == 0.0
        assert result.tracking_error == 0.0
        assert result.beta == 0.0
        assert result.information_ratio == 0.0

    def test_no_return_data(self, make_snapshot):
        with pytest.raises(NoReturnData):
            calculate_risk_metrics(make_snapshot([100.0], [[]]))

    def test_request_success(self, random_snapshot):
        response = handle_risk_request(RiskRequest(random_snapshot, "Market", sequence=3))
        assert response.success
        assert response.sequence == 3
        assert set(response.to_dict()) == RESULT_KEYS

    def test_request_failure_message(self, make_snapshot):
        response = handle_risk_request(RiskRequest(make_snapshot([100.0], [[]]), sequence=1))
        assert not response.success
        message = response.to_dict()
        assert list(message) == ['errorMessage']
        assert message['errorMessage'].startswith("Error in risk calculation:")
        assert "No asset returns data available" in message['errorMessage']


class TestConfigurationService:
    def test_defaults(self):
        config = ConfigurationService()
        assert config.risk_free_rate == 0.001
        assert config.var_confidence == 0.95
        assert config.default_benchmark == "Market"
        assert config.get_setting("analysis.default_period") == "1Y"
        assert config.get_allocation_settings() == AllocationSettings()
        assert config.validate_config()["valid"]

    def test_dot_notation(self):
        config = ConfigurationService()
        assert config.update_setting("analysis.risk_free_rate", 0.002)
        assert config.risk_free_rate == 0.002
        assert config.get_setting("analysis.missing", "fallback") == "fallback"
        assert not config.update_setting("analysis.risk_free_rate.nested", 1)

    def test_settings_are_copies(self):
        config = ConfigurationService()
        config.get_generation_settings()["months"] = 1
        assert config.get_setting("generation.months") == 60

    def test_load_merges_with_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "analysis": {"default_benchmark": "S&P500"},
            "allocations": {"private_allocation": {"real_estate": 50, "infrastructure": 25,
                                                   "private_equity": 25}},
        }))
        config = ConfigurationService(str(path))
        assert config.default_benchmark == "S&P500"
        assert config.var_confidence == 0.95
        allocations = config.get_allocation_settings()
        assert allocations.real_estate == 50
        assert allocations.public_vs_private == 70

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigurationService(str(tmp_path / "absent.yaml"))
        assert config.get_setting("generation.months") == 60

    def test_save_round_trip(self, tmp_path):
        config = ConfigurationService()
        config.update_setting("generation.scenario", "bearish")
        path = tmp_path / "saved" / "config.yaml"
        assert config.save_config(str(path))
        reloaded = ConfigurationService(str(path))
        assert reloaded.get_setting("generation.scenario") == "bearish"

    def test_save_without_path(self):
        assert not ConfigurationService().save_config()

    def test_validation_errors(self):
        config = ConfigurationService()
        config.update_setting("generation.months", 0)
        config.update_setting("generation.scenario", "sideways")
        config.update_setting("analysis.var_confidence", 1.5)
        result = config.validate_config()
        assert not result["valid"]
        assert len(result["errors"]) == 3

    def test_validation_warns_on_private_drift(self):
        config = ConfigurationService()
        config.update_setting("allocations.private_allocation.real_estate", 50)
        result = config.validate_config()
        assert result["valid"]
        assert any("Private allocation" in w for w in result["warnings"])

    def test_reset(self):
        config = ConfigurationService()
        config.update_from_dict({"analysis": {"risk_free_rate": 0.01}})
        assert config.risk_free_rate == 0.01
        config.reset_to_defaults()
        assert config.risk_free_rate == 0.001


@pytest.fixture
def service(random_snapshot):
    service = RiskAnalysisService()
    service.set_snapshot(random_snapshot)
    return service


class TestRiskAnalysisService:
    def test_no_snapshot(self):
        result = RiskAnalysisService().run_risk_analysis()
        assert result['success'] is False
        assert result['error'] == "No portfolio loaded"

    def test_risk_analysis(self, service):
        result = service.run_risk_analysis(period="1Y", benchmark_name="Market")
        assert result['success']
        assert set(result['data']) == RESULT_KEYS
        assert result['metadata']['periods'] == 12
        assert result['metadata']['snapshot_id'] == "test-snapshot"

    def test_results_are_cached(self, service):
        service.run_risk_analysis(period="3Y")
        assert len(service.cache) == 1
        service.run_risk_analysis(period="3Y")
        assert len(service.cache) == 1
        service.run_risk_analysis(period="1Y")
        assert len(service.cache) == 2

    def test_changed_settings_bypass_cache(self, service):
        before = service.run_risk_analysis(period="3Y")['data']
        service.config_service.update_setting("analysis.risk_free_rate", 0.01)
        after = service.run_risk_analysis(period="3Y")['data']
        assert len(service.cache) == 2
        assert after['sharpeRatio'] < before['sharpeRatio']

        service.config_service.update_setting("analysis.var_confidence", 0.99)
        service.run_risk_analysis(period="3Y")
        service.config_service.update_setting("analysis.exact_ytd", True)
        service.run_performance_analysis(period="3Y")
        assert len(service.cache) == 4

    def test_analysis_settings_drive_results(self, service):
        service.config_service.update_setting("analysis.var_confidence", 0.5)
        result = service.run_risk_analysis(period="3Y")
        expected = calculate_risk_metrics(service.snapshot, "Market", 0.001, 0.5)
        assert result['data']['valueAtRisk'] == pytest.approx(expected.value_at_risk)

    def test_annualized_output(self, service):
        monthly = service.run_risk_analysis(period="3Y")['data']
        annual = service.run_risk_analysis(period="3Y", annualized=True)['data']
        assert annual['portfolioVolatility'] == pytest.approx(monthly['portfolioVolatility'] * math.sqrt(12))
        assert annual['sharpeRatio'] == monthly['sharpeRatio']

    def test_invalid_period_is_error_result(self, service):
        result = service.run_risk_analysis(period="2W")
        assert result['success'] is False
        assert "Unknown time period" in result['error']

    def test_performance_analysis(self, service):
        result = service.run_performance_analysis(period="3Y")
        assert result['success']
        assert result['metadata']['periods'] == 36
        assert 'absoluteReturn' in result['data']

    def test_update_allocations(self):
        service = RiskAnalysisService()
        service.generate_portfolio(months=12, seed=5)
        service.run_risk_analysis()
        assert len(service.cache) == 1

        outcome = service.update_allocations(AllocationSettings(public_vs_private=50))
        assert outcome == {'success': True, 'valid': True, 'issues': []}
        assert len(service.cache) == 0
        assert service.snapshot.root.get_child("public-assets").allocation == 50

    def test_configured_assumptions_file(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text(DEFAULT_ASSUMPTIONS_PATH.read_text().replace("Venture Capital", "Growth Fund"))
        config = ConfigurationService()
        config.update_setting("generation.assumptions_path", str(path))
        snapshot = RiskAnalysisService(config).generate_portfolio(months=3, seed=1)
        assert snapshot.graph.get_component("private-equity-1").name == "Growth Fund"

    def test_malformed_assumptions_file_gives_empty_portfolio(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text("correlation: [[1.0]]\n")
        config = ConfigurationService()
        config.update_setting("generation.assumptions_path", str(path))
        service = RiskAnalysisService(config)
        snapshot = service.generate_portfolio(months=3, seed=1)
        assert snapshot.horizon == 0
        assert service.run_risk_analysis()['success'] is False

    def test_generated_portfolio_status(self):
        service = RiskAnalysisService()
        snapshot = service.generate_portfolio(months=24, seed=1)
        status = service.get_service_status()
        assert status['snapshot_loaded']
        assert status['snapshot_id'] == snapshot.snapshot_id
        assert status['horizon_months'] == 24
        assert status['leaf_count'] == 16
