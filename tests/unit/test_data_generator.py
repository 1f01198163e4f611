"""Unit tests for market assumptions and the correlated return generator."""

from datetime import date

import numpy as np
import pytest

from portfolio_lens.config.data_generator import (
    PortfolioDataGenerator,
    build_covariance,
    cholesky_decomposition,
    generate_portfolio_data,
)
from portfolio_lens.config.market_assumptions import DEFAULT_ASSUMPTIONS_PATH, load_market_assumptions
from portfolio_lens.errors import NumericalError
from portfolio_lens.portfolio.snapshot import AllocationSettings

END_DATE = date(2024, 6, 30)


@pytest.fixture(scope="module")
def assumptions():
    return load_market_assumptions()


class TestMarketAssumptions:
    def test_packaged_assumptions(self, assumptions):
        assert assumptions.class_keys == [
            "aud_equities", "fx_equities", "sovereign_fi", "non_sovereign_fi",
            "real_estate", "infrastructure", "private_equity",
        ]
        assert assumptions.correlation.shape == (7, 7)
        assert np.allclose(assumptions.correlation, assumptions.correlation.T)
        assert assumptions.correlation[0, 1] == 0.8
        assert set(assumptions.benchmarks) == {"Market", "S&P500", "MSCI World"}
        assert sum(len(v) for v in assumptions.instruments.values()) == 16

    def test_adjusted_params(self, assumptions):
        means, vols = assumptions.adjusted_params("bearish", "high")
        assert means[2] == pytest.approx(0.003 * 0.5)
        assert vols[2] == pytest.approx(0.02 * 1.3 * 1.5)

    def test_adjusted_benchmark(self, assumptions):
        market = assumptions.adjusted_benchmarks("bullish", "low")["Market"]
        assert market.mean_return == pytest.approx(0.007 * 1.5)
        assert market.volatility == pytest.approx(0.04 * 0.8 * 0.7)

    def test_unknown_scenario(self, assumptions):
        with pytest.raises(ValueError, match="Unknown scenario"):
            assumptions.adjusted_params("sideways", "medium")

    def test_unknown_volatility_level(self, assumptions):
        with pytest.raises(ValueError, match="Unknown volatility level"):
            assumptions.adjusted_params("normal", "extreme")

    def test_incomplete_file(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text("asset_classes: {}\n")
        with pytest.raises(ValueError, match="missing section"):
            load_market_assumptions(str(path))

    def test_asymmetric_correlation_rejected(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text(
            "asset_classes:\n"
            "  a: {mean_return: 0.01, volatility: 0.02}\n"
            "  b: {mean_return: 0.01, volatility: 0.02}\n"
            "correlation: [[1.0, 0.5], [0.2, 1.0]]\n"
            "scenarios: {normal: {}}\n"
            "volatility_levels: {medium: 1.0}\n"
        )
        with pytest.raises(ValueError, match="symmetric"):
            load_market_assumptions(str(path))


class TestCholesky:
    def test_reconstructs_covariance(self, assumptions):
        _, vols = assumptions.adjusted_params("normal", "medium")
        covariance = build_covariance(assumptions.correlation, vols)
        lower = cholesky_decomposition(covariance)
        assert np.allclose(lower @ lower.T, covariance, atol=1e-12)
        assert np.allclose(lower, np.tril(lower))
        assert np.allclose(lower, np.linalg.cholesky(covariance))

    def test_covariance_entries(self):
        covariance = build_covariance(np.array([[1.0, 0.5], [0.5, 1.0]]), np.array([0.1, 0.2]))
        assert covariance[0, 1] == pytest.approx(0.5 * 0.1 * 0.2)
        assert covariance[1, 1] == pytest.approx(0.04)

    def test_singular_psd_matrix(self):
        singular = np.array([[1.0, 1.0], [1.0, 1.0]])
        with pytest.raises(np.linalg.LinAlgError):
            np.linalg.cholesky(singular)
        lower = cholesky_decomposition(singular)
        assert np.allclose(lower @ lower.T, [[1.0, 1.0], [1.0, 1.0]])

    def test_not_positive_semi_definite(self):
        with pytest.raises(NumericalError, match="not positive semi-definite"):
            cholesky_decomposition(np.array([[1.0, 2.0], [2.0, 1.0]]))

    def test_rank_deficient_covariance(self):
        # Perfectly correlated first pair: positive semi-definite but singular
        correlation = np.eye(3)
        correlation[0, 1] = correlation[1, 0] = 1.0
        covariance = build_covariance(correlation, np.array([0.02, 0.03, 0.04]))
        lower = cholesky_decomposition(covariance)
        assert np.allclose(lower @ lower.T, covariance, atol=1e-12)
        assert lower[1, 1] == pytest.approx(0.0, abs=1e-9)

    def test_not_finite(self):
        with pytest.raises(NumericalError, match="finite"):
            cholesky_decomposition(np.array([[1.0, np.nan], [np.nan, 1.0]]))

    def test_not_square(self):
        with pytest.raises(NumericalError):
            cholesky_decomposition(np.ones((2, 3)))


class TestGenerator:
    def test_snapshot_shape(self):
        snapshot = generate_portfolio_data(months=24, seed=1, end_date=END_DATE)
        assert snapshot.horizon == 24
        assert all(leaf.periods == 24 for leaf in snapshot.leaves())
        assert {name: len(s.returns) for name, s in snapshot.benchmarks.items()} == {
            "Market": 24, "S&P500": 24, "MSCI World": 24,
        }
        assert snapshot.timeframe.end_date == END_DATE
        assert snapshot.timeframe.start_date == date(2022, 6, 30)
        assert snapshot.snapshot_id.startswith("portfolio-")

    def test_tree_layout(self):
        snapshot = generate_portfolio_data(months=3, seed=1, end_date=END_DATE)
        root = snapshot.root
        assert root.name == "Whole of Portfolio"
        assert root.allocation == 100.0 and root.parent_id is None
        assert [c.name for c in root.children] == ["Public (Listed) Assets", "Private (Unlisted) Assets"]
        private = root.get_child("private-assets")
        assert [c.component_id for c in private.children] == ["real-estate", "infrastructure", "private-equity"]
        assert [c.category for c in private.children] == ["real_estate", "infrastructure", "private_equity"]

    def test_same_seed_is_reproducible(self):
        a = generate_portfolio_data(months=12, seed=42, end_date=END_DATE)
        b = generate_portfolio_data(months=12, seed=42, end_date=END_DATE)
        c = generate_portfolio_data(months=12, seed=43, end_date=END_DATE)
        assert [l.returns for l in a.leaves()] == [l.returns for l in b.leaves()]
        assert [l.returns for l in a.leaves()] != [l.returns for l in c.leaves()]

    def test_allocations_applied(self):
        settings = AllocationSettings(public_vs_private=50, aud_vs_fx=100)
        snapshot = generate_portfolio_data(months=3, seed=1, allocations=settings, end_date=END_DATE)
        weights = snapshot.graph.absolute_weights()
        assert sum(weights.values()) == pytest.approx(1.0)
        assert weights["fx-equity-1"] == 0.0
        assert weights["aud-equity-1"] == pytest.approx(0.5 * 0.6 * 1.0 * 0.4)

    def test_allocations_from_dict(self):
        snapshot = generate_portfolio_data(
            months=3, seed=1, end_date=END_DATE,
            allocations={"public_vs_private": 80, "private_allocation": {"real_estate": 50,
                                                                          "infrastructure": 25,
                                                                          "private_equity": 25}},
        )
        assert snapshot.root.get_child("public-assets").allocation == 80
        assert snapshot.root.get_child("private-assets").get_child("real-estate").allocation == 50

    def test_assumptions_path(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text(DEFAULT_ASSUMPTIONS_PATH.read_text().replace("Australian Government Bonds", "Local Bond Fund"))
        snapshot = generate_portfolio_data(months=3, seed=1, end_date=END_DATE, assumptions_path=str(path))
        assert snapshot.graph.get_component("sovereign-1").name == "Local Bond Fund"

    def test_malformed_assumptions_path_falls_back(self, tmp_path):
        path = tmp_path / "assumptions.yaml"
        path.write_text("asset_classes: {}\n")
        snapshot = generate_portfolio_data(months=3, seed=1, end_date=END_DATE, assumptions_path=str(path))
        assert snapshot.root.children == ()
        assert snapshot.horizon == 0

    def test_rng_argument(self):
        a = generate_portfolio_data(months=6, rng=np.random.default_rng(5), end_date=END_DATE)
        b = generate_portfolio_data(months=6, seed=5, end_date=END_DATE)
        assert a.benchmark_returns("Market") == b.benchmark_returns("Market")

    @pytest.mark.parametrize("kwargs", [
        {"months": 0},
        {"months": -5},
        {"months": 12, "scenario": "sideways"},
        {"months": 12, "volatility_level": "extreme"},
    ])
    def test_invalid_input_falls_back_to_empty_snapshot(self, kwargs):
        snapshot = generate_portfolio_data(end_date=END_DATE, **kwargs)
        assert snapshot.root.component_id == "whole-portfolio"
        assert snapshot.root.children == ()
        assert snapshot.horizon == 0
        assert snapshot.benchmarks
        assert all(series.returns == () for series in snapshot.benchmarks.values())


class TestStatisticalProperties:
    def test_stressed_sovereign_volatility_exceeds_calm(self):
        stressed, calm = [], []
        for seed in range(20):
            generator = PortfolioDataGenerator(seed=seed)
            stressed.append(np.std(generator.generate_correlated_returns(500, "bearish", "high")[:, 2], ddof=1))
            generator = PortfolioDataGenerator(seed=seed)
            calm.append(np.std(generator.generate_correlated_returns(500, "normal", "low")[:, 2], ddof=1))
        assert np.mean(stressed) > np.mean(calm)
        assert np.mean(stressed) == pytest.approx(0.02 * 1.3 * 1.5, rel=0.05)
        assert np.mean(calm) == pytest.approx(0.02 * 0.7, rel=0.05)

    def test_class_correlation_matches_assumptions(self, assumptions):
        returns = PortfolioDataGenerator(seed=11).generate_correlated_returns(20000)
        realised = np.corrcoef(returns, rowvar=False)
        assert np.allclose(realised, assumptions.correlation, atol=0.05)

    def test_class_means(self, assumptions):
        returns = PortfolioDataGenerator(seed=3).generate_correlated_returns(20000, "bullish", "medium")
        means, vols = assumptions.adjusted_params("bullish", "medium")
        assert np.all(np.abs(returns.mean(axis=0) - means) < 4 * vols / np.sqrt(20000))

    def test_instrument_noise_adds_variance(self):
        generator = PortfolioDataGenerator(seed=9)
        series = generator.generate_asset_returns(20000)["sovereign-1"]
        assert np.std(series, ddof=1) == pytest.approx(0.02 * np.sqrt(1 + 0.15 ** 2), rel=0.03)
