"""Unit tests for the Euler risk decomposition."""

import pytest

from portfolio_lens.performance import portfolio_returns
from portfolio_lens.risk.decomposition import calculate_risk_contributions
from portfolio_lens.risk.metrics import volatility


class TestEulerDecomposition:
    def test_contributions_sum_to_volatility(self, random_snapshot):
        decomposition = calculate_risk_contributions(random_snapshot)
        total = sum(c.contribution for c in decomposition.contributions)
        assert total == pytest.approx(decomposition.portfolio_volatility, rel=0.01)
        assert decomposition.is_valid
        assert decomposition.euler_identity_check < 0.01

    def test_generated_portfolio_identity(self, generated_snapshot):
        decomposition = calculate_risk_contributions(generated_snapshot)
        assert len(decomposition.contributions) == 16
        assert decomposition.total_contribution == pytest.approx(decomposition.portfolio_volatility, rel=0.01)

    def test_portfolio_volatility_matches_returns(self, random_snapshot):
        decomposition = calculate_risk_contributions(random_snapshot)
        assert decomposition.portfolio_volatility == pytest.approx(volatility(portfolio_returns(random_snapshot)))

    def test_percentages_sum_to_hundred(self, random_snapshot):
        decomposition = calculate_risk_contributions(random_snapshot)
        assert sum(c.contribution_percentage for c in decomposition.contributions) == pytest.approx(100.0)

    def test_steps_match_contributions(self, random_snapshot):
        decomposition = calculate_risk_contributions(random_snapshot)
        assert len(decomposition.steps) == len(decomposition.contributions)
        for step, contribution in zip(decomposition.steps, decomposition.contributions):
            assert step.asset_id == contribution.id
            assert step.contribution == contribution.contribution
            assert step.contribution_percentage == contribution.contribution_percentage
            assert step.contribution == pytest.approx(step.weight * step.marginal_contribution)
            assert step.portfolio_volatility == decomposition.portfolio_volatility

    def test_step_weights_are_absolute(self, random_snapshot):
        decomposition = calculate_risk_contributions(random_snapshot)
        assert [s.weight for s in decomposition.steps] == pytest.approx([0.4, 0.3, 0.2, 0.1])

    def test_single_leaf_carries_all_risk(self, make_snapshot):
        snapshot = make_snapshot([100.0], [[0.01, -0.02, 0.03, 0.0]])
        decomposition = calculate_risk_contributions(snapshot)
        (only,) = decomposition.contributions
        assert only.contribution == pytest.approx(decomposition.portfolio_volatility)
        assert only.contribution_percentage == pytest.approx(100.0)

    def test_zero_volatility_portfolio(self, make_snapshot):
        snapshot = make_snapshot([50.0, 50.0], [[0.01, 0.01], [0.02, 0.02]])
        decomposition = calculate_risk_contributions(snapshot)
        assert decomposition.portfolio_volatility == 0.0
        assert [c.contribution for c in decomposition.contributions] == [0.0, 0.0]
        assert [c.contribution_percentage for c in decomposition.contributions] == [0.0, 0.0]
        assert decomposition.euler_identity_check is None
        assert len(decomposition.steps) == len(decomposition.contributions)
        for step, contribution in zip(decomposition.steps, decomposition.contributions):
            assert step.asset_id == contribution.id
            assert step.weight == pytest.approx(0.5)
            assert step.individual_volatility == 0.0
            assert step.marginal_contribution == 0.0
            assert step.contribution == 0.0
            assert step.portfolio_volatility == 0.0

    def test_zero_volatility_steps_keep_leaf_volatility(self, make_snapshot):
        # Offsetting leaves: each moves, their blend does not
        snapshot = make_snapshot([50.0, 50.0], [[0.01, 0.03], [0.03, 0.01]])
        decomposition = calculate_risk_contributions(snapshot)
        assert decomposition.portfolio_volatility == 0.0
        assert [s.individual_volatility for s in decomposition.steps] == pytest.approx([volatility([0.01, 0.03])] * 2)
        assert [c.contribution for c in decomposition.contributions] == [0.0, 0.0]
