"""Tests for HillFitter / fit_hill (single compound fitting)."""

import logging

import numpy as np
import pytest

from pyhillfit.doseresponse import (
    IC50_CAP,
    HillFitResult,
    HillFitter,
    fit_hill,
    hill_inhibition,
)
from pyhillfit.optimize import SimplexOptions


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def four_point_data():
    conc = [0.37, 1.11, 3.33, 10]
    inhib = [27.49, 51.45, 74.8, 88.49]
    return conc, inhib


@pytest.fixture
def perfect_curve_data():
    """Generated from IC50 = 5.5, Hill = 1.23."""
    conc = [0.001, 0.003, 0.01, 0.03, 0.1, 0.3, 1, 3, 10, 30, 100, 300]
    inhib = [
        0.00250808932247271, 0.00968659104658709, 0.0425764008057494,
        0.164247637072945, 0.718164099678198, 2.71797609381383,
        10.9404321114155, 32.1792352040277, 67.5975896090632,
        88.9597135750537, 97.2549035044354, 99.2745211337568,
    ]
    return conc, inhib


@pytest.fixture
def inactive_compound_data():
    """Screening data with no measurable block (66 wells, four-fold dilutions)."""
    conc = [
        0.0000143051147460938, 0.0002288818359375, 0.000057220458984375,
        0.00091552734375, 0.003662109375, 0.0146484375, 0.9375, 0.234375, 3.75,
        0.05859375, 15.0, 0.000057220458984375, 0.0000143051147460938,
        0.00091552734375, 0.0146484375, 0.0002288818359375, 15.0,
        0.003662109375, 0.234375, 0.9375, 0.05859375, 3.75, 15.0, 3.75,
        0.234375, 0.9375, 0.0002288818359375, 0.00091552734375,
        0.000057220458984375, 0.0000143051147460938, 0.003662109375,
        0.05859375, 0.0146484375, 0.00091552734375, 15.0, 0.234375,
        0.003662109375, 0.0000143051147460938, 0.05859375,
        0.000057220458984375, 0.9375, 3.75, 0.0002288818359375, 0.0146484375,
        15.0, 0.00091552734375, 0.05859375, 3.75, 0.003662109375, 0.234375,
        0.0146484375, 0.000057220458984375, 0.0000143051147460938, 0.9375,
        0.0002288818359375, 3.75, 15.0, 0.234375, 0.9375, 0.00091552734375,
        0.0002288818359375, 0.000057220458984375, 0.05859375, 0.0146484375,
        0.0000143051147460938, 0.003662109375,
    ]
    inhib = [
        21, 21, 20, 19, 5, 5, 5, 4, -1, -3, -16, 15, 13, 12, 8, 7, 6, 3, 1, 0,
        -1, -8, 25, 15, 12, 11, 10, 10, 9, 2, 1, 1, -3, -24, -24, -27, -29, -29,
        -31, -31, -35, -37, -42, -52, -2, -6, -7, -8, -12, -14, -19, -19, -19,
        -20, -29, 4, 3, 0, -2, -3, -7, -7, -8, -8, -8, -11,
    ]
    return conc, inhib


# ---------------------------------------------------------------------------
# Reference fits
# ---------------------------------------------------------------------------

class TestReferenceFits:
    """Known answers for small data sets."""

    def test_single_point(self):
        params = HillFitter([10.0], [50.0], 1).run()
        assert params.size == 1
        assert params[0] == 10.0

    def test_single_point_two_params_requested(self):
        params = HillFitter([10.0], [50.0], 2).run()
        assert params.size == 1
        assert params[0] == 10.0

    def test_four_points_two_params(self, four_point_data):
        params = HillFitter(*four_point_data, 2).run()
        assert params.size == 2
        assert params[0] == pytest.approx(1.046, abs=1e-3)
        assert params[1] == pytest.approx(0.925, abs=1e-3)

    def test_four_points_one_param(self, four_point_data):
        params = HillFitter(*four_point_data, 1).run()
        assert params.size == 1
        assert params[0] == pytest.approx(1.0581, abs=1e-4)

    def test_weak_compound(self):
        conc = [0.37, 1.11, 3.33, 10]
        inhib = [7.0727, 17.61178, 37.5152, 62.7956]
        params = HillFitter(conc, inhib, 2).run()
        assert params[0] == pytest.approx(5.729, abs=1e-3)
        assert params[1] == pytest.approx(0.940, abs=1e-3)

    def test_two_points(self):
        params = HillFitter([1.0, 3.0], [43.35, 70.12], 2).run()
        assert params[0] == pytest.approx(1.300, abs=1e-3)
        assert params[1] == pytest.approx(1.020, abs=1e-3)

    def test_replicates_at_two_levels_steep(self):
        params = HillFitter([5, 5, 20, 20], [15, 25, 75, 85], 2).run()
        assert params[0] == pytest.approx(10.0, abs=1e-2)
        assert params[1] == pytest.approx(2.0, abs=1e-2)

    def test_replicates_at_two_levels_shallow(self):
        params = HillFitter([5, 5, 5, 20, 20, 20], [30, 30, 40, 70, 70, 60], 2).run()
        assert params[0] == pytest.approx(10.0, abs=1e-2)
        assert params[1] == pytest.approx(1.0, abs=1e-2)

    def test_perfect_curve_recovered(self, perfect_curve_data):
        params = HillFitter(*perfect_curve_data, 2).run()
        assert params[0] == pytest.approx(5.5, abs=1e-3)
        assert params[1] == pytest.approx(1.23, abs=1e-4)


class TestSameConcentration:
    """A single concentration level forces an IC50-only fit."""

    @pytest.mark.parametrize(
        "inhib", [[4.8, 8.1], [4.8, 8.1, 6.45]],
    )
    def test_forced_one_param(self, inhib):
        params = HillFitter([10.0] * len(inhib), inhib, 2).run()
        assert params.size == 1
        assert params[0] == pytest.approx(145.039, abs=1e-3)

    def test_result_reports_fixed_hill(self):
        r = fit_hill([10.0, 10.0], [4.8, 8.1], n_params=2)
        assert r.n_params == 1
        assert r.hill == 1.0


# ---------------------------------------------------------------------------
# Hill limits
# ---------------------------------------------------------------------------

class TestHillLimits:
    """Boundary handling through the penalty terms."""

    def test_default_limits(self):
        fitter = HillFitter([1, 10], [10, 20], 2, round_values=True)
        params = fitter.run()
        assert params.size == 2
        assert params[0] == pytest.approx(512.2845, abs=1e-4)
        assert params[1] == pytest.approx(0.3521, abs=1e-4)

    def test_raised_lower_limit_pins_hill(self):
        fitter = HillFitter([1, 10], [10, 20], 2, round_values=True)
        fitter.run()
        fitter.set_hill_limits(0.6, 5)
        params = fitter.run()
        assert params[0] == pytest.approx(88.3678, abs=1e-4)
        assert params[1] == pytest.approx(0.6000, abs=1e-4)

    def test_upper_limit_respected(self):
        conc = np.array([1.0, 2.0, 4.0, 8.0, 16.0])
        inhib = hill_inhibition(conc, 4.0, 4.0)
        r = fit_hill(conc, inhib, n_params=2, hill_limits=(0.5, 2.0))
        assert r.hill <= 2.0 + 1e-6
        assert r.hill == pytest.approx(2.0, abs=1e-3)

    @pytest.mark.parametrize("limits", [(0.0, 5.0), (0.6, 5.0), (0.8, 1.0), (1.5, 3.0)])
    def test_hill_within_limits(self, four_point_data, limits):
        r = fit_hill(*four_point_data, n_params=2, hill_limits=limits)
        assert limits[0] - 1e-6 <= r.hill <= limits[1] + 1e-6

    def test_set_hill_limits_validation(self):
        fitter = HillFitter([1, 10], [10, 20], 2)
        with pytest.raises(ValueError, match="high > low"):
            fitter.set_hill_limits(2.0, 2.0)
        assert fitter.hill_limits.low == 0.0
        assert fitter.hill_limits.high == 5.0


# ---------------------------------------------------------------------------
# Capping of inactive compounds
# ---------------------------------------------------------------------------

class TestCapping:
    """round_values caps unmeasurably large IC50s."""

    def test_two_params_uncapped(self, inactive_compound_data):
        params = HillFitter(*inactive_compound_data, 2).run()
        assert params.size == 2
        assert params[0] > IC50_CAP

    def test_two_params_capped(self, inactive_compound_data):
        fitter = HillFitter(*inactive_compound_data, 2, round_values=True)
        params = fitter.run()
        assert params[0] == IC50_CAP
        assert params[1] == 1.0
        assert fitter.capped

    def test_one_param_capped(self, inactive_compound_data):
        fitter = HillFitter(*inactive_compound_data, 1, round_values=True)
        params = fitter.run()
        assert params.size == 1
        assert params[0] == IC50_CAP

    def test_cap_logs_warning(self, inactive_compound_data, caplog):
        with caplog.at_level(logging.WARNING, logger="pyhillfit.doseresponse._fit"):
            HillFitter(*inactive_compound_data, 1, round_values=True).run()
        assert "Capping" in caplog.text

    def test_active_compound_not_capped(self, four_point_data):
        fitter = HillFitter(*four_point_data, 2, round_values=True)
        params = fitter.run()
        assert params[0] < IC50_CAP
        assert not fitter.capped


# ---------------------------------------------------------------------------
# Determinism and diagnostics
# ---------------------------------------------------------------------------

class TestDiagnostics:
    """Evaluation counts and repeatability."""

    def test_idempotent(self, four_point_data):
        fitter = HillFitter(*four_point_data, 2)
        first = fitter.run()
        n_first = fitter.n_evaluations
        second = fitter.run()
        np.testing.assert_array_equal(first, second)
        assert fitter.n_evaluations == n_first

    def test_independent_fitters_agree(self, four_point_data):
        a = fit_hill(*four_point_data, n_params=2)
        b = fit_hill(*four_point_data, n_params=2)
        np.testing.assert_array_equal(a.params, b.params)

    def test_evaluation_count_positive(self, four_point_data):
        fitter = HillFitter(*four_point_data, 2)
        fitter.run()
        assert fitter.n_evaluations > 0

    def test_staged_fit_costs_more(self, four_point_data):
        one = HillFitter(*four_point_data, 1)
        one.run()
        two = HillFitter(*four_point_data, 2)
        two.run()
        assert two.n_evaluations > one.n_evaluations

    def test_completion_logged(self, four_point_data, caplog):
        with caplog.at_level(logging.INFO, logger="pyhillfit.doseresponse._fit"):
            HillFitter(*four_point_data, 1).run()
        assert "total number of function evaluations" in caplog.text

    def test_iteration_cap_warns(self, four_point_data, caplog):
        with caplog.at_level(logging.WARNING, logger="pyhillfit.doseresponse._fit"):
            params = HillFitter(
                *four_point_data, 1, options=SimplexOptions(max_iter=3)
            ).run()
        assert params.size == 1
        assert "iteration cap" in caplog.text


# ---------------------------------------------------------------------------
# fit_hill / HillFitResult
# ---------------------------------------------------------------------------

class TestFitHillResult:
    """Result wrapper."""

    def test_result_fields(self, four_point_data):
        r = fit_hill(*four_point_data, n_params=2)
        assert isinstance(r, HillFitResult)
        assert r.n_params == 2
        assert r.ic50 == r.params[0]
        assert r.hill == r.params[1]
        assert r.n_evaluations > 0
        assert not r.capped

    def test_pic50(self, four_point_data):
        r = fit_hill(*four_point_data, n_params=2)
        assert r.pic50 == pytest.approx(-np.log10(1e-6 * r.ic50))

    def test_predict_and_rss(self, perfect_curve_data):
        r = fit_hill(*perfect_curve_data, n_params=2)
        assert r.predict().shape == (12,)
        assert r.rss < 1e-6
        assert r.predict([r.ic50])[0] == pytest.approx(50.0)

    def test_summary(self, four_point_data):
        s = fit_hill(*four_point_data, n_params=2).summary()
        assert "IC50" in s
        assert "pIC50" in s
        assert "Hill" in s
        assert "Function evaluations" in s

    def test_summary_fixed_hill(self, four_point_data):
        s = fit_hill(*four_point_data).summary()
        assert "(fixed)" in s

    def test_pic50_undefined_when_ic50_not_positive(self):
        # Responses above 100 % drive the bounded optimum to IC50 = 0.
        r = fit_hill([1, 10, 100], [120, 110, 105], n_params=2)
        assert r.ic50 <= 0
        assert np.isnan(r.pic50)
        assert "pIC50 = nan" in r.summary()


class TestValidation:
    """Input validation happens before any optimization."""

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError, match="same length"):
            fit_hill([1.0, 2.0], [50.0])

    def test_empty(self):
        with pytest.raises(ValueError, match="at least one"):
            HillFitter([], [])

    @pytest.mark.parametrize("n_params", [0, 3])
    def test_bad_n_params(self, n_params):
        with pytest.raises(ValueError, match="1 or 2"):
            HillFitter([1.0], [50.0], n_params)

    def test_zero_concentration(self):
        with pytest.raises(ValueError, match="strictly positive"):
            fit_hill([0.0, 1.0], [0.0, 50.0])

    def test_bad_limits(self, four_point_data):
        with pytest.raises(ValueError, match="high > low"):
            fit_hill(*four_point_data, n_params=2, hill_limits=(3.0, 1.0))
