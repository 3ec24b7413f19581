"""
Tests for HDF5 storage of experiment results and fitted posteriors.
"""

import pytest
import numpy as np

from gridpost import NormalModel, NormalPrior, estimate_posterior
from gridpost.experiments.storage import (
    delete_result,
    get_results_size,
    list_results,
    load_posterior,
    load_result,
    result_exists,
    save_posterior,
    save_result,
)

from conftest import fit_binomial


@pytest.mark.tier4
class TestResultStorage:

    def test_round_trip(self, tmp_path, rng):
        data = {
            "steps": np.array([0.1, 0.01]),
            "draws": rng.normal(size=(3, 4)),
            "counts": np.arange(5, dtype=np.int64),
            "scalar": np.float64(0.25),
        }
        metadata = {
            "experiment": "test",
            "n_reps": np.int64(3),
            "bounds": (0.0, 1.0),
            "prior": {"type": "beta", "a": np.float64(2.0)},
            "exact_mean": None,
        }
        path = save_result("example", data, metadata, output_dir=tmp_path)
        assert path == tmp_path / "example.h5"

        loaded, meta = load_result("example", output_dir=tmp_path)
        assert set(loaded) == set(data)
        for key in data:
            np.testing.assert_array_equal(loaded[key], data[key])
        assert meta["experiment"] == "test"
        assert meta["n_reps"] == 3
        assert meta["bounds"] == [0.0, 1.0]
        assert meta["prior"] == {"type": "beta", "a": 2.0}
        assert meta["exact_mean"] is None
        assert meta["_name"] == "example"
        assert "_saved_at" in meta

    def test_metadata_not_mutated(self, tmp_path):
        metadata = {"experiment": "test"}
        save_result("example", {"x": np.zeros(2)}, metadata, output_dir=tmp_path)
        assert metadata == {"experiment": "test"}

    def test_missing_result(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_result("missing", output_dir=tmp_path)

    def test_listing_and_deleting(self, tmp_path):
        assert list_results(tmp_path) == []
        assert get_results_size(tmp_path) == 0

        for name in ["b_result", "a_result"]:
            save_result(name, {"x": np.ones(3)}, {}, output_dir=tmp_path)

        assert list_results(tmp_path) == ["a_result", "b_result"]
        assert result_exists("a_result", tmp_path)
        assert get_results_size(tmp_path) > 0

        assert delete_result("a_result", tmp_path)
        assert not delete_result("a_result", tmp_path)
        assert not result_exists("a_result", tmp_path)
        assert list_results(tmp_path) == ["b_result"]

    def test_missing_directory(self, tmp_path):
        missing = tmp_path / "nowhere"
        assert list_results(missing) == []
        assert get_results_size(missing) == 0


@pytest.mark.tier4
class TestPosteriorStorage:

    def test_round_trip(self, tmp_path, coin_example):
        post = fit_binomial(coin_example, step=0.05)
        save_posterior("coin", post, {"observations": [5]}, output_dir=tmp_path)

        loaded, meta = load_posterior("coin", output_dir=tmp_path)
        assert loaded.grids == post.grids
        np.testing.assert_array_equal(loaded.grids[0].values, post.grids[0].values)
        np.testing.assert_array_equal(loaded.likelihood_table, post.likelihood_table)
        np.testing.assert_array_equal(loaded.prior_table, post.prior_table)
        np.testing.assert_allclose(loaded.posterior_table, post.posterior_table, rtol=1e-14)
        assert loaded.mean() == pytest.approx(post.mean())
        assert meta["observations"] == [5]
        assert meta["grids"][0]["step"] == 0.05

    def test_two_parameter_round_trip(self, tmp_path):
        post = estimate_posterior(
            [0.2],
            [{"lower": -2, "upper": 2, "step": 0.5, "name": "mu"},
             {"lower": 0.5, "upper": 3, "step": 0.5, "name": "sigma"}],
            NormalModel(),
            [NormalPrior(), NormalPrior()],
            warn_truncation=False,
        )
        save_posterior("normal", post, output_dir=tmp_path)
        loaded, _ = load_posterior("normal", output_dir=tmp_path)
        assert [g.name for g in loaded.grids] == ["mu", "sigma"]
        assert loaded.shape == post.shape
        assert loaded.mean("sigma") == pytest.approx(post.mean("sigma"))
