"""
Grid-Approximation Posterior Estimator

Bayesian posteriors computed by brute force on evenly spaced parameter grids:
evaluate likelihood and prior at every grid cell, normalize their product,
then marginalize, summarize or draw from the resulting table.
"""

from .errors import (
    GridPosteriorError,
    InvalidRangeError,
    DegenerateEvidenceError,
    ShapeMismatchError,
    GridTruncationWarning,
)

from .grid import (
    Grid,
    build_grid,
    build_grids,
    grid_shape,
    mesh,
    cell_coordinates,
)

from .likelihood import (
    SamplingModel,
    BinomialModel,
    NormalModel,
    PoissonModel,
    CustomModel,
    likelihood_table,
)

from .priors import (
    Density,
    PriorType,
    BetaPrior,
    UniformPrior,
    NormalPrior,
    CauchyPrior,
    HalfNormalPrior,
    ExponentialPrior,
    CustomPrior,
    prior_from_dict,
    prior_table,
)

from .posterior import (
    GridPosterior,
    normalize_posterior,
    grid_posterior,
    estimate_posterior,
    edge_mass,
)

from .marginals import (
    marginal,
    sample,
    sample_joint,
    posterior_mean,
    posterior_sd,
    posterior_mode,
    posterior_quantile,
    credible_interval,
    hpd_interval,
    summarize_marginal,
)

from .summaries import (
    DrawSummary,
    summarize_draws,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "GridPosteriorError",
    "InvalidRangeError",
    "DegenerateEvidenceError",
    "ShapeMismatchError",
    "GridTruncationWarning",
    # Grids
    "Grid",
    "build_grid",
    "build_grids",
    "grid_shape",
    "mesh",
    "cell_coordinates",
    # Likelihood
    "SamplingModel",
    "BinomialModel",
    "NormalModel",
    "PoissonModel",
    "CustomModel",
    "likelihood_table",
    # Priors
    "Density",
    "PriorType",
    "BetaPrior",
    "UniformPrior",
    "NormalPrior",
    "CauchyPrior",
    "HalfNormalPrior",
    "ExponentialPrior",
    "CustomPrior",
    "prior_from_dict",
    "prior_table",
    # Posterior
    "GridPosterior",
    "normalize_posterior",
    "grid_posterior",
    "estimate_posterior",
    "edge_mass",
    # Marginals and summaries
    "marginal",
    "sample",
    "sample_joint",
    "posterior_mean",
    "posterior_sd",
    "posterior_mode",
    "posterior_quantile",
    "credible_interval",
    "hpd_interval",
    "summarize_marginal",
    "DrawSummary",
    "summarize_draws",
]
