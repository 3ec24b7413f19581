"""
Shared styling configuration for tutorial figures.

Provides consistent colors, fonts, and figure dimensions across the plotting
helpers and scripts.
"""

import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional, Tuple

# =============================================================================
# Color Palette (Colorblind-friendly)
# =============================================================================

COLORS = {
    # Tables
    "likelihood": "#DC3545",  # Red - likelihood
    "prior": "#17A2B8",       # Cyan - prior
    "posterior": "#2E86AB",   # Blue - posterior
    "exact": "#6F42C1",       # Purple - closed-form reference

    # Point estimates
    "mle": "#FD7E14",         # Orange - MLE
    "mode": "#20C997",        # Teal - MAP
    "mean": "#E83E8C",        # Pink - posterior mean

    # Neutral colors
    "grid": "#CCCCCC",        # Light gray for grid points
    "annotation": "#495057",  # Dark gray for annotations
    "ci_fill": "#2E86AB",     # Same as posterior for interval shading
}


def get_resolution_colors(n_grids: int) -> list:
    """Color gradient from coarse (light) to fine (dark) grids."""
    from matplotlib.colors import LinearSegmentedColormap
    cmap = LinearSegmentedColormap.from_list(
        "resolution", [COLORS["grid"], COLORS["posterior"]]
    )
    if n_grids == 1:
        return [cmap(1.0)]
    return [cmap(i / (n_grids - 1)) for i in range(n_grids)]


# =============================================================================
# Figure Dimensions
# =============================================================================

FIGSIZE = {
    "single": (6, 4),       # Single column
    "double": (12, 4),      # Double column (wide)
    "square": (6, 6),       # Square
    "panel_1x3": (12, 4),   # likelihood / prior / posterior
    "panel_2x2": (10, 8),   # 2x2 panel figure
}

DPI = {
    "screen": 100,
    "print": 300,
}


# =============================================================================
# Default Settings
# =============================================================================

MC_CONFIG = {
    "n_draws": 10_000,        # Default posterior draws
    "seed": 42,               # Base random seed
    "alpha": 0.05,            # Interval tail probability
}


# =============================================================================
# Style Configuration
# =============================================================================

def setup_style(use_latex: bool = False) -> None:
    """
    Configure matplotlib for tutorial figures.

    Parameters
    ----------
    use_latex : bool
        If True, use LaTeX for text rendering (requires LaTeX installation)
    """
    plt.rcdefaults()

    if use_latex:
        plt.rcParams.update({
            "text.usetex": True,
            "font.family": "serif",
            "font.serif": ["Computer Modern Roman"],
        })
    else:
        plt.rcParams.update({
            "font.family": "serif",
            "font.serif": ["DejaVu Serif", "Times New Roman", "Times"],
        })

    plt.rcParams.update({
        "font.size": 10,
        "axes.titlesize": 12,
        "axes.labelsize": 11,
        "xtick.labelsize": 9,
        "ytick.labelsize": 9,
        "legend.fontsize": 9,
        "lines.linewidth": 1.5,
        "lines.markersize": 4,
        "axes.linewidth": 0.8,
        "axes.grid": True,
        "grid.alpha": 0.3,
        "grid.linestyle": "--",
        "grid.linewidth": 0.5,
        "legend.framealpha": 0.9,
        "legend.edgecolor": "0.8",
        "figure.dpi": DPI["screen"],
        "savefig.dpi": DPI["print"],
        "savefig.bbox": "tight",
        "savefig.pad_inches": 0.1,
    })


def get_output_dir(category: str, base: Optional[Path] = None) -> Path:
    """Get the output directory for a figure category."""
    if base is None:
        base = Path(__file__).parent.parent.parent / "output" / "figures"
    return Path(base) / category


def save_figure(
    fig: plt.Figure,
    name: str,
    category: str,
    formats: Tuple[str, ...] = ("png", "pdf"),
    dpi: Optional[int] = None,
    base: Optional[Path] = None,
) -> list:
    """
    Save figure in multiple formats.

    Parameters
    ----------
    fig : Figure
        Matplotlib figure to save
    name : str
        Base filename (without extension)
    category : str
        Figure category subdirectory
    formats : tuple
        Output formats to generate
    dpi : int, optional
        Override default DPI
    base : Path, optional
        Root figure directory (default: output/figures/)

    Returns
    -------
    paths : list of Path
    """
    output_dir = get_output_dir(category, base)
    output_dir.mkdir(parents=True, exist_ok=True)

    save_dpi = dpi or DPI["print"]

    paths = []
    for fmt in formats:
        filepath = output_dir / f"{name}.{fmt}"
        fig.savefig(filepath, format=fmt, dpi=save_dpi, bbox_inches="tight")
        print(f"Saved: {filepath}")
        paths.append(filepath)
    return paths


def add_vertical_marker(
    ax: plt.Axes,
    x: float,
    label: str,
    color: str,
    linestyle: str = ":",
    **kwargs
) -> None:
    """Add a labeled vertical line marker."""
    ax.axvline(x=x, color=color, linestyle=linestyle, linewidth=1,
               alpha=0.7, label=label, **kwargs)
