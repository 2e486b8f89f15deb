"""
Daily intake chart for one month. Produces an image file or returns data for a web frontend.
"""

from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from intake_app.buckets import daily_series, month_start
from intake_app.store import DrinkStore
from intake_app.thresholds import BASE_DAILY_LIMIT_GRAMS


def series_data(store: DrinkStore, month: Optional[date] = None) -> List[Tuple[date, float]]:
    """(date, grams) for use in any frontend chart."""
    return daily_series(store.list_all(), month=month)


def save_intake_graph(
    store: DrinkStore,
    output_path: str = "intake_graph.png",
    month: Optional[date] = None,
    title: Optional[str] = None,
) -> str:
    """
    Plot daily grams for ``month`` (default: all data) with matplotlib and save to file.
    Returns path to saved file. Requires: pip install matplotlib
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for save_intake_graph. pip install matplotlib")

    points = series_data(store, month=month)
    if title is None:
        title = "Alcohol intake" if month is None else f"Alcohol intake, {month_start(month):%B %Y}"

    fig, ax = plt.subplots(figsize=(10, 5))
    if points:
        days, grams = zip(*points)
        ax.plot(days, grams, color="#2563eb", linewidth=2, marker="o", label="Grams per day")
        fig.autofmt_xdate()
    ax.axhline(
        y=BASE_DAILY_LIMIT_GRAMS,
        color="#dc2626",
        linestyle="--",
        linewidth=1,
        label=f"Daily limit ({BASE_DAILY_LIMIT_GRAMS:g} g)",
    )
    ax.set_xlabel("Date")
    ax.set_ylabel("Alcohol (g)")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
