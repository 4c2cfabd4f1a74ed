"""Quick runnable example computing PDP and ICE for a fitted forest.

This script builds a synthetic bike-rental table, fits a random forest on
it, then computes a one-feature PDP, centered ICE curves and a two-feature
interaction surface using a 4-thread engine.

Run:
    python -m examples.run_quick_example
"""

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor

from feature_effects import Dataset, EffectConfig, EffectEngine, get_adapter


def make_rentals(n_samples: int = 500, random_state: int = 42) -> pd.DataFrame:
    rng = np.random.RandomState(random_state)
    df = pd.DataFrame({
        "temp": np.round(rng.uniform(-5, 35, n_samples), 1),
        "hum": np.round(rng.uniform(0.2, 1.0, n_samples), 2),
        "windspeed": np.round(rng.uniform(0, 30, n_samples), 1),
    })
    # Rentals peak around 25C and drop on humid days
    df["count"] = (
        4000 - 6 * (df["temp"] - 25) ** 2 - 1500 * df["hum"] - 20 * df["windspeed"]
        + rng.normal(0, 100, n_samples)
    )
    return df


def main(n_samples: int = 500) -> dict:
    df = make_rentals(n_samples)
    X = df.drop("count", axis=1)

    model = RandomForestRegressor(n_estimators=50, random_state=42)
    model.fit(X, df["count"])

    dataset = Dataset.from_frame(X)
    adapter = get_adapter(model)
    engine = EffectEngine(EffectConfig(grid_resolution=20, n_jobs=4))

    curve = engine.compute_pdp(dataset, adapter, ["temp"])
    print("Partial dependence of temp:")
    for value, effect in curve.pairs()[::5]:
        print(f"  temp={value:6.2f}  predicted count={effect:8.1f}")

    anchor = curve.grid.points()[0]
    surface = engine.compute_ice(dataset, adapter, "temp", center_at=anchor)
    spread = surface.values[:, -1]
    print(f"Centered ICE at temp={anchor:.2f}: {surface.n_rows} curves, "
          f"final effect between {spread.min():.1f} and {spread.max():.1f}")

    pair = engine.compute_pdp(dataset, adapter, ["temp", "hum"])
    print(f"Two-feature surface shape: {pair.values.shape}")

    return {"pdp": curve, "ice": surface, "pair": pair}


if __name__ == "__main__":
    main()
