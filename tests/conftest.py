import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from chartflow.models import ChartStyle, Dataset  # noqa: E402


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def monthly() -> Dataset:
    return Dataset(
        "Monthly Sales",
        ["Month", "Sales"],
        [{"Month": "Jan", "Sales": 100}, {"Month": "Feb", "Sales": 150}],
    )


@pytest.fixture
def two_series() -> Dataset:
    return Dataset(
        "Revenue",
        ["Month", "Revenue", "Cost"],
        [
            {"Month": "Jan", "Revenue": 10, "Cost": 4},
            {"Month": "Feb", "Revenue": 12, "Cost": 5},
            {"Month": "Mar", "Revenue": 9, "Cost": 6},
        ],
    )


@pytest.fixture
def style() -> ChartStyle:
    return ChartStyle(("#111", "#222"))
