"""Sample datasets for trying the tool without your own data."""

from __future__ import annotations

from .csvdata import parse_csv
from .models import Dataset

SIMPLE_CSV = """\
Month,Sales,Expenses
January,4000,2400
February,3000,1398
March,2000,9800
April,2780,3908
May,1890,4800
June,2390,3800"""

COMPLEX_CSV = """\
Month,Revenue,Cost,Profit,Margin
Jan,5000,3000,2000,40
Feb,6000,3500,2500,41
Mar,7500,4000,3500,46
Apr,8000,4200,3800,47
May,7200,3800,3400,47
Jun,8500,4500,4000,47
Jul,9000,4800,4200,46
Aug,9500,5000,4500,47
Sep,8800,4600,4200,47
Oct,9200,4900,4300,46
Nov,10500,5500,5000,47
Dec,12000,6000,6000,50"""

SAMPLES = {
    "simple": ("Monthly Sales Report", SIMPLE_CSV),
    "complex": ("Annual Financial Overview", COMPLEX_CSV),
}


def load_sample(name: str) -> Dataset:
    try:
        title, text = SAMPLES[name]
    except KeyError:
        raise KeyError(f"Unknown sample {name!r}; choose from {', '.join(SAMPLES)}") from None
    return parse_csv(text, title=title)
