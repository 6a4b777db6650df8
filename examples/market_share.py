"""Example: custom palette on a donut, then the same data as a treemap with a dark background."""

import asyncio

import chartflow as cf

dataset = cf.parse_csv(
    """\
Vendor,Share
Acme,38
Globex,24
Initech,17
Umbrella,12
Other,9""",
    title="Market Share",
)

session = cf.ChartSession(dataset, cf.ChartType.DONUT, settings=cf.Settings(theme="dark", export_settle=0))
session.create_palette(["#0077b6", "#00b4d8", "#90e0ef", "#ED2A66", "#888888"])
print(asyncio.run(session.export("svg")).write("."))

session.set_chart_type(cf.ChartType.TREEMAP)
session.set_title("Market Share Treemap")
print(asyncio.run(session.export("png")).write("."))
session.close()
