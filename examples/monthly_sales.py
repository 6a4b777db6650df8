"""Example: the simple sample dataset as a bar chart, exported to PNG and SVG."""

import chartflow as cf

dataset = cf.load_sample("simple")
style = cf.ChartStyle(cf.PaletteRegistry().select("sunset"))

fig = cf.render_chart(dataset, cf.ChartType.BAR, style)
for fmt in cf.ExportFormat:
    print(cf.export_artifact(fig, fmt, dataset, style, cf.ChartType.BAR).write("."))
