from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from pubplot import Figure, Panel, PubPlotOptions, Series, pub_plot


def _build_figure() -> Figure:
    t = np.linspace(0.0, 10.0, 201, dtype=np.float64)
    panels = []
    for idx, freq in enumerate((0.5, 1.0, 1.5, 2.0)):
        y = np.exp(-0.2 * t) * np.sin(2.0 * np.pi * freq * t / 5.0)
        panels.append(
            Panel(
                xlim=(0.0, 10.0),
                ylim=(-1.0, 1.0),
                title=f"({chr(ord('a') + idx)}) f = {freq:g} Hz",
                x_label="Time (s)",
                y_label="Amplitude",
                series=(Series(x=t, y=y),),
            )
        )
    # host default canvas; pub_plot resizes it from the journal table
    return Figure(width=560.0, height=420.0, panels=tuple(panels))


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    out_dir = Path(__file__).resolve().parent / "out"
    options = PubPlotOptions(
        journal="Elsevier",
        width="double",
        height=320,
        grid=True,
        filename=str(out_dir / "damped_sines.eps"),
    )
    result = pub_plot(_build_figure(), options)
    for layout in result.layout.panels:
        m = layout.margins
        print(f"panel {layout.index}: margins l={m.left} r={m.right} b={m.bottom} t={m.top}")
    if result.message:
        print(result.message)


if __name__ == "__main__":
    main()
