"""
Batch Combustion Analysis CLI.

Analyses one or more pressure traces at one or more TDC shifts and writes
the summary table, per-case series workbooks and charts.

Usage:
    combustion-analyze trace.csv --shift 0 --shift 2.5 --export-summary summary.xlsx
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger
from tqdm import tqdm

from combustion.cases import AnalysisParameters, CaseBook
from combustion.config import settings
from combustion.core import AnalysisWindow
from combustion.errors import CombustionAnalysisError
from combustion.export import export_series, summary_frame, write_summary
from combustion.filters import make_filter
from combustion.geometry import EngineGeometry
from combustion.plotting import CHART_LABELS, plot_cases
from combustion.trace_io import read_trace


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None):
    """stderr sink + (optional) rotating file sink under log_dir"""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            os.path.join(log_dir, "combustion_{time}.log"),
            level="DEBUG",
            rotation="10 MB",
            encoding="utf-8",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Heat release / MFB / IMEP analysis of cylinder pressure traces."
    )
    parser.add_argument("traces", nargs="+", type=Path, help="Trace files (.csv/.txt/.dat/.xlsx/.tdms)")
    parser.add_argument(
        "--shift", type=float, action="append", default=None,
        help="TDC shift in degrees; repeat for several cases (default: 0)",
    )
    parser.add_argument("--gamma", type=float, default=settings.GAMMA)

    filt = parser.add_argument_group("filter")
    filt.add_argument(
        "--filter", choices=["unfiltered", "moving_average", "savitzky_golay"],
        default=settings.FILTER_TYPE,
    )
    filt.add_argument("--half-window", type=int, default=settings.SMOOTHING_HALF_WINDOW)
    filt.add_argument("--sg-window", type=int, default=settings.SG_WINDOW)
    filt.add_argument("--sg-order", type=int, default=settings.SG_ORDER)

    parser.add_argument(
        "--window", type=float, nargs=2, metavar=("START", "END"),
        default=[settings.WINDOW_START, settings.WINDOW_END],
        help="Combustion window for CHR/MFB (deg)",
    )

    geo = parser.add_argument_group("engine geometry")
    geo.add_argument("--rc", type=float, default=settings.COMPRESSION_RATIO, help="Compression ratio")
    geo.add_argument("--rod", type=float, default=settings.ROD_LENGTH_MM, help="Con-rod length (mm)")
    geo.add_argument("--swept", type=float, default=settings.SWEPT_VOLUME_CC, help="Swept volume (cc)")
    geo.add_argument("--stroke", type=float, default=settings.STROKE_MM, help="Stroke (mm)")

    parser.add_argument("--angle-channel", default=None, help="TDMS angle channel name")
    parser.add_argument("--pressure-channel", default=None, help="TDMS pressure channel name")

    out = parser.add_argument_group("output")
    out.add_argument("--export-summary", type=Path, default=None, help=".xlsx or .csv")
    out.add_argument("--export-series", type=Path, default=None, help=".xlsx (one sheet per case)")
    out.add_argument("--plot-dir", type=Path, default=None, help="Directory for PNG charts")
    out.add_argument("--no-log-file", action="store_true", help="Log to stderr only")
    return parser


def _series_path(base: Path, stem: str, multiple: bool) -> Path:
    if not multiple:
        return base
    return base.with_name(f"{base.stem}_{stem}{base.suffix}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL, None if args.no_log_file else settings.LOG_DIR)

    # 1. 파라미터 구성
    try:
        geometry = EngineGeometry(
            compression_ratio=args.rc,
            rod_length_mm=args.rod,
            swept_volume_cc=args.swept,
            stroke_mm=args.stroke,
        )
    except CombustionAnalysisError as e:
        logger.error(f"Invalid engine geometry: {e}")
        return 2

    params = AnalysisParameters(
        geometry=geometry,
        gamma=args.gamma,
        filter_config=make_filter(
            args.filter, half_window=args.half_window, window=args.sg_window, order=args.sg_order
        ),
        window=AnalysisWindow(start=args.window[0], end=args.window[1]),
    )
    shifts = args.shift or [0.0]

    # 2. 배치 분석
    books: List[Tuple[str, CaseBook]] = []
    failed = 0
    for path in tqdm(args.traces, desc="Traces", disable=len(args.traces) < 2):
        try:
            trace = read_trace(path, args.angle_channel, args.pressure_channel)
            book = CaseBook(trace, params)
            for shift in shifts:
                book.add_case(shift)
        except (OSError, CombustionAnalysisError) as e:
            logger.error(f"Failed trace {path}: {e}")
            failed += 1
            continue
        books.append((path.stem, book))

    if not books:
        logger.error("No trace could be analysed.")
        return 1

    # 3. 결과 출력
    frames = []
    for stem, book in books:
        df = summary_frame(book)
        df.insert(0, "Trace", stem)
        frames.append(df)
    summary = pd.concat(frames, ignore_index=True)

    print("\n=== Combustion Analysis Results ===")
    print(summary.to_string(index=False))

    # 4. 내보내기
    if args.export_summary:
        write_summary(summary, args.export_summary)

    multiple = len(books) > 1
    if args.export_series:
        for stem, book in books:
            export_series(book, _series_path(args.export_series, stem, multiple))

    if args.plot_dir:
        args.plot_dir.mkdir(parents=True, exist_ok=True)
        for stem, book in books:
            for kind in CHART_LABELS:
                fig = plot_cases(
                    book, kind, args.plot_dir / f"{stem}_{kind}.png", window=params.window
                )
                plt.close(fig)
        logger.info(f"Charts written to {args.plot_dir}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
