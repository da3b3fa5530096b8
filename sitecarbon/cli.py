"""
sitecarbon Command Line Interface (CLI)
=======================================

Interactive terminal dashboard, run like:

    python -m sitecarbon.cli --data "data/website_pollut_clean.csv"

Each command reads from or updates one `Dashboard` and prints the data
product a chart would draw (KPIs, top sites, country map, donut, radar,
scatter summary).

The CLI DOES NOT modify the dataset file.
"""

from __future__ import annotations
import argparse, shlex, sys
from typing import List, Optional

from .config import DashboardConfig, setup_logging
from .engine import Dashboard
from .loader import LoadError, load_sites
from .metrics import get_metric
from .models import GreenFilter, SiteRecord

HELP = """
Commands:
  help
  stats                              KPIs over the whole dataset
  show [n]                           first n records of the current view
  preview                            a couple of random sites per country

  green all|green|not-green          hosting filter
  sites all|none                     site filter
  site "<site>" on|off               check / uncheck one site

  top [n] [metric]                   most polluting sites in the current view
  map [worst|avg] [metric]           per-country aggregates
  geo                                join the map aggregates onto the world GeoJSON
  countries
  donut "<Country>" [metric]
  scatter ["<Country>"]

  radar                              show the selected profiles
  radar add|remove "<site>"
  radar clear|durable|polluting
  quit

Metrics: co2, energy, size
"""

GREEN_WORDS = {"all": GreenFilter.ALL, "green": GreenFilter.GREEN, "not-green": GreenFilter.NOT_GREEN}


def pretty_site(site: str) -> str:
    s = site.strip()
    for prefix in ("https://", "http://"):
        if s.startswith(prefix):
            s = s[len(prefix):]
    if s.startswith("www."):
        s = s[4:]
    return s


def _fmt(v: Optional[float], digits: int = 3) -> str:
    return "-" if v is None else f"{v:.{digits}f}"


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the sitecarbon CLI.

    1) Load dataset
    2) Start an interactive REPL
    """
    defaults = DashboardConfig()
    ap = argparse.ArgumentParser(prog="sitecarbon")
    ap.add_argument("--data", default=defaults.data_path, help="Path to the dataset (.csv or .xlsx)")
    ap.add_argument("--geo", default=defaults.geo_path, help="Path to the world GeoJSON")
    ap.add_argument("--top", type=int, default=defaults.top_n, help="Bars in the top sites view")
    ap.add_argument("--log-level", default=defaults.log_level)
    args = ap.parse_args(argv)

    setup_logging(args.log_level)
    config = DashboardConfig(data_path=args.data, geo_path=args.geo, top_n=args.top, log_level=args.log_level)

    print("Loading dataset...")
    try:
        records = load_sites(config.data_path)
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    dash = Dashboard(records=records, config=config)

    print(f"Loaded {len(records)} sites. Type 'help' for commands.")
    while True:
        try:
            line = input("sitecarbon> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            break
        try:
            handle(dash, line)
        except (ValueError, LoadError) as e:
            print(f"Error: {e}")
    return 0


def handle(dash: Dashboard, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()
    args = parts[1:]

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        k = dash.kpis()
        print(f"Sites: {k.sites} | Countries: {k.countries} | Categories: {k.categories}")
        print(f"Green hosting: {k.green_pct} % | Mean CO2: {k.mean_co2 * 1000:.1f} mg / visit")
        return

    if cmd == "show":
        n = int(args[0]) if args else 10
        rows = dash.view()
        if not rows:
            print("No site selected.")
            return
        _print_rows(rows[:n])
        print(f"({len(rows)} in view)")
        return

    if cmd == "preview":
        from .aggregate import preview
        _print_rows(preview(dash.records))
        return

    if cmd == "green":
        word = args[0].lower() if args else ""
        if word not in GREEN_WORDS:
            raise ValueError("green must be: all | green | not-green")
        dash.set_green_filter(GREEN_WORDS[word])
        print(f"Hosting filter={GREEN_WORDS[word].value}. Size={len(dash.view())}")
        return

    if cmd == "sites":
        word = args[0].lower() if args else ""
        if word == "all":
            dash.select_all_sites()
        elif word == "none":
            dash.select_sites([])
        else:
            raise ValueError("sites must be: all | none")
        print(f"Site filter={dash.state.site_mode.value}. Size={len(dash.view())}")
        return

    if cmd == "site":
        if len(args) < 2 or args[1].lower() not in ("on", "off"):
            raise ValueError('usage: site "<site>" on|off')
        dash.toggle_site(args[0], args[1].lower() == "on")
        print(f"Site filter={dash.state.site_mode.value}. Size={len(dash.view())}")
        return

    if cmd == "top":
        n = int(args[0]) if args and args[0].isdigit() else None
        rest = args[1:] if n is not None else args
        metric = get_metric(rest[0] if rest else "co2")
        rows = dash.top_sites(metric.key, n)
        if not rows:
            print("No data.")
            return
        print(f"Top {len(rows)} by {metric.label}:")
        for i, (r, v) in enumerate(rows, 1):
            print(f"{i:>3}. {pretty_site(r.site)} | {r.country} | {metric.fmt(v)}")
        return

    if cmd == "map":
        for a in args:
            if a.lower() in ("worst", "avg"):
                dash.set_map(mode=a)
            else:
                dash.set_map(metric=a)
        aggs = dash.country_map()
        if not aggs:
            print("No data.")
            return
        m = dash.metric
        print(f"{dash.map_mode.value} by country, {m.label}:")
        for key, agg in sorted(aggs.items(), key=lambda kv: kv[1].value, reverse=True):
            print(f"  {key}: {m.fmt(agg.value)} (n={agg.n_sites}, worst={pretty_site(agg.worst.site)})")
        return

    if cmd == "geo":
        joined = dash.geo_join()
        hits = sum(1 for _, _, agg in joined.rows if agg is not None)
        print(f"{hits}/{len(joined.rows)} features matched | scale max={dash.metric.fmt(joined.max_value)}")
        if joined.unmatched:
            print("Not on the map: " + ", ".join(sorted(joined.unmatched)))
        return

    if cmd == "countries":
        from .aggregate import country_names
        for c in country_names(dash.records):
            print(c)
        return

    if cmd == "donut":
        if not args:
            raise ValueError('usage: donut "<Country>" [metric]')
        metric = get_metric(args[1] if len(args) > 1 else "co2")
        slices = dash.donut(args[0], metric.key)
        if not slices:
            print("No usable data for this country.")
            return
        total = sum(s.value for s in slices) or 1.0
        for s in slices:
            print(f"  {pretty_site(s.site)}: {metric.fmt(s.value)} ({s.value / total * 100:.1f} %)")
        return

    if cmd == "scatter":
        series = dash.scatter(args[0] if args else "ALL")
        if not series.points:
            print("No data.")
            return
        lo, hi = series.x_extent
        print(f"{len(series.points)} points | size {lo:.2f}-{hi:.2f} MB | CO2 max {series.y_max:.3f} g")
        print(f"Green: {len(series.green)} | Not green: {len(series.not_green)} | Categories: {', '.join(series.categories)}")
        outliers = [p for p in series.points if p.outlier]
        print(f"Outliers (CO2 >= {series.threshold:.3f} g): " + ", ".join(pretty_site(p.record.site) for p in outliers))
        return

    if cmd == "radar":
        sub = args[0].lower() if args else "show"
        if sub in ("add", "remove") and len(args) < 2:
            raise ValueError(f'usage: radar {sub} "<site>"')
        if sub == "add":
            if not dash.radar_add(args[1]):
                print(f"Radar holds at most {dash.config.radar_max} distinct sites.")
        elif sub == "remove":
            dash.radar_remove(args[1])
        elif sub == "clear":
            dash.radar_clear()
        elif sub == "durable":
            dash.radar_top_durable()
        elif sub == "polluting":
            dash.radar_top_polluting()
        elif sub != "show":
            raise ValueError("radar subcommand must be: add | remove | clear | durable | polluting")
        _print_radar(dash)
        return

    print("Unknown command. Type 'help'.")


def _print_radar(dash: Dashboard) -> None:
    profiles = dash.radar()
    if not profiles:
        print(f"Select up to {dash.config.radar_max} sites to fill the radar.")
        return
    for p in profiles:
        axes = " ".join(f"{k}={round(v * 100)}" for k, v in p.scores.items())
        print(f"{pretty_site(p.site)}: {axes}")


def _print_rows(rows: List[SiteRecord]) -> None:
    for r in rows:
        green = "green" if r.green_host else "not green"
        print(f"{pretty_site(r.site)} | {r.country} | {r.category} | co2={_fmt(r.co2_grid_grams)}g "
              f"energy={_fmt(r.energy_kwh, 5)}kWh | {green}")


if __name__ == "__main__":
    sys.exit(main())
