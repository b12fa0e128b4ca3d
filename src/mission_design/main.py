#!/usr/bin/env python3
"""
===============================================================================
SMALL-SATELLITE MISSION DESIGN - MAIN ENTRY POINT
===============================================================================
Loads a mission configuration and prints the orbit, ground-contact and
delta-v analysis of the mission.

USAGE:
    mission-design                          # Default config
    mission-design --config my.yaml         # Custom config
    mission-design --days 3 --step 10       # Longer, finer pass scan
    mission-design --workers 4              # Parallel station scans
    mission-design --porkchop mars          # Add a Mars porkchop sweep

OUTPUTS (stdout):
    Derived orbital parameters
    Ground-station pass table and contact metrics
    Orbital lifetime and debris-mitigation compliance
    Delta-v budget
    Porkchop summary (minimum-C3 cell), when requested

DEPENDENCIES:
    numpy, pandas, pyyaml
===============================================================================
"""

import argparse
import dataclasses
import logging
import sys
import time

import pandas as pd

from mission_design.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    MissionConfig,
    PorkchopRequest,
    build_mission,
    load_config,
)
from mission_design.core.constants import EARTH_EQUATORIAL_RADIUS, TargetBody
from mission_design.dynamics.environment import check_compliance
from mission_design.dynamics.orbital_mechanics import compute_derived_params
from mission_design.guidance.interplanetary import (
    min_c3_point,
    porkchop_grid,
)
from mission_design.guidance.maneuver_planner import (
    ManeuverPlanner,
    budget_to_dataframe,
)
from mission_design.navigation.pass_prediction import (
    compute_pass_metrics,
    passes_to_dataframe,
    predict_passes,
)
from mission_design.performance.parallel import ParallelSim

logger = logging.getLogger('MISSION_DESIGN')


def setup_logging(verbose: bool = False, log_file: str = None):
    """Route log records to stdout and, optionally, a log file."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
        force=True,
    )


def _section(title: str):
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def report_orbit(mission: MissionConfig):
    """Print derived orbital parameters."""
    params = compute_derived_params(mission.elements)
    _section("ORBIT")
    el = mission.elements
    print(f"  a = {el.semi_major_axis:.1f} km, e = {el.eccentricity:.4f}, "
          f"i = {el.inclination:.2f} deg")
    print(f"  Type:               {params.orbit_type.value}")
    print(f"  Period:             {params.period / 60.0:.2f} min")
    print(f"  Perigee / apogee:   {params.periapsis_alt:.1f} / {params.apoapsis_alt:.1f} km")
    print(f"  RAAN drift:         {params.raan_drift:+.4f} deg/day")
    print(f"  Sun-synchronous:    {params.is_sun_sync} (LTAN {params.ltan})")
    print(f"  Eclipse fraction:   {params.eclipse_fraction:.3f}")


def report_passes(mission: MissionConfig, parallel: ParallelSim):
    """Run the visibility scan and print passes and contact metrics."""
    passes = predict_passes(mission.elements, mission.epoch, mission.stations,
                            mission.scan_days, mission.step_sec, parallel=parallel)
    metrics = compute_pass_metrics(passes, mission.scan_days, mission.data_rate_kbps)

    _section(f"GROUND CONTACTS ({mission.scan_days:g} days)")
    if passes:
        with pd.option_context('display.width', 160, 'display.max_rows', 200):
            print(passes_to_dataframe(passes).round(2).to_string(index=False))
    else:
        print("  No passes")
    print(f"\n  Passes/day:         {metrics.passes_per_day:.2f}")
    print(f"  Avg duration:       {metrics.avg_duration_min:.2f} min")
    print(f"  Max gap:            {metrics.max_gap_hours:.2f} h")
    print(f"  Daily contact:      {metrics.daily_contact_min:.1f} min")
    print(f"  Daily data volume:  {metrics.daily_data_mb:.1f} MB")


def report_lifetime(mission: MissionConfig):
    altitude = mission.elements.perigee_radius - EARTH_EQUATORIAL_RADIUS
    result = check_compliance(altitude, mission.ballistic_coeff, mission.solar_activity)
    _section("ORBITAL LIFETIME")
    print(f"  Lifetime:           {result.lifetime_years:.2f} years")
    print(f"  25-year rule:       {'PASS' if result.lifetime_25_year else 'FAIL'}")
    print(f"  5-year rule:        {'PASS' if result.lifetime_5_year else 'FAIL'}")
    print(f"  {result.recommendation}")


def report_budget(mission: MissionConfig):
    """Print the delta-v budget of the mission."""
    altitude = mission.elements.semi_major_axis - EARTH_EQUATORIAL_RADIUS
    budget = ManeuverPlanner().compute_delta_v_budget(
        mission.propulsion, mission.maneuvers, mission.dry_mass, altitude,
        mission.lifetime_years, mission.ballistic_coeff)

    _section("DELTA-V BUDGET")
    print(budget_to_dataframe(budget).round(3).to_string(index=False))
    print(f"\n  Available:          {budget.available_delta_v:.1f} m/s")
    print(f"  Required:           {budget.total_required_delta_v:.1f} m/s")
    print(f"  Margin:             {budget.margin_delta_v:.1f} m/s "
          f"({100.0 * budget.margin_percent:.1f}%, {budget.margin_status.value})")
    print(f"  Drag make-up:       {budget.drag_delta_v_per_year:.2f} m/s/yr")
    print(f"  Propellant left:    {budget.propellant_remaining:.3f} kg")


def report_porkchop(request: PorkchopRequest, parallel: ParallelSim):
    points = porkchop_grid(request.target, request.start_date,
                           request.departure_range_days, request.n_departure,
                           request.min_flight_days, request.max_flight_days,
                           request.n_flight, parallel=parallel)
    best = min_c3_point(points)

    _section(f"PORKCHOP: EARTH -> {request.target.name}")
    print(f"  Valid cells:        {len(points)} / {request.n_departure * request.n_flight}")
    if best is None:
        print("  No feasible transfer in the grid")
        return
    print(f"  Minimum C3:         {best.c3:.2f} km^2/s^2")
    print(f"  Departure:          day {best.departure_day:.1f}")
    print(f"  Flight time:        {best.flight_time_days:.1f} days")
    print(f"  Arrival v_inf:      {best.v_inf_arrive:.3f} km/s")


def main(argv=None):
    """
    Main entry point. Parses command line arguments and runs the mission
    analysis.
    """
    parser = argparse.ArgumentParser(
        description='Small-satellite mission design calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mission-design                        Default mission
  mission-design --config my.yaml       Custom mission
  mission-design --porkchop mars        Include a Mars porkchop sweep
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to mission config YAML')
    parser.add_argument('--days', type=float, default=None,
                        help='Pass scan duration in days (overrides config)')
    parser.add_argument('--step', type=float, default=None,
                        help='Pass scan step in seconds (overrides config)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker processes for scans and sweeps (default: 1)')
    parser.add_argument('--porkchop', type=str, default=None,
                        choices=[body.value for body in TargetBody],
                        help='Run a porkchop sweep to this body')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write the log to this file')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging')

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        if args.config is None and not DEFAULT_CONFIG_PATH.exists():
            mission = build_mission({})
        else:
            mission = build_mission(load_config(args.config))
    except (OSError, ConfigError) as exc:
        logger.error("Cannot load configuration: %s", exc)
        return 1

    overrides = {}
    if args.days is not None:
        overrides['scan_days'] = args.days
    if args.step is not None:
        overrides['step_sec'] = args.step
    if args.porkchop is not None:
        base = mission.porkchop or PorkchopRequest()
        overrides['porkchop'] = dataclasses.replace(base, target=TargetBody(args.porkchop))
    mission = dataclasses.replace(mission, **overrides)

    parallel = ParallelSim(args.workers)

    print("=" * 70)
    print(f"  MISSION: {mission.name}")
    print(f"  Epoch:   {mission.epoch.isoformat()}")
    print(f"  {parallel}")
    print("=" * 70)

    start = time.time()
    report_orbit(mission)
    report_passes(mission, parallel)
    report_lifetime(mission)
    report_budget(mission)
    if mission.porkchop is not None:
        report_porkchop(mission.porkchop, parallel)

    print("\n" + "=" * 70)
    print(f"  ANALYSIS COMPLETE ({time.time() - start:.1f} s)")
    print("=" * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
