#!/usr/bin/env python3
"""
Daily Check-in Simulator for the burnout engine.

Generates a synthetic history of daily burnout self-assessments into the
local cache, then prints the resulting risk assessment and intervention plan.

Usage:
    python scripts/checkin_simulator.py --profile rising --days 28
    python scripts/checkin_simulator.py --profile recovering --user demo-user
    python scripts/checkin_simulator.py --profile steady --dry-run
"""

import os
import sys
import random
import asyncio
import argparse
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from burnout_engine.models import DIMENSIONS, Assessment  # noqa: E402
from burnout_engine.repository import FallbackRepository, LocalAssessmentCache  # noqa: E402
from burnout_engine.scoring import MAX_ANSWER, MIN_ANSWER, build_assessment  # noqa: E402
from burnout_engine.service import BurnoutService  # noqa: E402


# Load environment variables
load_dotenv()

# Target mean score at the start and end of the simulated period
PROFILES = {
    "steady": (2.0, 2.0),
    "rising": (1.8, 4.6),
    "recovering": (4.4, 1.8),
}

# How far a single answer may stray from the day's target
ANSWER_JITTER = 0.5

DEFAULT_CACHE_PATH = ".burnout_cache.json"


def target_score(profile: str, day_index: int, days: int) -> float:
    """Linear interpolation of the profile's target for one day."""
    start, end = PROFILES[profile]
    if days <= 1:
        return end
    return start + (end - start) * day_index / (days - 1)


def generate_answers(target: float, rng: random.Random) -> dict:
    """Five answers scattered around the target, clamped to the valid range."""
    answers = {}
    for name in DIMENSIONS:
        value = round(target + rng.uniform(-ANSWER_JITTER, ANSWER_JITTER))
        answers[name] = max(MIN_ANSWER, min(MAX_ANSWER, value))
    return answers


def generate_history(
    profile: str,
    days: int,
    end_date: Optional[date] = None,
    seed: Optional[int] = None,
) -> List[Assessment]:
    """
    Build one scored assessment per day ending on end_date.

    Args:
        profile: steady, rising or recovering
        days: Number of consecutive days to generate
        end_date: Last simulated day (defaults to today)
        seed: Random seed for repeatable output

    Returns:
        Assessments in ascending date order
    """
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile: {profile}")
    if days < 1:
        raise ValueError("days must be at least 1")

    rng = random.Random(seed)
    end_date = end_date or date.today()
    history = []
    for i in range(days):
        day = end_date - timedelta(days=days - 1 - i)
        answers = generate_answers(target_score(profile, i, days), rng)
        history.append(build_assessment(answers, assessment_date=day))
    return history


def print_risk(risk) -> None:
    print(f"\n[RISK] score={risk.risk_score} level={risk.risk_level.value} trend={risk.trend.value}")
    if risk.weeks_until_burnout is not None:
        print(f"[RISK] Projected to cross the high band in {risk.weeks_until_burnout} week(s)")
    factors = risk.factors
    print(
        f"[RISK] energy={factors.energy_trend} stress={factors.stress_level} "
        f"engagement_days={factors.engagement_days} chronic={factors.chronic_stress_detected} "
        f"confidence={factors.confidence_level}"
    )


def print_plan(plan) -> None:
    print(f"\n[PLAN] type={plan.type}")
    for action in plan.actions:
        print(f"  - [{action.priority.value}] {action.title} ({action.estimated_time})")
    for resource in plan.resources:
        print(f"  * {resource.title}: {resource.url}")


async def run(profile: str, days: int, user_id: Optional[str], cache_path: Optional[str], seed: Optional[int]):
    cache = LocalAssessmentCache(cache_path)
    history = generate_history(profile, days, seed=seed)
    for assessment in history:
        cache.put(user_id, assessment)
    print(f"[INFO] Wrote {len(history)} assessments to {cache_path or 'memory'}")

    service = BurnoutService(FallbackRepository(cache))
    risk = await service.get_latest_risk_assessment(user_id)
    print_risk(risk)
    print_plan(service.get_intervention_plan(risk))


def main():
    parser = argparse.ArgumentParser(
        description="Daily Check-in Simulator for the burnout engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Four weeks of steadily worsening check-ins
  python scripts/checkin_simulator.py --profile rising --days 28

  # Recovery history for a named user, repeatable
  python scripts/checkin_simulator.py --profile recovering --user demo-user --seed 7

  # Compute without touching the cache file
  python scripts/checkin_simulator.py --profile steady --dry-run
        """,
    )

    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default="rising",
        help="History shape to generate (default: rising)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=28,
        help="Number of days to generate, at most 30 are kept (default: 28)",
    )
    parser.add_argument(
        "--user",
        help="User id to store the history under (default: guest)",
    )
    parser.add_argument(
        "--cache",
        default=os.getenv("BURNOUT_LOCAL_CACHE_PATH", DEFAULT_CACHE_PATH),
        help="Local cache file (default: $BURNOUT_LOCAL_CACHE_PATH or .burnout_cache.json)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for repeatable histories",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Keep the generated history in memory only",
    )

    args = parser.parse_args()

    if args.days < 1:
        parser.error("--days must be at least 1")

    print("=" * 60)
    print("Daily Check-in Simulator")
    print("=" * 60)

    try:
        asyncio.run(run(
            args.profile,
            args.days,
            args.user,
            None if args.dry_run else args.cache,
            args.seed,
        ))
        print("\n[INFO] Simulation complete")
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")
    except Exception as e:
        print(f"\n[ERROR] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
