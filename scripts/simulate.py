"""
Fleet Simulator — sends a synthetic fleet of workloads to a running enforcer
API as one run, so you can see verdicts, deferrals and savings without a
cluster or a cost provider.

Usage:
    # Start the API first:
    #   python -m enforcer.main
    # Then in a separate terminal:
    python scripts/simulate.py                       # 20 workloads, inline demo policy
    python scripts/simulate.py --size 50 --seed 7
    python scripts/simulate.py --policy dev-idle     # use a stored policy
"""

from __future__ import annotations

import argparse
import json
import random
import urllib.error
import urllib.request
from datetime import datetime, timedelta, timezone

API = "http://127.0.0.1:8780"

NAMESPACES = ["dev-alpha", "dev-beta", "feature-login", "staging", "prod"]
APPS = ["api", "worker", "frontend", "cron", "search", "billing"]

DEMO_POLICY = {
    "name": "demo-idle",
    "scope": {"namespaces": {"include": ["dev-*", "feature-*"], "exclude": ["prod"]}},
    "conditions": {"idleWindow": "24h", "minHourlyCost": 0.25},
    "actions": {"type": "scaleToZero", "notify": "none"},
    "enforcement": {"dryRun": True, "maxActionsPerRun": 5},
}


def _request(method: str, path: str, body: dict | None = None) -> dict | None:
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(
        f"{API}{path}",
        data=data,
        headers={"Content-Type": "application/json"},
        method=method,
    )
    try:
        with urllib.request.urlopen(req, timeout=5) as r:
            return json.loads(r.read())
    except (urllib.error.URLError, OSError) as e:
        print(f"  [!] API unreachable: {e}")
        return None


def _stamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def synthetic_fleet(size: int, now: datetime, rng: random.Random) -> list[dict]:
    fleet = []
    for i in range(size):
        annotations = {}
        roll = rng.random()
        if roll < 0.1:
            annotations["finops.io/paused"] = "true"
        elif roll < 0.15:
            annotations["finops.io/exclude"] = "true"
        if rng.random() < 0.8:
            idle_for = timedelta(hours=rng.randint(0, 96))
            annotations["finops.io/last-activity"] = _stamp(now - idle_for)
        fleet.append({
            "workload": {
                "namespace": rng.choice(NAMESPACES),
                "name": f"{rng.choice(APPS)}-{i}",
                "replicas": rng.randint(1, 6),
                "annotations": annotations,
            },
            "cost": {"hourly_cost": round(rng.uniform(0.05, 4.0), 2)},
        })
    return fleet


def main() -> None:
    parser = argparse.ArgumentParser(description="Enforcer fleet simulator")
    parser.add_argument("--size", type=int, default=20, help="Number of workloads (default 20)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--policy", default=None, help="Stored policy name (default: inline demo)")
    args = parser.parse_args()

    health = _request("GET", "/health")
    if not health:
        print(f"[!] Cannot reach enforcer at {API}")
        print("    Start it first: python -m enforcer.main")
        return
    print(f"[✓] Enforcer connected — v{health.get('version', '?')}")

    now = datetime.now(timezone.utc)
    body = {"candidates": synthetic_fleet(args.size, now, random.Random(args.seed)), "now": _stamp(now)}
    if args.policy:
        body["policy_name"] = args.policy
    else:
        body["policy"] = DEMO_POLICY

    plan = _request("POST", "/evaluate/run", body)
    if plan is None:
        return

    for r in plan["results"]:
        status = "✓" if r["matched"] else "·"
        print(f"  {status} {r['workload']:<28} ${r['hourly_cost']:>5.2f}/h  {r['reason']}")

    print(f"\n  Actions:  {len(plan['actions'])}   Deferred: {len(plan['deferred'])}")
    print(f"  Estimated monthly savings: ${plan['estimated_monthly_savings']:,.2f}")


if __name__ == "__main__":
    main()
