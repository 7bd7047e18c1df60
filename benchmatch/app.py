import argparse
import json
from pathlib import Path
from typing import List, Optional

from . import __version__
from .client import ApiError, ResourceApiClient
from .env import load_env, settings_from_env
from .interviews import derive_interviews, filter_interviews, interview_stats
from .logger import configure_logger, get_logger
from .mapper import extract_array, map_api_resources
from .matching import filter_matches, find_matches, score_breakdown
from .models import INTERVIEW_STATUSES, RESOURCE_STATUSES, MatchRecommendation, Resource
from .reports import (
    filter_resources,
    resource_statistics,
    status_distribution,
    top_skills,
    weekly_atp_summary,
)
from .requirements import load_requirements, requirement_counts, search_requirements
from .retry import CircuitOpenError
from .schema import validate_resource_payload_strict
from .softblocks import collect_soft_blocks, create_soft_block, filter_blocks, is_active


def _read_json(path_str: str):
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")


def _client(args: argparse.Namespace) -> ResourceApiClient:
    return ResourceApiClient(args.settings)


def load_resources(args: argparse.Namespace) -> List[Resource]:
    """Resources from --input when given, otherwise from the API."""
    if getattr(args, "input", None):
        records = extract_array(_read_json(args.input))
        if isinstance(records, dict):
            records = [records]
        return map_api_resources(records)
    with _client(args) as client:
        return client.list_resources()


def _skill_summary(resource: Resource, limit: int = 3) -> str:
    names = [s.name for s in resource.skills or [] if s.type == "primary"][:limit]
    return ", ".join(names) or "-"


def cmd_resources(args: argparse.Namespace) -> None:
    resources = filter_resources(
        load_resources(args),
        search=args.search or "",
        status=args.status,
        location=args.location,
        skill=args.skill,
        min_experience=args.min_experience,
    )
    if not resources:
        print("No resources match the filters.")
        return
    print(f"Found {len(resources)} resources:\n")
    for r in resources:
        blocked = " [soft-blocked]" if r.soft_blocks else ""
        print(f"{r.employee_id}  {r.name}{blocked}")
        print(f"  Designation: {r.designation or '-'}")
        print(f"  Location: {r.location or '-'}")
        print(f"  Status: {r.status}")
        print(f"  Skills: {_skill_summary(r)}")
        print()


def cmd_show(args: argparse.Namespace) -> None:
    if args.input:
        matches = [r for r in load_resources(args) if args.id in (r.id, r.employee_id)]
        if not matches:
            raise SystemExit(f"Resource not found: {args.id}")
        resource = matches[0]
    else:
        with _client(args) as client:
            resource = client.get_resource(args.id)

    print(f"ID: {resource.employee_id}")
    print(f"  Name: {resource.name}")
    print(f"  Email: {resource.email or '-'}")
    print(f"  Designation: {resource.designation or '-'}")
    print(f"  Location: {resource.location or '-'}")
    print(f"  Status: {resource.status}")
    print(f"  Available from: {resource.availability_date or 'immediately'}")
    if resource.total_experience is not None:
        print(f"  Experience: {resource.total_experience} years")
    print("  Skills:")
    for s in resource.skills or []:
        print(f"    - {s.name} ({s.level}, {s.type})")
    if resource.certifications:
        print("  Certifications:")
        for c in resource.certifications:
            print(f"    - {c.name}" + (f" ({c.issuer})" if c.issuer else ""))
    if resource.project_experience:
        print("  Projects:")
        for p in resource.project_experience:
            print(f"    - {p.project_name} [{p.role or '-'}]")
    for block in resource.soft_blocks:
        print(f"  Soft block: {block.reason} until {block.end_date}")


def cmd_stats(args: argparse.Namespace) -> None:
    resources = load_resources(args)
    api_stats = None
    if not args.input:
        try:
            with _client(args) as client:
                api_stats = client.get_statistics()
        except ApiError as e:
            get_logger().warning("Statistics endpoint unavailable, using local counts", error=str(e))

    stats = resource_statistics(resources, api_stats)
    print(f"Total resources: {stats['total']}")
    print(f"ATP: {stats['atp']} ({stats['atp_rate']}%)")
    print(f"Deployed: {stats['deployed']} (utilization {stats['utilization_rate']}%)")
    print(f"Soft blocked: {stats['soft_blocked']}")
    print("\nStatus distribution:")
    for label, count in status_distribution(resources):
        print(f"  {label}: {count}")
    print("\nTop primary skills:")
    for skill, count in top_skills(resources):
        print(f"  {skill}: {count}")


def cmd_requirements(args: argparse.Namespace) -> None:
    requirements = load_requirements(load_resources(args))
    counts = requirement_counts(requirements)
    shown = search_requirements(requirements, args.search or "")
    print(f"Open: {counts['open']}  Filled: {counts['filled']}  Urgent: {counts['urgent']}\n")
    for req in shown:
        skills = ", ".join(s.name for s in req.required_skills or []) or "-"
        print(f"{req.id}  {req.title} [{req.priority}/{req.status}]")
        print(f"  Location: {req.location}  Domain: {req.domain}  Start: {req.start_date}")
        print(f"  Required skills: {skills}")
        print()


def cmd_interviews(args: argparse.Namespace) -> None:
    interviews = derive_interviews(load_resources(args))
    stats = interview_stats(interviews)
    print(
        f"Total: {stats['total']}  Scheduled: {stats['scheduled']}  "
        f"Pending feedback: {stats['pending_feedback']}  Selected: {stats['selected']}\n"
    )
    for i in filter_interviews(interviews, args.status):
        print(f"[{i.interview_status}] {i.resource_name} -> {i.requirement_title} ({i.interview_date})")


def cmd_softblocks(args: argparse.Namespace) -> None:
    active = True if args.active else (False if args.expired else None)
    entries = filter_blocks(collect_soft_blocks(load_resources(args)), active=active)
    if not entries:
        print("No soft blocks found.")
        return
    for e in entries:
        state = {True: "active", False: "expired", None: "unknown"}[is_active(e)]
        print(f"{e.resource_name or e.resource_id} ({e.resource_designation or '-'}, {e.resource_location or '-'})")
        print(f"  {e.block.reason}: {e.block.start_date} -> {e.block.end_date} [{state}]")


def cmd_softblock(args: argparse.Namespace) -> None:
    with _client(args) as client:
        try:
            create_soft_block(client, args.resource, args.account, args.until)
        except ValueError as e:
            raise SystemExit(str(e))
    print(f"Soft block created for {args.resource} until {args.until}")


def _print_match(m: MatchRecommendation, explain: bool) -> None:
    print(f"{m.match_score:>3}  {m.resource.name} -> {m.requirement.title}")
    for reason in m.reasons:
        print(f"     + {reason}")
    if m.skill_gaps:
        print(f"     gaps: {', '.join(m.skill_gaps)}")
    if m.gross_margin is not None:
        print(f"     gross margin: {m.gross_margin}%")
    if explain:
        breakdown = score_breakdown(m.resource, m.requirement)
        for name, (points, weight) in breakdown["factors"].items():
            print(f"     {name}: {points:g}/{weight}")


def cmd_match(args: argparse.Namespace) -> None:
    resources = load_resources(args)
    matches = filter_matches(
        find_matches(resources, load_requirements(resources)),
        requirement_id=args.requirement,
        location=args.location,
    )
    if args.limit is not None:
        matches = matches[:args.limit]
    if not matches:
        print("No matches found. Try adjusting your filters.")
        return
    for m in matches:
        _print_match(m, args.explain)


def _summary_json(summary) -> dict:
    return {
        "week": summary.week,
        "totalATP": summary.total_atp,
        "newATP": summary.new_atp,
        "deployed": summary.deployed,
        "softBlocked": summary.soft_blocked,
        "bySkill": summary.by_skill,
        "byLocation": summary.by_location,
        "topRecommendations": [
            {
                "resourceId": m.resource.employee_id,
                "resourceName": m.resource.name,
                "requirementId": m.requirement.id,
                "requirementTitle": m.requirement.title,
                "matchScore": m.match_score,
            }
            for m in summary.top_recommendations
        ],
    }


def cmd_weekly_atp(args: argparse.Namespace) -> None:
    summary = weekly_atp_summary(load_resources(args))
    if args.json:
        print(json.dumps(_summary_json(summary), indent=2, ensure_ascii=False))
        return
    print(f"Weekly ATP report ({summary.week})")
    print(f"  Total ATP: {summary.total_atp}")
    print(f"  New this week: {summary.new_atp}")
    print(f"  Deployed this week: {summary.deployed}")
    print(f"  Soft blocked: {summary.soft_blocked}")
    print("  By skill:")
    for skill, count in sorted(summary.by_skill.items(), key=lambda kv: -kv[1]):
        print(f"    {skill}: {count}")
    print("  By location:")
    for location, count in sorted(summary.by_location.items(), key=lambda kv: -kv[1]):
        print(f"    {location}: {count}")
    if summary.top_recommendations:
        print("  Top recommendations:")
        for m in summary.top_recommendations:
            print(f"    {m.match_score}  {m.resource.name} -> {m.requirement.title}")


def cmd_validate(args: argparse.Namespace) -> None:
    records = extract_array(_read_json(args.input))
    if isinstance(records, dict):
        records = [records]
    if not isinstance(records, list):
        raise SystemExit("Input must be a resource object or a list of them")

    invalid = 0
    for index, record in enumerate(records):
        ok, errors = validate_resource_payload_strict(record)
        if not ok:
            invalid += 1
            print(f"Invalid record {index}:")
            for e in errors:
                print(f" - {e}")
    if invalid:
        raise SystemExit(2)
    print(f"Valid ({len(records)} records)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="benchmatch", description="Bench management and resource matching")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--api-url", help="Resource API base URL (or set BENCHMATCH_API_URL)")

    # SUPPRESS keeps a root-level --api-url when the subcommand omits it
    remote = argparse.ArgumentParser(add_help=False)
    remote.add_argument("--api-url", default=argparse.SUPPRESS, help="Resource API base URL")

    source = argparse.ArgumentParser(add_help=False, parents=[remote])
    source.add_argument("--input", help="Read resources from a JSON file instead of the API")

    subparsers = parser.add_subparsers(dest="command")

    res = subparsers.add_parser("resources", parents=[source], help="List bench resources with filters")
    res.add_argument("--search", help="Match name, email, designation or skill")
    res.add_argument("--status", choices=RESOURCE_STATUSES, help="Only this status")
    res.add_argument("--location", help="Exact location")
    res.add_argument("--skill", help="Exact skill name")
    res.add_argument("--min-experience", type=float, help="Minimum total experience in years")
    res.set_defaults(func=cmd_resources)

    show = subparsers.add_parser("show", parents=[source], help="Show one resource")
    show.add_argument("--id", required=True, help="Resource or employee id")
    show.set_defaults(func=cmd_show)

    st = subparsers.add_parser("stats", parents=[source], help="Headline bench statistics")
    st.set_defaults(func=cmd_stats)

    req = subparsers.add_parser("requirements", parents=[source], help="List requirements derived from considerations")
    req.add_argument("--search", help="Match title, description or domain")
    req.set_defaults(func=cmd_requirements)

    itv = subparsers.add_parser("interviews", parents=[source], help="Interview tracker")
    itv.add_argument("--status", choices=INTERVIEW_STATUSES, help="Only this interview status")
    itv.set_defaults(func=cmd_interviews)

    sbl = subparsers.add_parser("softblocks", parents=[source], help="List soft blocks")
    group = sbl.add_mutually_exclusive_group()
    group.add_argument("--active", action="store_true", help="Only blocks that have not ended")
    group.add_argument("--expired", action="store_true", help="Only blocks that have ended")
    sbl.set_defaults(func=cmd_softblocks)

    sb = subparsers.add_parser("softblock", parents=[remote], help="Soft-block a resource against an account")
    sb.add_argument("--resource", required=True, help="Resource id")
    sb.add_argument("--account", required=True, help="Account id")
    sb.add_argument("--until", required=True, help="Blocked-until date (YYYY-MM-DD)")
    sb.set_defaults(func=cmd_softblock)

    mt = subparsers.add_parser("match", parents=[source], help="Rank resources against requirements")
    mt.add_argument("--requirement", help="Only this requirement id")
    mt.add_argument("--location", help="Only resources at this exact location")
    mt.add_argument("--limit", type=int, help="Show at most N matches")
    mt.add_argument("--explain", action="store_true", help="Show per-factor points")
    mt.set_defaults(func=cmd_match)

    wk = subparsers.add_parser("weekly-atp", parents=[source], help="Weekly ATP summary")
    wk.add_argument("--json", action="store_true", help="Emit JSON")
    wk.set_defaults(func=cmd_weekly_atp)

    val = subparsers.add_parser("validate", help="Validate resource JSON against the API schema")
    val.add_argument("--input", required=True, help="Path to resource JSON")
    val.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    args.settings = settings_from_env().with_overrides(api_url=args.api_url)
    logger = configure_logger(level=args.settings.log_level, log_dir=args.settings.log_dir)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except (ApiError, CircuitOpenError) as e:
        raise SystemExit(str(e))
    finally:
        if not getattr(args, "input", None):
            logger.log_metrics_summary()


if __name__ == "__main__":
    main()
