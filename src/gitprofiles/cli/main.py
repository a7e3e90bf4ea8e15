#!/usr/bin/env python3
"""Entry point for the gitprofiles CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from textwrap import dedent
from typing import Any, List

from gitprofiles import __version__
from gitprofiles.app.profiles import ApplyResult, ProfileManager, build_profile_manager
from gitprofiles.domain.descriptions import describe_config_key
from gitprofiles.domain.profiles import (
    BackendPartialFailureError,
    ConfigItem,
    ConfigScope,
    Profile,
    ProfileComparison,
    ProfileError,
)
from gitprofiles.domain.project import find_project_root
from gitprofiles.settings import SETTINGS
from gitprofiles.utils.telemetry import EventLog


HELP_OVERVIEW = dedent(
    """
    Save, compare and apply named sets of git config values.

    Typical flow:
      - gitprofiles create work --from-current --tag work
      - gitprofiles compare <id>      - show what applying would change
      - gitprofiles apply <id>        - write the profile's values
    """
)


def _default_project_path(path_arg: str | None) -> Path:
    if path_arg:
        return Path(path_arg).expanduser().resolve()
    return Path(os.getcwd())


def _build_manager(args: argparse.Namespace) -> ProfileManager:
    project_root = find_project_root(_default_project_path(getattr(args, "path", None)))
    return build_profile_manager(SETTINGS, project_root)


def _parse_config_arg(raw: str) -> ConfigItem:
    scope = ConfigScope.LOCAL
    body = raw
    prefix, sep, rest = raw.partition(":")
    if sep and prefix.strip().lower() in {item.value for item in ConfigScope}:
        scope = ConfigScope.parse(prefix)
        body = rest
    if "=" not in body:
        raise ValueError(f"invalid config '{raw}': expected [scope:]key=value")
    key, value = body.split("=", 1)
    key = key.strip()
    if not key:
        raise ValueError("config key must not be empty")
    return ConfigItem(key=key, value=value, scope=scope)


def _emit_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _print_configs(configs: List[ConfigItem], *, indent: str = "  ") -> None:
    if not configs:
        print(f"{indent}(no configs)")
        return
    for item in configs:
        print(f"{indent}[{item.scope.value}] {item.key}={item.value}  # {describe_config_key(item.key)}")


def _print_profile(profile: Profile, *, active: bool) -> None:
    marker = " (active)" if active else ""
    print(f"{profile.name}{marker}")
    print(f"  id: {profile.id}")
    if profile.description:
        print(f"  description: {profile.description}")
    if profile.tags:
        print(f"  tags: {', '.join(profile.tags)}")
    print(f"  icon: {profile.icon or '-'}")
    print(f"  created: {profile.created}  modified: {profile.modified}")
    print("  configs:")
    _print_configs(profile.configs, indent="    ")


def _print_comparison(profile: Profile, comparison: ProfileComparison) -> None:
    summary = comparison.summary()
    print(
        "Compare {name}: add={add} update={update} remove={remove}".format(name=profile.name, **summary)
    )
    if comparison.is_empty():
        print("Backend matches profile")
        return
    for item in comparison.to_add:
        print(f"  + [{item.scope.value}] {item.key}={item.value}")
    for update in comparison.to_update:
        print(f"  ~ [{update.scope.value}] {update.key}: {update.old_value}→{update.new_value}")
    for item in comparison.to_remove:
        print(f"  - [{item.scope.value}] {item.key}={item.value}")


def _print_apply_result(result: ApplyResult) -> None:
    print(f"Applied {result.profile.name}: set={len(result.applied)} removed={len(result.removed)}")
    for failure in result.failures:
        print(f"  ! {failure.describe()}")


def _list_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    profiles = manager.get_all_profiles()
    active = manager.get_active_profile()
    active_id = active.id if active else None
    if getattr(args, "json", False):
        _emit_json(
            {
                "activeProfile": active_id,
                "profiles": [profile.to_dict() for profile in profiles],
            }
        )
        return 0
    if not profiles:
        print("No profiles stored. Create one with `gitprofiles create NAME --from-current`.")
        return 0
    for profile in profiles:
        status = "● active" if profile.id == active_id else f"{len(profile.configs)} configs"
        print(f"{profile.id}  {profile.name}  [{profile.icon or '-'}]  {status}")
    return 0


def _show_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    profile = manager.require_profile(args.profile_id)
    if getattr(args, "json", False):
        _emit_json(profile.to_dict())
        return 0
    active = manager.get_active_profile()
    _print_profile(profile, active=active is not None and active.id == profile.id)
    return 0


def _current_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    configs = manager.get_current_configs()
    if getattr(args, "json", False):
        _emit_json([item.to_dict() for item in configs])
        return 0
    root = manager.project_root
    print(f"Project root: {root if root else '(none, global scope only)'}")
    _print_configs(configs)
    return 0


def _create_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    tags = list(args.tag) if args.tag else None
    if args.from_current and args.template:
        print("--from-current and --template are mutually exclusive", file=sys.stderr)
        return 1
    if args.from_current:
        profile = manager.create_profile_from_current(args.name, args.description or "", tags)
    elif args.template:
        profile = manager.create_profile_from_template(args.template, args.name, args.description, tags)
    else:
        configs = [_parse_config_arg(raw) for raw in args.config]
        profile = manager.create_profile(args.name, args.description or "", configs, tags)
    if getattr(args, "json", False):
        _emit_json(profile.to_dict())
    else:
        print(f"Created profile {profile.name} ({profile.id}) with {len(profile.configs)} configs")
    return 0


def _update_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    changes: dict[str, Any] = {}
    if args.name is not None:
        changes["name"] = args.name
    if args.description is not None:
        changes["description"] = args.description
    if args.tag:
        changes["tags"] = list(args.tag)
    if args.config:
        changes["configs"] = [_parse_config_arg(raw) for raw in args.config]
    if not changes:
        print("Nothing to update; pass --name, --description, --tag or --config", file=sys.stderr)
        return 1
    profile = manager.update_profile(args.profile_id, **changes)
    print(f"Updated profile {profile.name} ({profile.id})")
    return 0


def _delete_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    manager.delete_profile(args.profile_id)
    print(f"Deleted profile {args.profile_id}")
    return 0


def _compare_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    profile = manager.require_profile(args.profile_id)
    comparison = manager.compare_profiles(profile.id)
    if getattr(args, "json", False):
        payload = comparison.to_dict()
        payload["profile"] = profile.id
        _emit_json(payload)
        return 0
    _print_comparison(profile, comparison)
    return 0


def _apply_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    as_json = getattr(args, "json", False)
    try:
        result = manager.apply_profile(args.profile_id, prune=args.prune)
    except BackendPartialFailureError as exc:
        if as_json and isinstance(exc.result, ApplyResult):
            _emit_json(exc.result.to_dict())
        elif isinstance(exc.result, ApplyResult):
            _print_apply_result(exc.result)
        print(str(exc), file=sys.stderr)
        return 1
    if as_json:
        _emit_json(result.to_dict())
    else:
        _print_apply_result(result)
    return 0


def _export_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    if args.output:
        target = manager.export_profile_to(args.profile_id, Path(args.output).expanduser())
        print(f"Exported profile to {target}")
        return 0
    print(manager.export_profile(args.profile_id))
    return 0


def _import_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    profile = manager.import_profile_from(Path(args.file).expanduser())
    print(f"Imported profile {profile.name} ({profile.id})")
    return 0


def _active_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    profile = manager.get_active_profile()
    if getattr(args, "json", False):
        _emit_json(profile.to_dict() if profile else None)
        return 0
    if profile is None:
        print("No active profile")
        return 0
    print(f"{profile.name} ({profile.id})")
    return 0


def _templates_cmd(args: argparse.Namespace) -> int:
    manager = _build_manager(args)
    templates = manager.list_templates()
    if getattr(args, "json", False):
        _emit_json(
            [
                {
                    "id": template.template_id,
                    "name": template.name,
                    "description": template.description,
                    "tags": list(template.tags),
                    "configs": [item.to_dict() for item in template.configs],
                }
                for template in templates
            ]
        )
        return 0
    for template in templates:
        print(f"{template.template_id}: {template.name} - {template.description} ({len(template.configs)} configs)")
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    log = EventLog(SETTINGS)
    if args.telemetry_command == "report":
        print(json.dumps(log.report(args.recent), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        log.clear()
        print(f"Removed {log.path}")
        return 0
    if args.telemetry_command == "tail":
        for evt in log.tail(args.limit):
            print(json.dumps(evt, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def _add_common(parser: argparse.ArgumentParser, *, json_flag: bool = True) -> None:
    parser.add_argument("--path", help="Project path (default: current directory)")
    if json_flag:
        parser.add_argument("--json", action="store_true", help="Emit machine-readable output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitprofiles",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"gitprofiles {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List stored profiles")
    _add_common(list_cmd)
    list_cmd.set_defaults(func=_list_cmd)

    show_cmd = sub.add_parser("show", help="Show one profile")
    show_cmd.add_argument("profile_id")
    _add_common(show_cmd)
    show_cmd.set_defaults(func=_show_cmd)

    current_cmd = sub.add_parser("current", help="Show live local and global git config")
    _add_common(current_cmd)
    current_cmd.set_defaults(func=_current_cmd)

    create_cmd = sub.add_parser("create", help="Create a profile")
    create_cmd.add_argument("name")
    create_cmd.add_argument("--description", default=None)
    create_cmd.add_argument("--tag", action="append", default=[], help="Tag (repeatable; first tag picks the icon)")
    create_cmd.add_argument(
        "--config",
        action="append",
        default=[],
        metavar="[SCOPE:]KEY=VALUE",
        help="Config entry (repeatable, scope defaults to local)",
    )
    create_cmd.add_argument("--from-current", action="store_true", help="Snapshot live git config")
    create_cmd.add_argument("--template", help="Start from a packaged template id")
    _add_common(create_cmd)
    create_cmd.set_defaults(func=_create_cmd)

    update_cmd = sub.add_parser("update", help="Update profile fields")
    update_cmd.add_argument("profile_id")
    update_cmd.add_argument("--name", default=None)
    update_cmd.add_argument("--description", default=None)
    update_cmd.add_argument("--tag", action="append", default=[], help="Replace tags (repeatable)")
    update_cmd.add_argument(
        "--config",
        action="append",
        default=[],
        metavar="[SCOPE:]KEY=VALUE",
        help="Replace the config list (repeatable)",
    )
    _add_common(update_cmd, json_flag=False)
    update_cmd.set_defaults(func=_update_cmd)

    delete_cmd = sub.add_parser("delete", help="Delete a profile")
    delete_cmd.add_argument("profile_id")
    _add_common(delete_cmd, json_flag=False)
    delete_cmd.set_defaults(func=_delete_cmd)

    compare_cmd = sub.add_parser("compare", help="Diff a profile against live git config")
    compare_cmd.add_argument("profile_id")
    _add_common(compare_cmd)
    compare_cmd.set_defaults(func=_compare_cmd)

    apply_cmd = sub.add_parser("apply", help="Write a profile's values to git config")
    apply_cmd.add_argument("profile_id")
    apply_cmd.add_argument(
        "--prune",
        action="store_true",
        help="Also unset keys present in git config but absent from the profile",
    )
    _add_common(apply_cmd)
    apply_cmd.set_defaults(func=_apply_cmd)

    export_cmd = sub.add_parser("export", help="Export a profile as JSON")
    export_cmd.add_argument("profile_id")
    export_cmd.add_argument("--output", help="Write to file instead of stdout")
    _add_common(export_cmd, json_flag=False)
    export_cmd.set_defaults(func=_export_cmd)

    import_cmd = sub.add_parser("import", help="Import a profile from a JSON file")
    import_cmd.add_argument("file")
    _add_common(import_cmd, json_flag=False)
    import_cmd.set_defaults(func=_import_cmd)

    active_cmd = sub.add_parser("active", help="Show the active profile")
    _add_common(active_cmd)
    active_cmd.set_defaults(func=_active_cmd)

    templates_cmd = sub.add_parser("templates", help="List packaged profile templates")
    _add_common(templates_cmd)
    templates_cmd.set_defaults(func=_templates_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect the local event log")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)

    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated event counts")
    telemetry_report.add_argument("--recent", type=int, default=0, help="Only count the last N events")
    telemetry_report.set_defaults(func=_telemetry_cmd)

    telemetry_clear = telemetry_sub.add_parser("clear", help="Remove the event log")
    telemetry_clear.set_defaults(func=_telemetry_cmd)

    telemetry_tail = telemetry_sub.add_parser("tail", help="Print the last N events")
    telemetry_tail.add_argument("--limit", type=int, default=20)
    telemetry_tail.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return args.func(args)
    except ProfileError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
