"""Human-readable hints for well-known git configuration keys."""

from __future__ import annotations

from typing import Dict

GENERIC_DESCRIPTION = "Git configuration option"

CONFIG_KEY_DESCRIPTIONS: Dict[str, str] = {
    "user.name": "Author name recorded on commits",
    "user.email": "Author email recorded on commits",
    "user.signingkey": "Key id used to sign commits and tags",
    "core.editor": "Editor launched for commit messages",
    "core.autocrlf": "Line ending conversion (true/false/input)",
    "core.safecrlf": "Reject or warn on irreversible line ending conversion",
    "core.filemode": "Track the executable bit",
    "core.ignorecase": "Treat file names case-insensitively",
    "core.quotepath": "Quote non-ASCII characters in paths",
    "core.bare": "Repository has no working tree",
    "core.hookspath": "Directory searched for hooks",
    "core.pager": "Pager used for long output",
    "init.defaultbranch": "Branch name used by git init",
    "branch.autosetupmerge": "Set up upstream tracking for new branches",
    "branch.autosetuprebase": "Rebase instead of merge for new tracking branches",
    "merge.tool": "Tool launched by git mergetool",
    "merge.conflictstyle": "Conflict marker style (merge/diff3/zdiff3)",
    "merge.ff": "Fast-forward policy (true/false/only)",
    "pull.rebase": "Rebase local commits on pull (true/false/merges)",
    "pull.ff": "Fast-forward policy for pull",
    "push.default": "Refs pushed when none are given (simple/current/upstream/matching)",
    "push.followtags": "Push annotated tags reachable from pushed refs",
    "push.autosetupremote": "Create upstream tracking on first push",
    "remote.origin.url": "URL of the origin remote",
    "remote.origin.fetch": "Fetch refspec for origin",
    "remote.pushdefault": "Remote used by default for push",
    "diff.tool": "Tool launched by git difftool",
    "diff.algorithm": "Diff algorithm (myers/minimal/patience/histogram)",
    "diff.renames": "Rename detection (true/false/copies)",
    "log.date": "Default date format for log output",
    "commit.template": "File used as the initial commit message",
    "commit.gpgsign": "Sign every commit",
    "tag.gpgsign": "Sign every annotated tag",
    "gpg.format": "Signature format (openpgp/x509/ssh)",
    "color.ui": "Colour output (true/false/auto)",
    "credential.helper": "Helper that stores credentials",
    "credential.username": "Default username for authentication",
    "http.sslverify": "Verify TLS certificates",
    "http.proxy": "Proxy used for HTTP remotes",
    "submodule.recurse": "Recurse into submodules by default",
    "rebase.autostash": "Stash local changes around a rebase",
    "rebase.autosquash": "Honour fixup!/squash! commits during rebase",
    "rerere.enabled": "Record and reuse conflict resolutions",
    "fetch.prune": "Drop stale remote-tracking refs on fetch",
    "lfs.url": "Git LFS endpoint",
    "gc.auto": "Loose object threshold for automatic gc",
}


def describe_config_key(key: str) -> str:
    return CONFIG_KEY_DESCRIPTIONS.get(key.strip().lower(), GENERIC_DESCRIPTION)


__all__ = ["CONFIG_KEY_DESCRIPTIONS", "GENERIC_DESCRIPTION", "describe_config_key"]
