from __future__ import annotations

import re
from dataclasses import dataclass, field

_ENTRY_RE = re.compile(r"(?P<name>[^(]+)\((?P<ty>.+)\)")


@dataclass(frozen=True)
class ScriptEntry:
    name: str
    ty: str
    tags: list[str] = field(default_factory=lambda: ["all"])


def parse_ls_plain(text: str) -> list[ScriptEntry]:
    """Parse `ls --plain` output.

    Tag headers (`#tag`) open a group; `name(type)` tokens that follow
    belong to it. A script without tags is tagged `all`.
    """
    tags: list[str] = []
    scripts: list[ScriptEntry] = []
    ret: list[ScriptEntry] = []
    for token in re.split(r"\s+", re.sub(r"[\[\]]", " ", text)):
        if not token:
            continue
        if token.startswith("#"):
            if scripts:
                ret.extend(scripts)
                tags = []
                scripts = []
            tags.append(token[1:])
            continue
        match = _ENTRY_RE.fullmatch(token)
        if match is None:
            continue
        scripts.append(ScriptEntry(name=match["name"], ty=match["ty"], tags=list(tags) or ["all"]))
    ret.extend(scripts)
    return ret


def parse_id_name_lines(text: str) -> list[tuple[int, str]]:
    ret: list[tuple[int, str]] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        try:
            ret.append((int(parts[0]), parts[1]))
        except ValueError:
            continue
    return ret
