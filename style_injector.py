"""Write the theme stylesheet, with colour scheme values substituted, into xpui."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Optional

from file_ops import read_text, write_text

USER_CSS_NAME = "user.css"
COLOR_TOKEN_RE = re.compile(r"var\(\s*--spice-(rgb-)?([A-Za-z0-9_-]+)\s*\)")
HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def normalize_color(value: str) -> str:
    value = value.strip()
    match = HEX_RE.match(value)
    if match:
        return "#" + match.group(1)
    return value


def hex_to_rgb(value: str) -> Optional[str]:
    match = HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return ",".join(str(int(digits[i : i + 2], 16)) for i in (0, 2, 4))


def render_color_block(scheme: Mapping[str, str]) -> str:
    """A ``:root`` rule declaring each scheme colour as ``--spice-KEY`` and ``--spice-rgb-KEY``."""
    lines = [":root {"]
    for key, value in scheme.items():
        lines.append(f"  --spice-{key}: {normalize_color(value)};")
        rgb = hex_to_rgb(value)
        if rgb:
            lines.append(f"  --spice-rgb-{key}: {rgb};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_user_css(css_text: Optional[str], scheme: Optional[Mapping[str, str]]) -> str:
    if not scheme:
        return css_text or ""
    if not css_text:
        return render_color_block(scheme)

    def substitute(match: re.Match) -> str:
        rgb, key = match.group(1), match.group(2)
        value = scheme.get(key)
        if value is None:
            return match.group(0)
        if rgb:
            return hex_to_rgb(value) or match.group(0)
        return normalize_color(value)

    return render_color_block(scheme) + COLOR_TOKEN_RE.sub(substitute, css_text)


def inject_user_css(xpui_dir: Path, css_source: Optional[Path], scheme: Optional[Mapping[str, str]]) -> Path:
    """Rewrite ``<xpui>/user.css`` from the two inputs only; never merges with old content."""
    css_text: Optional[str] = None
    if css_source is not None and Path(css_source).is_file():
        css_text = read_text(css_source)
    target = Path(xpui_dir) / USER_CSS_NAME
    write_text(target, render_user_css(css_text, scheme))
    return target
