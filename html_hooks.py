"""Register user.css, extensions and custom apps in xpui's ``index.html``."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Optional

from app_bundler import app_id_for
from extension_injector import MODULE_SCRIPT_SUFFIX
from file_ops import read_text, write_text
from launch_utils import log_launch_event, print_warning
from style_injector import USER_CSS_NAME

INDEX_FILE = "index.html"
BLOCK_START = "<!-- spicetify-injected:start -->"
BLOCK_END = "<!-- spicetify-injected:end -->"
INJECTION_MARKER = "</body>"
BLOCK_RE = re.compile(re.escape(BLOCK_START) + r".*?" + re.escape(BLOCK_END) + r"\n?", re.DOTALL)


def build_block(extensions: Iterable[str], custom_apps: Iterable[str]) -> str:
    lines = [BLOCK_START, f'<link rel="stylesheet" class="userCSS" href="{USER_CSS_NAME}">']
    for name in extensions:
        file_name = Path(name).name
        if file_name.endswith(MODULE_SCRIPT_SUFFIX):
            lines.append(f'<script type="module" src="{file_name}"></script>')
        else:
            lines.append(f'<script defer src="{file_name}"></script>')
    for app in custom_apps:
        app_id = app_id_for(app)
        lines.append(f'<link rel="stylesheet" href="{app_id}.css">')
        lines.append(f'<script defer src="{app_id}.js"></script>')
    lines.append(BLOCK_END)
    return "\n".join(lines) + "\n"


def inject_block(html: str, block: str) -> Optional[str]:
    """Swap any previous block for ``block``; None when ``</body>`` is missing."""
    cleaned = BLOCK_RE.sub("", html)
    index = cleaned.lower().rfind(INJECTION_MARKER)
    if index < 0:
        return None
    return cleaned[:index] + block + cleaned[index:]


def register_entries(xpui_dir: Path, extensions: Iterable[str], custom_apps: Iterable[str]) -> bool:
    index_path = Path(xpui_dir) / INDEX_FILE
    if not index_path.is_file():
        print_warning(f"{INDEX_FILE} not found in {xpui_dir}; extensions will not be loaded.")
        log_launch_event("html_hooks", "index-missing", {"path": str(index_path)})
        return False
    html = read_text(index_path)
    extension_list: List[str] = list(extensions)
    app_list: List[str] = list(custom_apps)
    updated = inject_block(html, build_block(extension_list, app_list))
    if updated is None:
        print_warning(f"No {INJECTION_MARKER} tag in {index_path}; skipped registering entries.")
        log_launch_event("html_hooks", "marker-missing", {"path": str(index_path)})
        return False
    if updated != html:
        write_text(index_path, updated)
    log_launch_event("html_hooks", "registered", {"extensions": extension_list, "custom_apps": app_list})
    return True
