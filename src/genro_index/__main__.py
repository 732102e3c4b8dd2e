# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
genro-index CLI entry point.

Usage:
    genro-index ./public                      # List ./public on 127.0.0.1:8000
    genro-index ./public --port 9000 --icons  # Override port, show icons

Options come from (later overrides earlier): built-in defaults,
``GENRO_INDEX_*`` environment variables, command line arguments.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 8000,
    "hidden": False,
    "icons": False,
    "view": "tiles",
    "debug": False,
}


def _index_opts_spec(
    directory: str,
    host: str,
    port: int,
    hidden: bool,
    icons: bool,
    view: str,
    debug: bool,
) -> None:
    """Reference function for SmartOptions type extraction (no defaults)."""


def load_options(argv: list[str]) -> SmartOptions:
    """Merge defaults, environment and argv into one options object."""
    env_argv_opts = SmartOptions(_index_opts_spec, env="GENRO_INDEX", argv=argv)
    return SmartOptions(DEFAULTS) + env_argv_opts


def cmd_serve(argv: list[str]) -> int:
    """Serve a directory listing."""
    import uvicorn

    from .app import create_app

    opts = load_options(argv)
    directory = Path(opts["directory"] or ".").resolve()
    if not directory.is_dir():
        print(f"Error: '{directory}' is not a directory.", file=sys.stderr)
        return 1

    debug = bool(opts["debug"])
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO)

    app = create_app(
        directory,
        debug=debug,
        access_log=True,
        hidden=bool(opts["hidden"]),
        icons=bool(opts["icons"]),
        view=opts["view"],
    )

    print("genro-index starting...", flush=True)
    print(f"Directory: {directory}", flush=True)
    print(f"Server: http://{opts['host']}:{opts['port']}", flush=True)
    print(flush=True)

    try:
        uvicorn.run(app, host=opts["host"], port=int(opts["port"]), log_level="warning")
    except KeyboardInterrupt:
        print("\nShutdown.")

    return 0


def main() -> int:
    """Main entry point."""
    if "--version" in sys.argv or "-v" in sys.argv:
        from . import __version__

        print(f"genro-index {__version__}")
        return 0

    if "--help" in sys.argv or "-h" in sys.argv or len(sys.argv) == 1:
        print("Usage: genro-index <directory> [options]")
        print()
        print("Arguments:")
        print("  directory         Directory to list")
        print()
        print("Options:")
        print("  --host HOST       Server host (default: 127.0.0.1)")
        print("  --port PORT       Server port (default: 8000)")
        print("  --hidden          Show dot-files")
        print("  --icons           Show file icons")
        print("  --view VIEW       tiles or details (default: tiles)")
        print("  --debug           Debug logging, tracebacks in 500 responses")
        print("  --version, -v     Show version")
        print("  --help, -h        Show this help")
        return 0

    return cmd_serve(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
