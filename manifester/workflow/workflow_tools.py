"""
Optional hand-off to external command-line tools.

Neither tool is required: when one is not installed, or exits with an
error, the step is skipped with a warning and the run still succeeds.
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Union

from ..config.logger_module import log_info, log_warning

PathLike = Union[str, Path]


def run_external(command: List[str], timeout: float = 300.0) -> bool:
    """
    Run an external tool if it is on PATH.

    Returns:
        True if the tool ran and exited successfully
    """
    executable = shutil.which(command[0])
    if executable is None:
        log_warning(f"{command[0]} not found on PATH, skipping")
        return False

    try:
        subprocess.run([executable] + command[1:], check=True, capture_output=True,
                       text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        log_warning(f"{command[0]} exited with status {e.returncode}: {e.stderr.strip()}")
        return False
    except (OSError, subprocess.TimeoutExpired) as e:
        log_warning(f"{command[0]} could not be run: {e}")
        return False

    log_info(f"{command[0]} finished")
    return True


def format_elm(path: PathLike) -> bool:
    """Pretty-print the generated module in place with elm-format."""
    return run_external(["elm-format", "--elm-version=0.19", "--yes", str(path)])


def build_world_topology(countries: PathLike,
                         cities: PathLike,
                         trips: PathLike,
                         output: PathLike) -> bool:
    """Bundle country shapes, cities and trip lines into one TopoJSON file."""
    if not Path(countries).exists():
        log_warning(f"{countries} not found, skipping world topology")
        return False
    Path(output).parent.mkdir(parents=True, exist_ok=True)
    return run_external([
        "topojson",
        "-o", str(output),
        "--id-property", "su_a3",
        "--properties", "name,localname,country",
        "--",
        str(countries), str(cities), str(trips),
    ])
