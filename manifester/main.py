"""
Odyssey manifester entry point.

Synchronizes odyssey.yaml with the coordinate cache, then regenerates the
trip lines, gallery derivatives and the Manifest module. There are no
command-line flags: all settings come from the environment or a .env file.

Usage:
    manifester
    python -m manifester
"""

import sys

from .assets.assets_errors import AssetError
from .config.config_module import ConfigError, get_config, load_config
from .config.logger_module import initialize_logger, log_error
from .geocode.geocode_errors import GeocodeError
from .manifest.manifest_errors import ManifestError
from .places.places_errors import PlacesError
from .workflow.workflow_config import WorkflowConfig
from .workflow.workflow_orchestrator import ManifestOrchestrator, RunReport


def print_report(report: RunReport) -> None:
    """Print a short summary of a finished run."""
    print("\n" + "=" * 60)
    print("Manifest run complete")
    print("=" * 60)
    print(f"  - Lookups issued:      {report.lookups_issued}")
    print(f"  - Cache entries added: {report.entries_added}")
    print(f"  - Cache rewritten:     {'yes' if report.cache_persisted else 'no'}")
    print(f"  - Gallery images:      {report.image_count}")
    print(f"  - Derivatives written: {report.derivatives_written}")
    print(f"  - Manifest:            {report.artifact_path}")
    print("=" * 60)


def main() -> int:
    """Main entry point for the manifester."""
    load_config()
    initialize_logger(
        log_level=get_config("LOG_LEVEL", "INFO"),
        log_file=get_config("LOG_FILE", "logs/manifester.log"),
    )

    try:
        config = WorkflowConfig.from_env()
    except ConfigError as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        return 1

    try:
        report = ManifestOrchestrator(config).run()
    except (ConfigError, PlacesError, GeocodeError, AssetError, ManifestError) as e:
        log_error(f"Run aborted: {type(e).__name__}: {e}")
        print(f"\n{type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
