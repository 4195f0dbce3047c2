"""
Canonical table writer.

Writes the three artifacts of a run to a destination directory: the
canonical CSV, the dataset metadata JSON and the run report JSON. Files are
written once, at the end of a successful run.
"""

from pathlib import Path

from survey_curation.core.exporter import Exporter
from survey_curation.core.models import CurationResult
from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)


class CanonicalWriter:
    """
    Writes a CurationResult to files named after the study.
    """

    def __init__(self, output_dir: str | Path, exporter: Exporter | None = None):
        """
        Args:
            output_dir: Destination directory (created if missing)
            exporter: Serializer for the canonical table
        """
        self.output_dir = Path(output_dir)
        self.exporter = exporter or Exporter()

    def paths(self, study_id: str) -> dict[str, Path]:
        stem = f"study_{study_id}"
        return {
            "table": self.output_dir / f"{stem}_canonical.csv",
            "metadata": self.output_dir / f"{stem}_metadata.json",
            "report": self.output_dir / f"{stem}_report.json",
        }

    def write(self, result: CurationResult) -> dict[str, Path]:
        """
        Write every artifact.

        Args:
            result: Output of a curation run

        Returns:
            Artifact name -> written path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        paths = self.paths(result.report.study_id)

        with open(paths["table"], "w", newline="", encoding="utf-8") as f:
            self.exporter.serialize(result.records, f)

        paths["metadata"].write_text(
            result.summary.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
        )
        paths["report"].write_text(result.report.model_dump_json(indent=2), encoding="utf-8")

        logger.info(
            f"Wrote {len(result.records)} canonical rows to {paths['table']}",
            extra={"study_id": result.report.study_id, "output_dir": str(self.output_dir)},
        )
        return paths
