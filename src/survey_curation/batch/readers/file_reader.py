"""
Reads contributed tables in any supported format (CSV, JSON, Parquet).
"""

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

from .csv_reader import CSVReader

SUPPORTED_FORMATS = ("csv", "json", "parquet")


class FileReader:
    """Dispatches on file format; every format yields one DataFrame row per table row."""

    def __init__(self, spark: SparkSession):
        self.spark = spark
        self.csv_reader = CSVReader(spark)

    def read(
        self,
        file_path: str,
        file_format: str = "csv",
        schema: StructType | None = None,
        **options
    ) -> DataFrame:
        """
        Read a contributed table.

        Args:
            file_path: Path to the table
            file_format: csv, json or parquet
            schema: Optional explicit schema (ignored for parquet)
            **options: Format options; ``delimiter`` etc. for CSV, ``multi_line``
                for JSON (default True, i.e. one JSON array per file)

        Raises:
            ValueError: If the format is not supported
        """
        file_format = file_format.lower()
        if file_format not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported file format: {file_format}; expected one of {SUPPORTED_FORMATS}")

        if file_format == "csv":
            return self.csv_reader.read(file_path, schema=schema, **options)
        if file_format == "parquet":
            return self.spark.read.parquet(file_path)

        multi_line = options.get("multi_line", True)
        reader = self.spark.read.option("multiLine", str(multi_line).lower())
        if schema is not None:
            reader = reader.schema(schema)
        return reader.json(file_path)
